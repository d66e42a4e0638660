"""
Structured logging system for boundlru.

This module provides structured JSON logging, correlation IDs for tracing
cache activity back to the request that caused it, a metrics logger for
cache events and configurable log rotation.

The library never configures logging on import. Applications opt in by
calling ``initialize_logging`` (or a preset from ``logging_config``).
"""
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Context variable for correlation ID
correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message', 'asctime', 'extra_fields', 'correlation_id',
})


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Each record becomes one JSON object with timestamp, level, logger name,
    message, source location, the correlation ID when one is active, and any
    extra fields passed by the caller.
    """

    def __init__(self, include_correlation_id: bool = True):
        super().__init__()
        self.include_correlation_id = include_correlation_id

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if self.include_correlation_id:
            current_correlation_id = correlation_id.get()
            if current_correlation_id:
                log_entry["correlation_id"] = current_correlation_id
            elif getattr(record, 'correlation_id', None):
                log_entry["correlation_id"] = record.correlation_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_entry.update(extra_fields)

        for key, value in record.__dict__.items():
            if key.startswith('_') or key in _RESERVED_ATTRS:
                continue
            if isinstance(value, (str, int, float, bool, list, dict, type(None))):
                log_entry[key] = value

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class CorrelationIdFilter(logging.Filter):
    """Log filter that stamps the active correlation ID onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_correlation_id = correlation_id.get()
        if current_correlation_id:
            record.correlation_id = current_correlation_id
        return True


class BoundLRULoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that automatically adds correlation IDs and structured data.
    """

    def __init__(self, logger, correlation_id=None, extra_fields=None):
        super().__init__(logger, {})
        self.correlation_id = correlation_id
        self.extra_fields = extra_fields or {}

    def process(self, msg, kwargs):
        if self.correlation_id:
            kwargs.setdefault('extra', {})['correlation_id'] = self.correlation_id

        if self.extra_fields:
            kwargs.setdefault('extra', {})['extra_fields'] = self.extra_fields

        return msg, kwargs

    def bind(self, **kwargs):
        """Create a new adapter with additional context."""
        new_extra_fields = {**self.extra_fields, **kwargs}
        return BoundLRULoggerAdapter(self.logger, self.correlation_id, new_extra_fields)


class MetricsLogger:
    """
    Logger for cache events.

    Emits DEBUG records carrying an ``event_type`` field so that structured
    log pipelines can count hits, misses, evictions and rejections.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize metrics logger.

        Args:
            logger: Base logger instance
        """
        self.logger = logger

    def _event(self, level: int, message: str, event_type: str, cache_name: str, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            message,
            extra={
                'extra_fields': {
                    'event_type': event_type,
                    'cache_name': cache_name,
                    **kwargs
                }
            }
        )

    def log_cache_hit(self, cache_name: str, key: str, **kwargs):
        self._event(logging.DEBUG, "Cache hit", 'cache_hit', cache_name, cache_key=key, **kwargs)

    def log_cache_miss(self, cache_name: str, key: str, **kwargs):
        self._event(logging.DEBUG, "Cache miss", 'cache_miss', cache_name, cache_key=key, **kwargs)

    def log_eviction(self, cache_name: str, key: str, size: int, **kwargs):
        """
        Log an entry evicted to make room under the capacity limits.

        Args:
            cache_name: Name of the cache store
            key: Evicted key
            size: Byte size of the evicted payload
            **kwargs: Additional metadata
        """
        self._event(
            logging.DEBUG, "Cache eviction", 'cache_eviction', cache_name,
            cache_key=key, entry_size=size, **kwargs
        )

    def log_rejection(self, cache_name: str, key: str, size: int, size_limit: int, **kwargs):
        """
        Log a payload refused because it can never fit the size limit.

        Args:
            cache_name: Name of the cache store
            key: Key the caller tried to set
            size: Byte size of the refused payload
            size_limit: Size limit in force
            **kwargs: Additional metadata
        """
        self._event(
            logging.DEBUG, "Cache admission rejected", 'cache_rejection', cache_name,
            cache_key=key, entry_size=size, size_limit=size_limit, **kwargs
        )


class ThreadSafeLogManager:
    """
    Thread-safe centralized log manager for boundlru.

    Owns the root handlers installed by ``initialize_logging`` and hands out
    named loggers and adapters.
    """

    def __init__(self,
                 log_level: str = "INFO",
                 log_format: str = "json",
                 log_file: Optional[str] = None,
                 max_bytes: int = 10 * 1024 * 1024,  # 10MB
                 backup_count: int = 5,
                 include_correlation_id: bool = True):
        """
        Initialize the log manager.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_format: Log format ('json' or 'text')
            log_file: Path to log file (optional)
            max_bytes: Maximum size of log file before rotation
            backup_count: Number of backup files to keep
            include_correlation_id: Whether to include correlation IDs
        """
        self.log_level = getattr(logging, log_level.upper())
        self.log_format = log_format
        self.log_file = log_file
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.include_correlation_id = include_correlation_id

        self._lock = threading.RLock()
        self._initialized = False
        self._loggers: Dict[str, logging.Logger] = {}
        self._handlers = []

        self._safe_initialize()

        self.logger = self.get_logger("boundlru")
        self.metrics = MetricsLogger(self.logger)

    def _safe_initialize(self):
        with self._lock:
            if not self._initialized:
                try:
                    self._configure_root_logger()
                except (OSError, ValueError) as e:
                    # Fall back to basic console logging if handlers cannot be built
                    logging.basicConfig(level=self.log_level)
                    logging.error(f"Failed to initialize boundlru logging: {e}")
                self._initialized = True

    def _build_formatter(self) -> logging.Formatter:
        if self.log_format == "json":
            return StructuredFormatter(self.include_correlation_id)
        return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    def _configure_root_logger(self):
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        formatter = self._build_formatter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(formatter)
        if self.include_correlation_id:
            console_handler.addFilter(CorrelationIdFilter())
        self._attach(root_logger, console_handler)

        if self.log_file:
            log_path = Path(self.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(formatter)
            if self.include_correlation_id:
                file_handler.addFilter(CorrelationIdFilter())
            self._attach(root_logger, file_handler)

    def _attach(self, root_logger: logging.Logger, handler: logging.Handler):
        root_logger.addHandler(handler)
        self._handlers.append(handler)

    def shutdown(self):
        """Detach and close the handlers this manager installed."""
        with self._lock:
            root_logger = logging.getLogger()
            for handler in self._handlers:
                root_logger.removeHandler(handler)
                handler.close()
            self._handlers = []
            self._initialized = False

    def get_logger(self, name: str) -> logging.Logger:
        with self._lock:
            if name not in self._loggers:
                logger = logging.getLogger(name)
                logger.setLevel(self.log_level)
                self._loggers[name] = logger
            return self._loggers[name]

    def get_adapter(self, name: str, correlation_id: Optional[str] = None,
                    **extra_fields) -> BoundLRULoggerAdapter:
        logger = self.get_logger(name)
        return BoundLRULoggerAdapter(logger, correlation_id, extra_fields)


# Global log manager instance with thread safety
_log_manager: Optional[ThreadSafeLogManager] = None
_log_manager_lock = threading.RLock()


def initialize_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    include_correlation_id: bool = True,
    force: bool = False,
) -> ThreadSafeLogManager:
    """
    Initialize the global logging system.

    Args:
        log_level: Logging level
        log_format: Log format ('json' or 'text')
        log_file: Path to log file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        include_correlation_id: Whether to include correlation IDs
        force: Replace an existing configuration instead of reusing it

    Returns:
        Configured log manager instance
    """
    global _log_manager

    with _log_manager_lock:
        if _log_manager is not None and force:
            _log_manager.shutdown()
            _log_manager = None
        if _log_manager is None:
            _log_manager = ThreadSafeLogManager(
                log_level=log_level,
                log_format=log_format,
                log_file=log_file,
                max_bytes=max_bytes,
                backup_count=backup_count,
                include_correlation_id=include_correlation_id,
            )

    return _log_manager


def shutdown_logging():
    """Tear down the global log manager, if any."""
    global _log_manager

    with _log_manager_lock:
        if _log_manager is not None:
            _log_manager.shutdown()
            _log_manager = None


def get_logger(name: str) -> logging.Logger:
    with _log_manager_lock:
        if _log_manager is None:
            initialize_logging()
        return _log_manager.get_logger(name)


def get_adapter(name: str, correlation_id: Optional[str] = None, **extra_fields) -> BoundLRULoggerAdapter:
    with _log_manager_lock:
        if _log_manager is None:
            initialize_logging()
        return _log_manager.get_adapter(name, correlation_id, **extra_fields)


def get_metrics_logger() -> MetricsLogger:
    with _log_manager_lock:
        if _log_manager is None:
            initialize_logging()
        return _log_manager.metrics


def set_correlation_id(correlation_id_value: str):
    """Set the correlation ID for the current context."""
    correlation_id.set(correlation_id_value)


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def clear_correlation_id():
    correlation_id.set(None)


class CorrelationIdContext:
    """
    Context manager for correlation ID management.
    """

    def __init__(self, correlation_id_value: Optional[str] = None):
        """
        Initialize correlation ID context.

        Args:
            correlation_id_value: Correlation ID value (auto-generated if None)
        """
        self.correlation_id_value = correlation_id_value or str(uuid.uuid4())
        self._token = None

    def __enter__(self):
        self._token = correlation_id.set(self.correlation_id_value)
        return self.correlation_id_value

    def __exit__(self, exc_type, exc_val, exc_tb):
        correlation_id.reset(self._token)


def with_correlation_id(correlation_id_value: Optional[str] = None) -> CorrelationIdContext:
    """
    Create a correlation ID context.

    Args:
        correlation_id_value: Correlation ID value (auto-generated if None)

    Returns:
        CorrelationIdContext instance
    """
    return CorrelationIdContext(correlation_id_value)
