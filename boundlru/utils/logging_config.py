"""
Logging configuration utilities for boundlru.

This module provides pre-configured logging setups for different environments.
"""
import os
from typing import Any, Dict, Optional

from .logging import initialize_logging, ThreadSafeLogManager


class LoggingPresets:
    """Pre-configured logging setups for different environments."""

    @staticmethod
    def development(log_file: Optional[str] = None, force: bool = False) -> ThreadSafeLogManager:
        """
        Development logging: DEBUG level so every hit, miss and eviction shows up.

        Args:
            log_file: Optional log file path
            force: Replace an existing configuration

        Returns:
            Configured log manager
        """
        return initialize_logging(
            log_level="DEBUG",
            log_format="json",
            log_file=log_file,
            max_bytes=5 * 1024 * 1024,  # 5MB
            backup_count=3,
            include_correlation_id=True,
            force=force,
        )

    @staticmethod
    def production(log_file: Optional[str] = None, force: bool = False) -> ThreadSafeLogManager:
        """
        Production logging: INFO level, JSON lines, larger rotation window.

        Args:
            log_file: Optional log file path
            force: Replace an existing configuration

        Returns:
            Configured log manager
        """
        return initialize_logging(
            log_level="INFO",
            log_format="json",
            log_file=log_file,
            max_bytes=50 * 1024 * 1024,  # 50MB
            backup_count=10,
            include_correlation_id=True,
            force=force,
        )

    @staticmethod
    def testing(log_file: Optional[str] = None, force: bool = False) -> ThreadSafeLogManager:
        """Testing logging: warnings only, plain text."""
        return initialize_logging(
            log_level="WARNING",
            log_format="text",
            log_file=log_file,
            max_bytes=1 * 1024 * 1024,  # 1MB
            backup_count=1,
            include_correlation_id=False,
            force=force,
        )


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def configure_from_environment(force: bool = False) -> ThreadSafeLogManager:
    """
    Configure logging based on environment variables.

    Environment variables:
    - BOUNDLRU_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - BOUNDLRU_LOG_FORMAT: Log format (json, text)
    - BOUNDLRU_LOG_FILE: Log file path
    - BOUNDLRU_LOG_MAX_BYTES: Max file size in bytes
    - BOUNDLRU_LOG_BACKUP_COUNT: Number of backup files
    - BOUNDLRU_LOG_INCLUDE_CORRELATION_ID: Include correlation IDs (true/false)

    Returns:
        Configured log manager
    """
    return initialize_logging(
        log_level=os.getenv("BOUNDLRU_LOG_LEVEL", "INFO"),
        log_format=os.getenv("BOUNDLRU_LOG_FORMAT", "json"),
        log_file=os.getenv("BOUNDLRU_LOG_FILE"),
        max_bytes=int(os.getenv("BOUNDLRU_LOG_MAX_BYTES", "10485760")),  # 10MB default
        backup_count=int(os.getenv("BOUNDLRU_LOG_BACKUP_COUNT", "5")),
        include_correlation_id=_env_flag("BOUNDLRU_LOG_INCLUDE_CORRELATION_ID", "true"),
        force=force,
    )


def get_logging_config() -> Dict[str, Any]:
    """
    Get current logging configuration.

    Returns:
        Dictionary with current logging configuration
    """
    from . import logging as boundlru_logging

    manager = boundlru_logging._log_manager
    if manager is None:
        return {"status": "not_initialized"}

    return {
        "status": "initialized",
        "log_level": manager.log_level,
        "log_format": manager.log_format,
        "log_file": manager.log_file,
        "max_bytes": manager.max_bytes,
        "backup_count": manager.backup_count,
        "include_correlation_id": manager.include_correlation_id,
        "initialized": manager._initialized,
    }
