"""boundlru utility modules."""

from .logging import (
    get_logger,
    get_adapter,
    get_metrics_logger,
    initialize_logging,
    shutdown_logging,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
    with_correlation_id
)
from .logging_config import (
    LoggingPresets,
    configure_from_environment,
    get_logging_config
)
from .sizing import Sizeable, size_of
from .timeout import acquire_lock

__all__ = [
    # Logging functions
    "get_logger",
    "get_adapter",
    "get_metrics_logger",
    "initialize_logging",
    "shutdown_logging",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "with_correlation_id",
    # Logging configuration
    "LoggingPresets",
    "configure_from_environment",
    "get_logging_config",
    # Payload sizing
    "Sizeable",
    "size_of",
    # Locking
    "acquire_lock",
]
