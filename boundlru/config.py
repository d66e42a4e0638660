"""
Configuration for boundlru cache stores.

Limits can come from code, from any mapping (for example a parsed settings
file) or from the environment. Both snake_case names and the camelCase names
used by older deployments (``totalSizeLimit``, ``totalCountLimit``) are
accepted.
"""
import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from boundlru.exceptions import ConfigurationError

ENV_PREFIX = "BOUNDLRU_"


class CacheConfig(BaseModel):
    """Configuration for an ``LRUCacheStore``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    # New items won't drive the total size of all payloads above this; 0 = unlimited
    total_size_limit: int = Field(default=0, ge=0, alias="totalSizeLimit")
    # New items won't drive the entry count above this; 0 = unlimited
    total_count_limit: int = Field(default=0, ge=0, alias="totalCountLimit")
    check_invariants: bool = Field(default=False, alias="checkInvariants")
    lock_timeout: Optional[float] = Field(default=None, gt=0, alias="lockTimeout")
    name: str = Field(default="default", min_length=1)


def load_config(values: Optional[Mapping[str, Any]] = None) -> CacheConfig:
    """
    Build a ``CacheConfig`` from a mapping.

    Args:
        values: Configuration values; unknown keys are ignored

    Returns:
        CacheConfig: The validated configuration

    Raises:
        ConfigurationError: If a value is missing its expected type or range
    """
    if values is None:
        return CacheConfig()
    if isinstance(values, CacheConfig):
        return values
    if not isinstance(values, Mapping):
        raise ConfigurationError(
            f"Cache configuration must be a mapping, got {type(values).__name__}"
        )
    try:
        return CacheConfig.model_validate(dict(values))
    except PydanticValidationError as e:
        raise ConfigurationError("Invalid cache configuration", original_exception=e) from e


def config_from_environment(
    prefix: str = ENV_PREFIX,
    environ: Optional[Mapping[str, str]] = None,
) -> CacheConfig:
    """
    Build a ``CacheConfig`` from environment variables.

    Environment variables (with the default prefix):
    - BOUNDLRU_TOTAL_SIZE_LIMIT: Aggregate payload byte limit (0 = unlimited)
    - BOUNDLRU_TOTAL_COUNT_LIMIT: Entry count limit (0 = unlimited)
    - BOUNDLRU_CHECK_INVARIANTS: Verify internal consistency after mutations (true/false)
    - BOUNDLRU_LOCK_TIMEOUT: Lock acquisition deadline in seconds
    - BOUNDLRU_CACHE_NAME: Store name used in logs and stats

    Args:
        prefix: Variable name prefix
        environ: Mapping to read instead of ``os.environ``

    Returns:
        CacheConfig: The validated configuration
    """
    env = os.environ if environ is None else environ
    names = {
        "total_size_limit": "TOTAL_SIZE_LIMIT",
        "total_count_limit": "TOTAL_COUNT_LIMIT",
        "check_invariants": "CHECK_INVARIANTS",
        "lock_timeout": "LOCK_TIMEOUT",
        "name": "CACHE_NAME",
    }
    values = {}
    for field_name, suffix in names.items():
        raw = env.get(f"{prefix}{suffix}")
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()
    return load_config(values)
