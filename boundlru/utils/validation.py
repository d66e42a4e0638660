from typing import Any, Iterable, List

from boundlru.exceptions import ValidationError


def validate_cache_key(key: str):
    """Ensures the cache key is a non-empty string."""
    if not isinstance(key, str):
        raise ValidationError("Cache key must be a string.")

    if not key:
        raise ValidationError("Cache key cannot be empty.")


def validate_keys(keys: Iterable[str]) -> List[str]:
    """
    Checks that a batch of keys is an iterable (not a bare string) and returns
    it as a list. Individual keys are not validated; lookups treat invalid
    keys as absent.
    """
    if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable):
        raise ValidationError("Keys must be an iterable of strings.")

    return list(keys)


def validate_payload(payload: Any):
    """Ensures a payload was supplied."""
    if payload is None:
        raise ValidationError("Payload cannot be None.")


def validate_limit(limit: int, name: str = "limit"):
    """Validates a capacity limit (0 means unbounded)."""
    # bool is an int subclass but never a meaningful limit
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"{name} must be an integer.")

    if limit < 0:
        raise ValidationError(f"{name} cannot be negative.")


def validate_lock_timeout(lock_timeout):
    """Validates an optional lock acquisition deadline in seconds."""
    if lock_timeout is None:
        return

    if isinstance(lock_timeout, bool) or not isinstance(lock_timeout, (int, float)):
        raise ValidationError("Lock timeout must be a number of seconds.")

    if lock_timeout <= 0:
        raise ValidationError("Lock timeout must be positive.")
