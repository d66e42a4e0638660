"""
Timeout utilities for boundlru operations.

Cache stores serialize every operation behind a single lock. This module puts
an optional deadline on acquiring it so callers can bound how long they wait
on a contended store.
"""
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from boundlru.exceptions import OperationError


class TimeoutError(OperationError):
    """Raised when an operation times out."""
    pass


@contextmanager
def acquire_lock(
    lock: Any,
    seconds: Optional[float] = None,
    timeout_error_message: Optional[str] = None,
) -> Iterator[None]:
    """
    Hold ``lock`` for the duration of a ``with`` block.

    The lock is released on every exit path, including exceptions raised
    inside the block.

    Args:
        lock: A ``threading.Lock`` or ``threading.RLock``
        seconds: Acquisition deadline; None waits indefinitely
        timeout_error_message: Custom error message for timeout

    Raises:
        TimeoutError: If the lock could not be acquired within ``seconds``
    """
    if seconds is None:
        acquired = lock.acquire()
    else:
        acquired = lock.acquire(timeout=seconds)

    if not acquired:
        message = timeout_error_message or f"Lock acquisition timed out after {seconds}s"
        raise TimeoutError(message)

    try:
        yield
    finally:
        lock.release()
