"""
Payload size measurement.

Cache limits are expressed in bytes, so every payload needs a byte size.
Byte sequences and strings are measured directly. Structured values that know
their own size implement the ``Sizeable`` protocol; anything else is measured
by serializing it with orjson, which costs a full encode.
"""
from typing import Any

import orjson
from typing_extensions import Protocol, runtime_checkable

from boundlru.exceptions import ValidationError
from boundlru.utils.validation import validate_payload


@runtime_checkable
class Sizeable(Protocol):
    """A value that can report its own data size in bytes."""

    def size(self) -> int:
        ...


def size_of(payload: Any) -> int:
    """
    Determine the byte size of a payload.

    Args:
        payload: The value to measure

    Returns:
        Non-negative byte size

    Raises:
        ValidationError: If the payload is None or its size is not knowable
    """
    validate_payload(payload)

    if isinstance(payload, (bytes, bytearray)):
        return len(payload)

    if isinstance(payload, memoryview):
        return payload.nbytes

    if isinstance(payload, str):
        return len(payload.encode("utf-8"))

    # runtime_checkable only checks the attribute exists; numpy's .size is an int
    if isinstance(payload, Sizeable) and callable(payload.size):
        size = payload.size()
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ValidationError(
                f"{type(payload).__name__}.size() must return a non-negative integer, got {size!r}"
            )
        return size

    try:
        return len(orjson.dumps(payload))
    except TypeError as e:
        raise ValidationError(
            f"Cannot determine the size of a {type(payload).__name__} payload: {e}"
        ) from e
