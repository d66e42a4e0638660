class BoundLRUError(Exception):
    """Base class for all boundlru exceptions."""
    pass

class ConfigurationError(BoundLRUError):
    """Raised when a cache configuration cannot be loaded or applied."""
    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original: {str(self.original_exception)})"
        return self.message

class CacheStoreError(BoundLRUError):
    """Base class for cache store related errors."""
    pass

class InvariantViolationError(CacheStoreError):
    """
    Raised when the recency list, the index and the counters disagree.

    This always indicates a defect in the store; the library never catches it.
    """
    def __init__(self, message: str, store_name: str = None):
        super().__init__(message)
        self.message = message
        self.store_name = store_name

    def __str__(self) -> str:
        if self.store_name:
            return f"[{self.store_name}] {self.message}"
        return self.message

class ValidationError(BoundLRUError, ValueError):
    """Raised when input validation fails."""
    pass

class OperationError(BoundLRUError):
    """Raised when a general operation fails."""
    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original: {str(self.original_exception)})"
        return self.message
