"""
Unified exception definitions
"""
from typing import Optional


class RelayError(Exception):
    """Base exception class"""
    pass


class ConfigError(RelayError):
    """Configuration error"""
    pass


class ConversionError(ConfigError):
    """Numeric option could not be converted"""

    def __init__(self, value: str, reason: str, option: Optional[str] = None):
        self.value = value
        self.reason = reason
        self.option = option
        prefix = f"{option} " if option else ""
        super().__init__(f"{prefix}{value!r}: {reason}")


class ConflictError(ConfigError):
    """Mutually exclusive options were combined"""
    pass


class SetupError(RelayError):
    """Endpoint could not be opened, bound or connected"""
    pass


class TransferError(RelayError):
    """Non-retryable read or write failure during a transfer"""

    def __init__(self, operation: str, endpoint: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.endpoint = endpoint
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed on {endpoint}{detail}")


class AcceptError(RelayError):
    """Listening endpoint failed while waiting for a client"""
    pass


def is_retryable(exc: BaseException) -> bool:
    """Return True if the failed operation should simply be re-invoked"""
    return isinstance(exc, InterruptedError)
