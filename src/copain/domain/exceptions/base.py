"""
Base domain exceptions.
"""

from typing import Optional


class CopainException(Exception):
    """Base exception for all Copain domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CopainException):
    """Raised when required configuration is missing or inconsistent."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")


class InvalidIdentityError(CopainException):
    """Raised when a string is not a valid base58 32-byte identity."""

    def __init__(self, value: str, reason: str):
        message = f"Invalid identity {value!r}: {reason}"
        super().__init__(message, code="INVALID_IDENTITY", details={"value": value})
        self.value = value


class RecordTooLargeError(CopainException):
    """Raised when an encoded user state does not fit in its account."""

    def __init__(self, size: int, capacity: int):
        message = f"Encoded user state is {size} bytes, account holds {capacity}"
        super().__init__(
            message,
            code="RECORD_TOO_LARGE",
            details={"size": size, "capacity": capacity},
        )
