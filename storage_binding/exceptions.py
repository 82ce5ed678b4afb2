"""
Custom exceptions for storage bindings.

Operation failures are delivered as outcomes and ``error`` notifications,
never raised out of a binding operation. Configuration mistakes (an unknown
storage area, an unknown wrap type) are raised at assignment time.
"""


class StorageBindingError(Exception):
    """Base exception for all storage binding errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BackingStoreError(StorageBindingError):
    """Raised by a storage area when the backing store reports a failure."""

    def __init__(
        self,
        message: str,
        area: str | None = None,
        operation: str | None = None,
        cause: Exception | None = None,
    ):
        details: dict = {}
        if area:
            details["area"] = area
        if operation:
            details["operation"] = operation
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.area = area
        self.operation = operation
        self.cause = cause


class InvalidNameError(StorageBindingError):
    """A binding name has a shape the requested operation cannot use."""

    def __init__(self, message: str = '"name" must be either a string or an array.'):
        super().__init__(message)


class InvalidValueError(StorageBindingError):
    """A value cannot be written under the binding's name."""

    def __init__(self, reason: str, value_type: str | None = None):
        details = {"reason": reason}
        if value_type:
            details["value_type"] = value_type
        super().__init__(reason, details)
        self.reason = reason


class StorageAreaError(StorageBindingError):
    """Raised when an unknown storage area is selected."""

    def __init__(self, area: str):
        super().__init__(
            f"Unknown storage area: {area!r} (expected sync, local or managed)",
            {"area": area},
        )
        self.area = area


class WrapConfigurationError(StorageBindingError):
    """Raised when ``wrap_as`` names a type with no registered strategy."""

    def __init__(self, type_name: str, known: list[str] | None = None):
        details: dict = {"type_name": type_name}
        if known:
            details["known"] = known
        super().__init__(f"No wrap strategy registered for {type_name!r}", details)
        self.type_name = type_name
