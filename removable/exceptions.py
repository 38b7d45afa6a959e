"""Exceptions for removable operations."""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .validation import ValidationResult


class RemovableError(Exception):
    """Base exception for removable operations."""

    def __init__(self, message: str, record: Optional[Any] = None):
        self.record = record
        super().__init__(message)


class RemovableConfigurationError(RemovableError):
    """Raised when a model cannot be registered as removable."""


class NotRemovableError(RemovableError):
    """Raised when the removable API is used on an unregistered model."""

    def __init__(self, model: type):
        self.model = model
        super().__init__(
            f"{model.__name__} is not removable; decorate it with @acts_as_removable"
        )


class RecordInvalid(RemovableError):
    """Raised by strict saves when validation rules fail."""

    def __init__(self, record: Any, result: "ValidationResult"):
        self.result = result
        messages = ", ".join(result.full_messages()) or "unknown error"
        super().__init__(f"Validation failed: {messages}", record=record)


class RecordNotSaved(RemovableError):
    """Raised by strict operations when a hook aborted the save."""

    def __init__(self, record: Any, reason: Optional[str] = None):
        self.reason = reason
        message = "Failed to save the record"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, record=record)


class RemovalAborted(RemovableError):
    """Raised from a hook to abort a remove or unremove."""

    def __init__(self, reason: str = "aborted by hook"):
        self.reason = reason
        super().__init__(reason)
