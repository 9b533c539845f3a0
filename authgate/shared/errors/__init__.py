from .base import AppError, DomainError, InfrastructureError, StorageError, ValidationError
from .http import handle_app_error, register_error_handler
from .validation import format_field_errors, raise_validation_error

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "StorageError",
    "ValidationError",
    "format_field_errors",
    "handle_app_error",
    "raise_validation_error",
    "register_error_handler",
]
