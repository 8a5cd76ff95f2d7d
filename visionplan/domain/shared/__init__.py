from .base import Entity, ObservableService, ValueObject, new_id
from .exceptions import (
    CalendarConfigurationError,
    DomainError,
    ErrorType,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "Entity",
    "ObservableService",
    "ValueObject",
    "new_id",
    "CalendarConfigurationError",
    "DomainError",
    "ErrorType",
    "NotFoundError",
    "ValidationError",
]
