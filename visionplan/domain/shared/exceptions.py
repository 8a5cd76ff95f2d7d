"""
Domain Exceptions

Custom exceptions for domain-specific errors with type discrimination.
Constraint violations and resource conflicts are returned as data and are
never raised; these exceptions cover invalid input and broken configuration.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for callers that report errors."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        full_message = f"Validation failed for field '{field_name}': {message}"
        details: dict[str, str | int | bool | None] = {
            "field": field_name,
            "value": str(value) if value is not None else None,
            "error_code": self.error_code,
        }

        super().__init__(full_message, ErrorType.VALIDATION, details)


class CalendarConfigurationError(DomainError):
    """Raised when a calendar has no working day within the search horizon."""

    def __init__(self, calendar_id: str, horizon_days: int, direction: str) -> None:
        details: dict[str, str | int | bool | None] = {
            "calendar_id": calendar_id,
            "horizon_days": horizon_days,
            "direction": direction,
        }
        super().__init__(
            f"Calendar {calendar_id!r} has no working day within "
            f"{horizon_days} days ({direction})",
            ErrorType.CONFIGURATION,
            details,
        )
        self.calendar_id = calendar_id
        self.horizon_days = horizon_days


class NotFoundError(DomainError):
    """Raised by explicit ``require`` lookups when an entity is absent."""

    def __init__(self, entity_type: str, entity_id: str | None) -> None:
        details: dict[str, str | int | bool | None] = {
            "entity_type": entity_type,
            "entity_id": entity_id,
        }
        super().__init__(
            f"{entity_type.capitalize()} not found: {entity_id}",
            ErrorType.NOT_FOUND,
            details,
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
