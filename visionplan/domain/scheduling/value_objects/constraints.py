"""Task date constraints and the violations derived from them."""

from __future__ import annotations

import datetime as dt
from datetime import date

from pydantic import Field, model_validator

from ...shared.base import ValueObject
from ...shared.exceptions import ValidationError
from .enums import ConstraintType, ViolationSeverity


class TaskConstraint(ValueObject):
    """
    A rule restricting when a task may start or finish.

    Every kind except ASAP and ALAP is anchored on a date. A non-zero
    deviation of at most ``violation_tolerance`` days counts as satisfied.
    """

    task_id: str
    type: ConstraintType
    date: dt.date | None = None
    priority: int = Field(default=5, ge=1, le=10)
    violation_tolerance: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def dated_kinds_have_anchor(self) -> TaskConstraint:
        if self.type.requires_date and self.date is None:
            raise ValidationError(
                "date",
                None,
                f"{self.type.value} constraint on task {self.task_id} needs an anchor date",
                error_code="CONSTRAINT_DATE_REQUIRED",
            )
        return self

    @property
    def key(self) -> tuple[str, ConstraintType]:
        """Constraints are unique per task and kind."""
        return (self.task_id, self.type)


class ConstraintViolation(ValueObject):
    """A constraint that the current schedule does not satisfy."""

    id: str
    task_id: str
    task_name: str
    constraint_type: ConstraintType
    scheduled_date: date
    constraint_date: date
    violation: int
    severity: ViolationSeverity
    can_auto_resolve: bool
    suggested_fix: str | None = None
