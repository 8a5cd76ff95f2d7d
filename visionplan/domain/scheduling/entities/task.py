"""Task entity and task dependency links."""

from datetime import date, timedelta
from typing import Any

from pydantic import Field, model_validator

from ...shared.base import Entity
from ...shared.exceptions import ValidationError
from ..value_objects.common import days_between
from ..value_objects.enums import TaskStatus


class Task(Entity):
    """
    A schedulable unit of work.

    ``duration`` is expressed in days. When omitted it is derived from the
    calendar-day span between start and end.
    """

    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    duration: int | None = Field(default=None, ge=0)
    percent_complete: float = Field(default=0.0, ge=0, le=100)
    status: TaskStatus = TaskStatus.NOT_STARTED
    calendar_id: str | None = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "Task":
        if self.end_date < self.start_date:
            raise ValidationError(
                "end_date",
                self.end_date.isoformat(),
                f"Task {self.id} ends before it starts ({self.start_date.isoformat()})",
            )
        if self.duration is None:
            # Bypass validate_assignment to avoid re-entering this validator
            object.__setattr__(self, "duration", self.span_days)
        return self

    @property
    def span_days(self) -> int:
        """Calendar days between start and end."""
        return days_between(self.start_date, self.end_date)

    @property
    def effective_duration(self) -> int:
        return self.duration if self.duration is not None else self.span_days

    def covers(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def is_overdue(self, as_of: date) -> bool:
        return self.end_date < as_of and not self.status.is_terminal

    def shifted(self, days: int) -> "Task":
        """Copy of the task moved by ``days`` calendar days."""
        delta = timedelta(days=days)
        return self.rebuilt(
            start_date=self.start_date + delta, end_date=self.end_date + delta
        )

    def with_dates(self, start_date: date, end_date: date) -> "Task":
        """Copy of the task on new dates; duration follows the new span."""
        return self.rebuilt(start_date=start_date, end_date=end_date, duration=None)

    def rebuilt(self, **updates: Any) -> "Task":
        """Validated copy with ``updates`` applied."""
        return type(self).model_validate({**self.model_dump(), **updates})


class Dependency(Entity):
    """Finish-to-start link between two tasks."""

    from_task_id: str
    to_task_id: str
    lag_days: int = 0
