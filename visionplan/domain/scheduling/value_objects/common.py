"""Common value objects for the scheduling domain."""

from collections.abc import Iterator
from datetime import date, timedelta

from pydantic import model_validator

from ...shared.base import ValueObject


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def days_between(earlier: date, later: date) -> int:
    """Signed whole-day difference ``later - earlier``."""
    return (later - earlier).days


class DateRange(ValueObject):
    """Inclusive range of calendar days."""

    start_date: date
    end_date: date

    @model_validator(mode="after")
    def end_not_before_start(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self

    def days(self) -> Iterator[date]:
        return iter_days(self.start_date, self.end_date)

    @classmethod
    def spanning(cls, dates: list[tuple[date, date]]) -> "DateRange | None":
        """Smallest range covering every (start, end) pair, or None when empty."""
        if not dates:
            return None
        return cls(
            start_date=min(start for start, _ in dates),
            end_date=max(end for _, end in dates),
        )

    def __str__(self) -> str:
        return f"{self.start_date.isoformat()} .. {self.end_date.isoformat()}"
