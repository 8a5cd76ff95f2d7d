"""
Working Calendar Value Objects

Represents which calendar days count as working time, with per-weekday
working hours, holidays and dated exceptions. Resolution order for a single
day is: exception, then holiday, then the weekday default.

Weekdays follow Python's convention (0=Monday, 6=Sunday).
"""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime, time, timedelta

from pydantic import Field, field_validator, model_validator

from ....core.config import settings
from ...shared.base import ValueObject
from ...shared.exceptions import CalendarConfigurationError
from .common import iter_days
from .enums import CalendarEntityType, HolidayType, SnapDirection

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class WorkingHours(ValueObject):
    """A working period within one day."""

    start_time: time
    end_time: time

    @model_validator(mode="after")
    def end_after_start(self) -> WorkingHours:
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self

    def is_within_hours(self, check_time: time) -> bool:
        return self.start_time <= check_time <= self.end_time

    def duration_minutes(self) -> int:
        start_minutes = self.start_time.hour * 60 + self.start_time.minute
        end_minutes = self.end_time.hour * 60 + self.end_time.minute
        return end_minutes - start_minutes

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes() / 60.0

    def __str__(self) -> str:
        return (
            f"{self.start_time.strftime('%H:%M')} - {self.end_time.strftime('%H:%M')}"
        )


class WorkingDay(ValueObject):
    """Default working flag (and optional explicit hours) for one weekday."""

    day_of_week: int = Field(ge=0, le=6)
    is_working: bool
    working_hours: tuple[WorkingHours, ...] = ()


class Holiday(ValueObject):
    """A non-working day, optionally recurring every year on the same date."""

    id: str
    name: str
    date: dt.date
    recurring: bool = False
    type: HolidayType = HolidayType.PUBLIC

    def occurs_on(self, check_date: date) -> bool:
        if check_date == self.date:
            return True
        return (
            self.recurring
            and check_date.year > self.date.year
            and (check_date.month, check_date.day) == (self.date.month, self.date.day)
        )


class CalendarException(ValueObject):
    """Overrides the working flag (and optionally the hours) for a date range."""

    id: str
    start_date: date
    end_date: date
    is_working: bool
    working_hours: tuple[WorkingHours, ...] | None = None
    reason: str | None = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> CalendarException:
        if self.end_date < self.start_date:
            raise ValueError("Exception end date must not be before its start date")
        return self

    def covers(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date


class WorkingTimeResult(ValueObject):
    """Working-time totals over a date range."""

    total_hours: float
    total_days: int
    working_dates: tuple[date, ...]
    non_working_dates: tuple[date, ...]


class WorkingCalendar(ValueObject):
    """
    Working calendar with weekday defaults, holidays and exceptions.

    Immutable: registry operations that edit holidays or exceptions build a
    new calendar with ``model_copy``.
    """

    id: str
    name: str
    description: str | None = None
    working_days: tuple[WorkingDay, ...] = ()
    holidays: tuple[Holiday, ...] = ()
    exceptions: tuple[CalendarException, ...] = ()
    default_start_time: time = time(9, 0)
    default_end_time: time = time(17, 0)

    @field_validator("working_days")
    @classmethod
    def unique_weekdays(cls, v: tuple[WorkingDay, ...]) -> tuple[WorkingDay, ...]:
        seen = [day.day_of_week for day in v]
        if len(seen) != len(set(seen)):
            raise ValueError("Each weekday may be configured only once")
        return tuple(sorted(v, key=lambda day: day.day_of_week))

    @field_validator("holidays")
    @classmethod
    def order_holidays(cls, v: tuple[Holiday, ...]) -> tuple[Holiday, ...]:
        return tuple(sorted(v, key=lambda holiday: holiday.date))

    @field_validator("exceptions")
    @classmethod
    def order_exceptions(
        cls, v: tuple[CalendarException, ...]
    ) -> tuple[CalendarException, ...]:
        return tuple(sorted(v, key=lambda exception: exception.start_date))

    @model_validator(mode="after")
    def default_hours_ordered(self) -> WorkingCalendar:
        if self.default_end_time <= self.default_start_time:
            raise ValueError("Default end time must be after default start time")
        return self

    @classmethod
    def standard(cls, calendar_id: str = "default") -> WorkingCalendar:
        """Monday to Friday, 09:00 to 17:00, no holidays."""
        return cls(
            id=calendar_id,
            name="Standard Working Calendar",
            description="Monday to Friday, 9:00 AM to 5:00 PM",
            working_days=tuple(
                WorkingDay(day_of_week=weekday, is_working=weekday < 5)
                for weekday in range(7)
            ),
        )

    @classmethod
    def continuous(cls, calendar_id: str = "continuous") -> WorkingCalendar:
        """Every day is a working day."""
        return cls(
            id=calendar_id,
            name="Continuous Calendar",
            working_days=tuple(
                WorkingDay(day_of_week=weekday, is_working=True) for weekday in range(7)
            ),
        )

    # Day classification

    def get_exception(self, check_date: date) -> CalendarException | None:
        for exception in self.exceptions:
            if exception.covers(check_date):
                return exception
        return None

    def get_holiday(self, check_date: date) -> Holiday | None:
        for holiday in self.holidays:
            if holiday.occurs_on(check_date):
                return holiday
        return None

    def get_working_day(self, weekday: int) -> WorkingDay | None:
        for working_day in self.working_days:
            if working_day.day_of_week == weekday:
                return working_day
        return None

    def is_working_day(self, check_date: date) -> bool:
        exception = self.get_exception(check_date)
        if exception is not None:
            return exception.is_working

        if self.get_holiday(check_date) is not None:
            return False

        working_day = self.get_working_day(check_date.weekday())
        return working_day.is_working if working_day else False

    def get_working_hours(self, check_date: date) -> list[WorkingHours]:
        """
        Working periods configured for a date.

        Exception hours win, then the weekday's explicit hours, then the
        calendar's default pair. Does not consult the working flag.
        """
        exception = self.get_exception(check_date)
        if exception is not None and exception.working_hours:
            return list(exception.working_hours)

        working_day = self.get_working_day(check_date.weekday())
        if working_day is not None and working_day.working_hours:
            return list(working_day.working_hours)

        return [
            WorkingHours(
                start_time=self.default_start_time, end_time=self.default_end_time
            )
        ]

    def working_hours_for(self, check_date: date) -> list[WorkingHours]:
        """Working periods for a date; empty exactly when it is not a working day."""
        if not self.is_working_day(check_date):
            return []
        return self.get_working_hours(check_date)

    def is_working_time(self, check_datetime: datetime) -> bool:
        check_time = check_datetime.time()
        return any(
            period.is_within_hours(check_time)
            for period in self.working_hours_for(check_datetime.date())
        )

    # Day stepping

    def _search(self, from_date: date, step: int) -> date:
        horizon = settings.CALENDAR_SEARCH_HORIZON_DAYS
        current = from_date
        for _ in range(horizon):
            current = current + timedelta(days=step)
            if self.is_working_day(current):
                return current
        raise CalendarConfigurationError(
            self.id, horizon, "forward" if step > 0 else "backward"
        )

    def next_working_day(self, from_date: date) -> date:
        """First working day strictly after ``from_date``."""
        return self._search(from_date, 1)

    def previous_working_day(self, from_date: date) -> date:
        """Last working day strictly before ``from_date``."""
        return self._search(from_date, -1)

    def snap_to_working_day(
        self, check_date: date, direction: SnapDirection = SnapDirection.NEXT
    ) -> date:
        """
        Move a date onto a working day.

        Args:
            check_date: Date to snap; returned unchanged if it is a working day
            direction: Search forward, backward, or for the closest working day
                (ties go forward)

        Returns:
            The conforming working day
        """
        if self.is_working_day(check_date):
            return check_date

        if direction == SnapDirection.NEXT:
            return self.next_working_day(check_date)
        if direction == SnapDirection.PREV:
            return self.previous_working_day(check_date)

        following = self.next_working_day(check_date)
        preceding = self.previous_working_day(check_date)
        if (following - check_date).days <= (check_date - preceding).days:
            return following
        return preceding

    def add_working_days(self, from_date: date, days: int) -> date:
        """Step ``days`` working days away from a date (negative steps backward)."""
        current = from_date
        step = 1 if days >= 0 else -1
        for _ in range(abs(days)):
            current = self._search(current, step)
        return current

    # Durations

    def compute_working_duration(self, start_date: date, end_date: date) -> int:
        """
        Working days between two dates, both inclusive.

        Returns 0 when end is before start, otherwise at least 1.
        """
        if end_date < start_date:
            return 0
        count = sum(1 for day in iter_days(start_date, end_date) if self.is_working_day(day))
        return max(1, count)

    def compute_end_from_duration(self, start_date: date, duration_days: int) -> date:
        """
        End date for a task of ``duration_days`` working days.

        Inclusive model: a duration of 1 ends on the (snapped) start day.
        """
        if duration_days <= 0:
            return start_date

        current = self.snap_to_working_day(start_date, SnapDirection.NEXT)
        return self.add_working_days(current, duration_days - 1)

    def compute_start_from_duration(self, end_date: date, duration_days: int) -> date:
        """Backward-scheduling counterpart of ``compute_end_from_duration``."""
        if duration_days <= 0:
            return end_date

        current = self.snap_to_working_day(end_date, SnapDirection.PREV)
        return self.add_working_days(current, -(duration_days - 1))

    def calculate_working_time(
        self, start_date: date, end_date: date
    ) -> WorkingTimeResult:
        working_dates: list[date] = []
        non_working_dates: list[date] = []
        total_hours = 0.0

        for day in iter_days(start_date, end_date):
            periods = self.working_hours_for(day)
            if periods:
                working_dates.append(day)
                total_hours += sum(period.duration_hours for period in periods)
            else:
                non_working_dates.append(day)

        return WorkingTimeResult(
            total_hours=total_hours,
            total_days=len(working_dates),
            working_dates=tuple(working_dates),
            non_working_dates=tuple(non_working_dates),
        )

    def __str__(self) -> str:
        working = [day for day in self.working_days if day.is_working]
        if not working:
            return f"{self.name}: no working days"

        # Group consecutive weekdays
        groups: list[list[int]] = [[working[0].day_of_week]]
        for day in working[1:]:
            if day.day_of_week == groups[-1][-1] + 1:
                groups[-1].append(day.day_of_week)
            else:
                groups.append([day.day_of_week])

        parts = []
        for days in groups:
            if len(days) == 1:
                parts.append(DAY_NAMES[days[0]])
            else:
                parts.append(f"{DAY_NAMES[days[0]]}-{DAY_NAMES[days[-1]]}")

        result = (
            f"{self.name}: {','.join(parts)} "
            f"{self.default_start_time.strftime('%H:%M')}-"
            f"{self.default_end_time.strftime('%H:%M')}"
        )
        if self.holidays:
            result += f" ({len(self.holidays)} holidays)"
        return result


class CalendarAssignment(ValueObject):
    """Links a task or resource to a calendar."""

    entity_id: str
    entity_type: CalendarEntityType
    calendar_id: str
