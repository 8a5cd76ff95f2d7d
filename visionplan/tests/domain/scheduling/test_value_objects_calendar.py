"""
Unit Tests for WorkingCalendar Value Objects

Covers day classification precedence (exception > holiday > weekday),
working hours, duration arithmetic, snapping and the bounded search.
"""

from datetime import date, datetime, time

import pytest
from pydantic import ValidationError as PydanticValidationError

from visionplan.domain.shared.exceptions import CalendarConfigurationError
from visionplan.domain.scheduling.value_objects.calendar import (
    CalendarException,
    WorkingCalendar,
    WorkingDay,
    WorkingHours,
)
from visionplan.domain.scheduling.value_objects.enums import SnapDirection

from .fixtures import CalendarFactory

MONDAY = date(2024, 1, 8)
FRIDAY = date(2024, 1, 12)
SATURDAY = date(2024, 1, 13)
SUNDAY = date(2024, 1, 14)
NEXT_MONDAY = date(2024, 1, 15)


class TestWorkingHours:
    def test_end_before_start_fails(self):
        with pytest.raises(ValueError, match="End time must be after start time"):
            WorkingHours(start_time=time(17, 0), end_time=time(9, 0))

    def test_duration(self):
        hours = WorkingHours(start_time=time(7, 30), end_time=time(12, 0))

        assert hours.duration_minutes() == 270
        assert hours.duration_hours == 4.5

    def test_string_representation(self):
        hours = WorkingHours(start_time=time(7, 0), end_time=time(15, 30))

        assert str(hours) == "07:00 - 15:30"


class TestDayClassification:
    def test_weekday_defaults(self, standard_calendar):
        assert standard_calendar.is_working_day(MONDAY)
        assert standard_calendar.is_working_day(FRIDAY)
        assert not standard_calendar.is_working_day(SATURDAY)
        assert not standard_calendar.is_working_day(SUNDAY)

    def test_holiday_is_non_working(self):
        calendar = CalendarFactory.create_calendar(
            holidays=[CalendarFactory.create_holiday(date(2024, 1, 10))]
        )

        assert not calendar.is_working_day(date(2024, 1, 10))
        assert calendar.is_working_day(date(2024, 1, 11))

    def test_exception_overrides_holiday(self):
        calendar = CalendarFactory.create_calendar(
            holidays=[CalendarFactory.create_holiday(date(2024, 1, 10))],
            exceptions=[CalendarFactory.create_exception(date(2024, 1, 10), is_working=True)],
        )

        assert calendar.is_working_day(date(2024, 1, 10))

    def test_exception_overrides_weekday(self):
        calendar = CalendarFactory.create_calendar(
            exceptions=[
                CalendarFactory.create_exception(SATURDAY, SUNDAY, is_working=True),
                CalendarFactory.create_exception(MONDAY, is_working=False, reason="Site closed"),
            ]
        )

        assert calendar.is_working_day(SATURDAY)
        assert calendar.is_working_day(SUNDAY)
        assert not calendar.is_working_day(MONDAY)

    def test_recurring_holiday_repeats_in_later_years(self):
        recurring = CalendarFactory.create_calendar(
            holidays=[CalendarFactory.create_holiday(date(2023, 12, 25), recurring=True)]
        )
        one_off = CalendarFactory.create_calendar(
            holidays=[CalendarFactory.create_holiday(date(2023, 12, 25))]
        )

        assert not recurring.is_working_day(date(2024, 12, 25))
        assert one_off.is_working_day(date(2024, 12, 25))

    def test_duplicate_weekday_rejected(self):
        with pytest.raises(PydanticValidationError):
            WorkingCalendar(
                id="broken",
                name="Broken",
                working_days=(
                    WorkingDay(day_of_week=0, is_working=True),
                    WorkingDay(day_of_week=0, is_working=False),
                ),
            )


class TestWorkingHoursLookup:
    def test_default_hours(self, standard_calendar):
        periods = standard_calendar.get_working_hours(MONDAY)

        assert periods == [WorkingHours(start_time=time(9, 0), end_time=time(17, 0))]

    def test_weekday_hours_override_default(self):
        morning = WorkingHours(start_time=time(7, 0), end_time=time(11, 0))
        calendar = WorkingCalendar(
            id="short-fridays",
            name="Short Fridays",
            working_days=tuple(
                WorkingDay(
                    day_of_week=weekday,
                    is_working=weekday < 5,
                    working_hours=(morning,) if weekday == 4 else (),
                )
                for weekday in range(7)
            ),
        )

        assert calendar.get_working_hours(FRIDAY) == [morning]
        assert calendar.get_working_hours(MONDAY)[0].start_time == time(9, 0)

    def test_exception_hours_win(self):
        night = WorkingHours(start_time=time(20, 0), end_time=time(23, 0))
        calendar = CalendarFactory.create_calendar(
            exceptions=[
                CalendarException(
                    id="night-pour",
                    start_date=MONDAY,
                    end_date=MONDAY,
                    is_working=True,
                    working_hours=(night,),
                )
            ]
        )

        assert calendar.get_working_hours(MONDAY) == [night]

    def test_non_working_day_has_no_hours(self, standard_calendar):
        assert standard_calendar.working_hours_for(SATURDAY) == []
        assert len(standard_calendar.working_hours_for(MONDAY)) == 1

    def test_is_working_time(self, standard_calendar):
        assert standard_calendar.is_working_time(datetime(2024, 1, 8, 10, 0))
        assert not standard_calendar.is_working_time(datetime(2024, 1, 8, 18, 0))
        assert not standard_calendar.is_working_time(datetime(2024, 1, 13, 10, 0))


class TestDurations:
    def test_five_day_task_from_monday_ends_friday(self, standard_calendar, monday):
        assert standard_calendar.compute_end_from_duration(monday, 5) == FRIDAY

    def test_single_day_duration_ends_on_start(self, standard_calendar):
        assert standard_calendar.compute_end_from_duration(MONDAY, 1) == MONDAY

    def test_non_positive_duration_returns_anchor(self, standard_calendar):
        assert standard_calendar.compute_end_from_duration(SATURDAY, 0) == SATURDAY
        assert standard_calendar.compute_start_from_duration(SATURDAY, -2) == SATURDAY

    def test_weekend_start_snaps_forward(self, standard_calendar):
        assert standard_calendar.compute_end_from_duration(SATURDAY, 1) == NEXT_MONDAY

    def test_duration_skips_holiday(self):
        calendar = CalendarFactory.create_calendar(
            holidays=[CalendarFactory.create_holiday(date(2024, 1, 10))]
        )

        assert calendar.compute_end_from_duration(MONDAY, 5) == NEXT_MONDAY

    def test_start_from_duration(self, standard_calendar):
        assert standard_calendar.compute_start_from_duration(FRIDAY, 5) == MONDAY
        assert standard_calendar.compute_start_from_duration(SUNDAY, 1) == FRIDAY

    def test_working_duration(self, standard_calendar):
        assert standard_calendar.compute_working_duration(MONDAY, FRIDAY) == 5
        assert standard_calendar.compute_working_duration(MONDAY, date(2024, 1, 19)) == 10
        assert standard_calendar.compute_working_duration(MONDAY, MONDAY) == 1

    def test_working_duration_of_weekend_is_at_least_one(self, standard_calendar):
        assert standard_calendar.compute_working_duration(SATURDAY, SUNDAY) == 1

    def test_working_duration_of_reversed_range_is_zero(self, standard_calendar):
        assert standard_calendar.compute_working_duration(FRIDAY, MONDAY) == 0

    def test_add_working_days(self, standard_calendar):
        assert standard_calendar.add_working_days(FRIDAY, 1) == NEXT_MONDAY
        assert standard_calendar.add_working_days(NEXT_MONDAY, -1) == FRIDAY
        assert standard_calendar.add_working_days(MONDAY, 0) == MONDAY

    def test_calculate_working_time(self, standard_calendar):
        result = standard_calendar.calculate_working_time(MONDAY, SUNDAY)

        assert result.total_days == 5
        assert result.total_hours == 40.0
        assert result.non_working_dates == (SATURDAY, SUNDAY)


class TestSnapping:
    def test_next_and_previous_are_strict(self, standard_calendar):
        assert standard_calendar.next_working_day(FRIDAY) == NEXT_MONDAY
        assert standard_calendar.previous_working_day(MONDAY) == date(2024, 1, 5)

    def test_working_day_is_returned_unchanged(self, standard_calendar):
        for direction in SnapDirection:
            assert standard_calendar.snap_to_working_day(MONDAY, direction) == MONDAY

    def test_directional_snap(self, standard_calendar):
        assert standard_calendar.snap_to_working_day(SATURDAY, SnapDirection.NEXT) == NEXT_MONDAY
        assert standard_calendar.snap_to_working_day(SATURDAY, SnapDirection.PREV) == FRIDAY

    def test_nearest_snap(self, standard_calendar):
        assert standard_calendar.snap_to_working_day(SATURDAY, SnapDirection.NEAREST) == FRIDAY
        assert standard_calendar.snap_to_working_day(SUNDAY, SnapDirection.NEAREST) == NEXT_MONDAY

    def test_nearest_tie_goes_forward(self):
        calendar = CalendarFactory.create_calendar(working_weekdays=(0, 2))
        tuesday = date(2024, 1, 9)

        assert calendar.snap_to_working_day(tuesday, SnapDirection.NEAREST) == date(2024, 1, 10)


class TestBoundedSearch:
    def test_calendar_without_working_days_raises(self):
        calendar = CalendarFactory.create_calendar(calendar_id="closed", working_weekdays=())

        with pytest.raises(CalendarConfigurationError) as exc_info:
            calendar.next_working_day(MONDAY)

        assert exc_info.value.calendar_id == "closed"
        assert exc_info.value.to_dict()["type"] == "configuration"

    def test_duration_on_closed_calendar_raises(self):
        calendar = CalendarFactory.create_calendar(working_weekdays=())

        with pytest.raises(CalendarConfigurationError):
            calendar.compute_end_from_duration(MONDAY, 3)

    def test_reversed_range_needs_no_search(self):
        calendar = CalendarFactory.create_calendar(working_weekdays=())

        assert calendar.compute_working_duration(FRIDAY, MONDAY) == 0


def test_string_representation(standard_calendar):
    assert str(standard_calendar) == "Standard Working Calendar: Mon-Fri 09:00-17:00"
