"""
Test fixtures and factories for scheduling domain objects.

Provides configurable factory functions for tasks, resources, allocations,
calendars, constraints and rates.
"""

from datetime import date, timedelta
from typing import List, Optional
from uuid import uuid4

from visionplan.domain.scheduling.entities.resource import (
    Resource,
    ResourceAllocation,
    ResourceAvailability,
)
from visionplan.domain.scheduling.entities.task import Dependency, Task
from visionplan.domain.scheduling.value_objects.calendar import (
    CalendarException,
    Holiday,
    WorkingCalendar,
    WorkingDay,
)
from visionplan.domain.scheduling.value_objects.constraints import TaskConstraint
from visionplan.domain.scheduling.value_objects.enums import (
    ConstraintType,
    RateType,
    TaskStatus,
)
from visionplan.domain.scheduling.value_objects.rates import RateRecord


class TaskFactory:
    """Factory for creating test tasks."""

    @staticmethod
    def create_task(
        task_id: str = None,
        name: str = "Pour foundation",
        start_date: date = date(2024, 1, 8),
        end_date: date = None,
        duration: Optional[int] = None,
        status: TaskStatus = TaskStatus.IN_PROGRESS,
        calendar_id: str = None,
    ) -> Task:
        """Create a task; the end defaults to four days after the start."""
        if task_id is None:
            task_id = f"task-{uuid4().hex[:6]}"
        if end_date is None:
            end_date = start_date + timedelta(days=4)
        return Task(
            id=task_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            status=status,
            calendar_id=calendar_id,
        )

    @staticmethod
    def create_sequence(count: int, start_date: date = date(2024, 1, 8), span_days: int = 4) -> List[Task]:
        """Create back-to-back tasks."""
        tasks = []
        current = start_date
        for index in range(count):
            tasks.append(
                TaskFactory.create_task(
                    task_id=f"task-{index + 1}",
                    name=f"Task {index + 1}",
                    start_date=current,
                    end_date=current + timedelta(days=span_days),
                )
            )
            current = current + timedelta(days=span_days + 1)
        return tasks

    @staticmethod
    def create_dependency(from_task_id: str, to_task_id: str) -> Dependency:
        return Dependency(from_task_id=from_task_id, to_task_id=to_task_id)


class ResourceFactory:
    """Factory for creating test resources, allocations and availabilities."""

    @staticmethod
    def create_resource(
        resource_id: str = "crane-1",
        name: str = "Tower crane",
        capacity: float = 100.0,
        role: str = "equipment",
        capabilities: List[str] = None,
    ) -> Resource:
        return Resource(
            id=resource_id,
            name=name,
            capacity=capacity,
            role=role,
            capabilities=capabilities or [],
        )

    @staticmethod
    def create_allocation(
        task_id: str,
        resource_id: str = "crane-1",
        start_date: date = date(2024, 1, 8),
        end_date: date = None,
        units: float = 60.0,
        allocation_id: str = None,
    ) -> ResourceAllocation:
        return ResourceAllocation(
            id=allocation_id or f"alloc-{uuid4().hex[:6]}",
            resource_id=resource_id,
            task_id=task_id,
            start_date=start_date,
            end_date=end_date or start_date,
            units=units,
        )

    @staticmethod
    def create_availability(
        resource_id: str = "crane-1",
        start_date: date = date(2024, 1, 8),
        end_date: date = None,
        available_units: float = 50.0,
        reason: str = "Maintenance",
    ) -> ResourceAvailability:
        return ResourceAvailability(
            resource_id=resource_id,
            start_date=start_date,
            end_date=end_date or start_date,
            available_units=available_units,
            reason=reason,
        )


class CalendarFactory:
    """Factory for creating working calendars."""

    @staticmethod
    def create_calendar(
        calendar_id: str = "site-calendar",
        name: str = "Site calendar",
        working_weekdays: tuple = (0, 1, 2, 3, 4),
        holidays: List[Holiday] = None,
        exceptions: List[CalendarException] = None,
    ) -> WorkingCalendar:
        return WorkingCalendar(
            id=calendar_id,
            name=name,
            working_days=tuple(
                WorkingDay(day_of_week=weekday, is_working=weekday in working_weekdays)
                for weekday in range(7)
            ),
            holidays=tuple(holidays or ()),
            exceptions=tuple(exceptions or ()),
        )

    @staticmethod
    def create_holiday(
        holiday_date: date, name: str = "Holiday", recurring: bool = False
    ) -> Holiday:
        return Holiday(
            id=f"holiday-{holiday_date.isoformat()}",
            name=name,
            date=holiday_date,
            recurring=recurring,
        )

    @staticmethod
    def create_exception(
        start_date: date,
        end_date: date = None,
        is_working: bool = True,
        reason: str = "Overtime",
    ) -> CalendarException:
        return CalendarException(
            id=f"exception-{start_date.isoformat()}",
            start_date=start_date,
            end_date=end_date or start_date,
            is_working=is_working,
            reason=reason,
        )


def create_constraint(
    task_id: str,
    constraint_type: ConstraintType,
    anchor: Optional[date] = None,
    tolerance: Optional[int] = None,
) -> TaskConstraint:
    return TaskConstraint(
        task_id=task_id,
        type=constraint_type,
        date=anchor,
        violation_tolerance=tolerance,
    )


def create_rate(
    price: float,
    effective_from: Optional[date] = None,
    effective_to: Optional[date] = None,
    rate_type: RateType = RateType.STANDARD,
    resource_id: str = "crane-1",
) -> RateRecord:
    return RateRecord(
        resource_id=resource_id,
        rate_type=rate_type,
        price_per_unit=price,
        effective_from=effective_from,
        effective_to=effective_to,
    )
