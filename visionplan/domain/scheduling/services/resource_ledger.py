"""
Resource Ledger

Tracks how many units of each resource are allocated per day, detects
overallocation, and levels conflicts by delaying tasks or reducing
allocations.

Allocation and availability date ranges are inclusive. A resource's
availability on a day is the narrowest availability override covering the
day, else the resource's default capacity.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any

from ....core.observability import get_logger, log_duration
from ...shared.base import ObservableService
from ..entities.resource import Resource, ResourceAllocation, ResourceAvailability
from ..entities.task import Task
from ..events.domain_events import ResourceConflictsRecomputed, ResourcesLeveled
from ..value_objects.common import DateRange
from ..value_objects.enums import (
    ConflictSeverity,
    LevelingMode,
    LevelingPriority,
    LevelingStrategy,
)
from ..value_objects.resources import LevelingOptions, ResourceConflict

if TYPE_CHECKING:
    from ....infrastructure.events.event_bus import EventBusInterface

logger = get_logger(__name__)


def calculate_resource_allocation(
    resource_id: str, check_date: date, allocations: list[ResourceAllocation]
) -> float:
    """Units of a resource allocated on a day, summed over all allocations."""
    return sum(
        allocation.units
        for allocation in allocations
        if allocation.resource_id == resource_id and allocation.covers(check_date)
    )


def get_resource_availability(
    resource_id: str,
    check_date: date,
    availabilities: list[ResourceAvailability],
    default_capacity: float,
) -> float:
    covering = [
        a for a in availabilities if a.resource_id == resource_id and a.covers(check_date)
    ]
    if not covering:
        return default_capacity
    # Narrowest range wins; ties go to the earliest added
    return min(covering, key=lambda a: a.end_date - a.start_date).available_units


def conflict_severity(overallocation: float, available_units: float) -> ConflictSeverity:
    """
    Severity tier of an overallocation relative to availability.

    More than 50% of availability is critical, more than 30% high, more than
    10% medium, anything else low. With zero availability every positive
    overallocation is critical.
    """
    if overallocation > available_units * 0.5:
        return ConflictSeverity.CRITICAL
    if overallocation > available_units * 0.3:
        return ConflictSeverity.HIGH
    if overallocation > available_units * 0.1:
        return ConflictSeverity.MEDIUM
    return ConflictSeverity.LOW


def detect_resource_conflicts(
    allocations: list[ResourceAllocation],
    availabilities: list[ResourceAvailability],
    date_range: DateRange,
    resources: list[Resource],
) -> list[ResourceConflict]:
    """
    Every (resource, day) in range where allocated units exceed availability.

    Conflicts are ordered by resource (in ``resources`` order), then by day.
    """
    conflicts: list[ResourceConflict] = []

    for resource in resources:
        own_allocations = [a for a in allocations if a.resource_id == resource.id]
        if not own_allocations:
            continue

        for day in date_range.days():
            covering = [a for a in own_allocations if a.covers(day)]
            allocated = sum(a.units for a in covering)
            available = get_resource_availability(
                resource.id, day, availabilities, resource.capacity
            )
            if allocated <= available:
                continue

            overallocation = allocated - available
            conflicts.append(
                ResourceConflict(
                    id=f"conflict-{resource.id}-{day.isoformat()}",
                    resource_id=resource.id,
                    date=day,
                    allocated_units=allocated,
                    available_units=available,
                    overallocation=overallocation,
                    affected_tasks=tuple(a.task_id for a in covering),
                    severity=conflict_severity(overallocation, available),
                )
            )

    return conflicts


def calculate_resource_utilization(
    resource_id: str,
    allocations: list[ResourceAllocation],
    availabilities: list[ResourceAvailability],
    date_range: DateRange,
    capacity: float,
) -> float:
    """Allocated over available units across a range, as a percentage."""
    total_allocated = 0.0
    total_available = 0.0

    for day in date_range.days():
        total_allocated += calculate_resource_allocation(resource_id, day, allocations)
        total_available += get_resource_availability(
            resource_id, day, availabilities, capacity
        )

    return (total_allocated / total_available) * 100 if total_available > 0 else 0.0


def get_resource_workload(
    resource_id: str, allocations: list[ResourceAllocation], date_range: DateRange
) -> dict[date, float]:
    return {
        day: calculate_resource_allocation(resource_id, day, allocations)
        for day in date_range.days()
    }


def find_available_resources(
    task: Task,
    resources: list[Resource],
    allocations: list[ResourceAllocation],
    availabilities: list[ResourceAvailability],
    required_units: float = 8.0,
) -> list[Resource]:
    """Resources with at least ``required_units`` free on every day of a task."""
    task_days = DateRange(start_date=task.start_date, end_date=task.end_date)

    def has_room(resource: Resource) -> bool:
        for day in task_days.days():
            allocated = calculate_resource_allocation(resource.id, day, allocations)
            available = get_resource_availability(
                resource.id, day, availabilities, resource.capacity
            )
            if available - allocated < required_units:
                return False
        return True

    return [resource for resource in resources if has_room(resource)]


@dataclass
class LevelingResult:
    tasks: list[Task]
    allocations: list[ResourceAllocation]
    conflicts: list[ResourceConflict]
    iterations: int = 0


def _detection_window(
    tasks: list[Task], allocations: list[ResourceAllocation]
) -> DateRange | None:
    return DateRange.spanning(
        [(t.start_date, t.end_date) for t in tasks]
        + [(a.start_date, a.end_date) for a in allocations]
    )


def _widen(window: DateRange, other: DateRange | None) -> DateRange:
    if other is None:
        return window
    return DateRange(
        start_date=min(window.start_date, other.start_date),
        end_date=max(window.end_date, other.end_date),
    )


def _most_severe(conflicts: list[ResourceConflict]) -> ResourceConflict:
    # sorted() is stable, so ties keep detection order
    return sorted(conflicts, key=lambda c: c.severity.rank, reverse=True)[0]


def _task_to_delay(
    candidates: list[Task], priority: LevelingPriority
) -> Task:
    if priority == LevelingPriority.EARLIEST_START:
        # Keep the earliest-starting work in place; move the latest starter
        latest = max(c.start_date for c in candidates)
        return next(c for c in candidates if c.start_date == latest)
    elif priority == LevelingPriority.CRITICAL_PATH:
        # Longer tasks approximate the critical path; move the shortest
        shortest = min(c.effective_duration for c in candidates)
        return next(c for c in candidates if c.effective_duration == shortest)
    elif priority == LevelingPriority.TASK_PRIORITY:
        return candidates[0]
    else:
        raise ValueError(f"Unhandled leveling priority: {priority}")


def _delay_tasks(
    conflict: ResourceConflict,
    tasks: list[Task],
    allocations: list[ResourceAllocation],
    priority: LevelingPriority,
) -> tuple[list[Task], list[ResourceAllocation]]:
    if conflict.available_units > 0:
        delay = math.ceil(conflict.overallocation / conflict.available_units)
    else:
        delay = 1

    candidates = [t for t in tasks if t.id in conflict.affected_tasks]
    if candidates:
        target = _task_to_delay(candidates, priority)
        target_id = target.id
        tasks = [t.shifted(delay) if t.id == target_id else t for t in tasks]
    else:
        # Allocations whose task is not in the task list move on their own
        target_id = conflict.affected_tasks[0]

    allocations = [a.shifted(delay) if a.task_id == target_id else a for a in allocations]
    logger.debug("Task delayed", task_id=target_id, days=delay, conflict_id=conflict.id)
    return tasks, allocations


def _reduce_allocation(
    conflict: ResourceConflict, allocations: list[ResourceAllocation]
) -> list[ResourceAllocation]:
    affected = set(conflict.affected_tasks)
    reduction = conflict.overallocation / len(conflict.affected_tasks)

    reduced: list[ResourceAllocation] = []
    for allocation in allocations:
        if (
            allocation.resource_id == conflict.resource_id
            and allocation.task_id in affected
            and allocation.covers(conflict.date)
        ):
            allocation = allocation.model_copy(
                update={"units": max(0.0, allocation.units - reduction)}
            )
        reduced.append(allocation)

    logger.debug(
        "Allocation reduced",
        resource_id=conflict.resource_id,
        date=conflict.date.isoformat(),
        reduction=reduction,
    )
    return reduced


def level_resources(
    tasks: list[Task],
    allocations: list[ResourceAllocation],
    availabilities: list[ResourceAvailability],
    resources: list[Resource],
    options: LevelingOptions | None = None,
) -> LevelingResult:
    """
    Resolve resource overallocation.

    In automatic mode the most severe conflict is handled one step at a time
    until none remain or ``max_iterations`` steps were taken; the conflict
    set is recomputed in full after each step. The best state seen (fewest
    conflicts) is returned, so the result never has more conflicts than the
    input. Manual mode only reports conflicts.

    Inputs are never modified; the result holds deep copies.

    Args:
        tasks: Tasks the allocations refer to
        allocations: Resource allocations to level
        availabilities: Availability overrides
        resources: Resources to check
        options: Mode, strategy, delay priority and iteration bound

    Returns:
        Leveled tasks and allocations with the conflicts that remain
    """
    options = options or LevelingOptions()
    adjusted_tasks = [t.model_copy(deep=True) for t in tasks]
    adjusted_allocations = [a.model_copy(deep=True) for a in allocations]

    window = _detection_window(adjusted_tasks, adjusted_allocations)
    if window is None:
        return LevelingResult(tasks=adjusted_tasks, allocations=adjusted_allocations, conflicts=[])

    conflicts = detect_resource_conflicts(
        adjusted_allocations, availabilities, window, resources
    )

    if options.mode == LevelingMode.MANUAL:
        return LevelingResult(
            tasks=adjusted_tasks, allocations=adjusted_allocations, conflicts=conflicts
        )

    best = LevelingResult(
        tasks=adjusted_tasks, allocations=adjusted_allocations, conflicts=conflicts
    )
    initial_count = len(conflicts)
    iterations = 0

    with log_duration("level_resources", strategy=options.strategy.value):
        while conflicts and iterations < options.max_iterations:
            conflict = _most_severe(conflicts)

            if options.strategy == LevelingStrategy.DELAY_TASKS:
                adjusted_tasks, adjusted_allocations = _delay_tasks(
                    conflict, adjusted_tasks, adjusted_allocations, options.priority
                )
            elif options.strategy == LevelingStrategy.REDUCE_ALLOCATION:
                adjusted_allocations = _reduce_allocation(conflict, adjusted_allocations)
            else:
                raise ValueError(f"Unhandled leveling strategy: {options.strategy}")

            window = _widen(window, _detection_window(adjusted_tasks, adjusted_allocations))
            conflicts = detect_resource_conflicts(
                adjusted_allocations, availabilities, window, resources
            )
            iterations += 1

            if len(conflicts) < len(best.conflicts):
                best = LevelingResult(
                    tasks=adjusted_tasks,
                    allocations=adjusted_allocations,
                    conflicts=conflicts,
                )

    if len(conflicts) > len(best.conflicts):
        logger.warning(
            "Leveling ended worse than its best state; keeping best state",
            final_conflicts=len(conflicts),
            best_conflicts=len(best.conflicts),
        )
        result_conflicts = best.conflicts
        result_tasks, result_allocations = best.tasks, best.allocations
    else:
        result_conflicts = conflicts
        result_tasks, result_allocations = adjusted_tasks, adjusted_allocations

    logger.info(
        "Resources leveled",
        strategy=options.strategy.value,
        iterations=iterations,
        conflicts_before=initial_count,
        conflicts_after=len(result_conflicts),
    )
    return LevelingResult(
        tasks=result_tasks,
        allocations=result_allocations,
        conflicts=result_conflicts,
        iterations=iterations,
    )


class ResourceLedger(ObservableService):
    """
    Resources, their allocations and availability overrides.

    The conflict cache covers the span of all allocations and is rebuilt in
    full after every mutation, before listeners are notified.
    """

    def __init__(
        self,
        resources: list[Resource] | None = None,
        allocations: list[ResourceAllocation] | None = None,
        availabilities: list[ResourceAvailability] | None = None,
        event_bus: EventBusInterface | None = None,
    ) -> None:
        super().__init__()
        self._resources: list[Resource] = list(resources or [])
        self._allocations: list[ResourceAllocation] = list(allocations or [])
        self._availabilities: list[ResourceAvailability] = list(availabilities or [])
        self._conflicts: list[ResourceConflict] = []
        self._event_bus = event_bus
        self._rebuild_conflicts()

    # Resources

    def get_resources(self) -> list[Resource]:
        return list(self._resources)

    def get_resource_by_id(self, resource_id: str) -> Resource | None:
        for resource in self._resources:
            if resource.id == resource_id:
                return resource
        return None

    def add_resource(self, resource: Resource) -> None:
        self._resources.append(resource)
        self._changed()

    def update_resource(self, resource_id: str, **updates: Any) -> Resource | None:
        for index, resource in enumerate(self._resources):
            if resource.id == resource_id:
                updated = Resource.model_validate(
                    {**resource.model_dump(), **updates, "id": resource.id}
                )
                self._resources[index] = updated
                self._changed()
                return updated
        return None

    def remove_resource(self, resource_id: str) -> None:
        """Remove a resource together with its allocations."""
        self._resources = [r for r in self._resources if r.id != resource_id]
        self._allocations = [a for a in self._allocations if a.resource_id != resource_id]
        self._changed()

    # Allocations

    def get_allocations(self) -> list[ResourceAllocation]:
        return list(self._allocations)

    def get_allocations_by_resource(self, resource_id: str) -> list[ResourceAllocation]:
        return [a for a in self._allocations if a.resource_id == resource_id]

    def get_allocations_by_task(self, task_id: str) -> list[ResourceAllocation]:
        return [a for a in self._allocations if a.task_id == task_id]

    def add_allocation(self, allocation: ResourceAllocation) -> None:
        self._allocations.append(allocation)
        self._changed()

    def update_allocation(
        self, allocation_id: str, **updates: Any
    ) -> ResourceAllocation | None:
        for index, allocation in enumerate(self._allocations):
            if allocation.id == allocation_id:
                updated = ResourceAllocation.model_validate(
                    {**allocation.model_dump(), **updates, "id": allocation.id}
                )
                self._allocations[index] = updated
                self._changed()
                return updated
        return None

    def remove_allocation(self, allocation_id: str) -> None:
        self._allocations = [a for a in self._allocations if a.id != allocation_id]
        self._changed()

    # Availability

    def get_availabilities(self) -> list[ResourceAvailability]:
        return list(self._availabilities)

    def add_availability(self, availability: ResourceAvailability) -> None:
        self._availabilities.append(availability)
        self._changed()

    def remove_availability(self, resource_id: str, start_date: date) -> None:
        self._availabilities = [
            a
            for a in self._availabilities
            if not (a.resource_id == resource_id and a.start_date == start_date)
        ]
        self._changed()

    # Queries

    def allocation_on(self, resource_id: str, check_date: date) -> float:
        return calculate_resource_allocation(resource_id, check_date, self._allocations)

    def availability_on(self, resource_id: str, check_date: date) -> float:
        resource = self.get_resource_by_id(resource_id)
        capacity = resource.capacity if resource is not None else 0.0
        return get_resource_availability(
            resource_id, check_date, self._availabilities, capacity
        )

    def get_resource_utilization(self, resource_id: str, date_range: DateRange) -> float:
        resource = self.get_resource_by_id(resource_id)
        if resource is None:
            return 0.0
        return calculate_resource_utilization(
            resource_id, self._allocations, self._availabilities, date_range, resource.capacity
        )

    def get_resource_workload(self, resource_id: str, date_range: DateRange) -> dict[date, float]:
        return get_resource_workload(resource_id, self._allocations, date_range)

    def get_conflicts(self) -> list[ResourceConflict]:
        return list(self._conflicts)

    def get_conflicts_by_resource(self, resource_id: str) -> list[ResourceConflict]:
        return [c for c in self._conflicts if c.resource_id == resource_id]

    # Leveling

    def level_resources(
        self, tasks: list[Task], options: LevelingOptions | None = None
    ) -> LevelingResult:
        """Level the ledger's allocations and keep the leveled allocations."""
        options = options or LevelingOptions()
        conflicts_before = len(self._conflicts)
        result = level_resources(
            tasks, self._allocations, self._availabilities, self._resources, options
        )

        if options.mode != LevelingMode.AUTOMATIC:
            return result

        self._allocations = [a.model_copy(deep=True) for a in result.allocations]
        self._changed()

        if self._event_bus is not None:
            self._event_bus.publish(
                ResourcesLeveled(
                    strategy=options.strategy.value,
                    iterations=result.iterations,
                    conflicts_before=conflicts_before,
                    conflicts_after=len(self._conflicts),
                )
            )
        return result

    def get_stats(self) -> dict[str, int]:
        return {
            "total_resources": len(self._resources),
            "total_allocations": len(self._allocations),
            "total_conflicts": len(self._conflicts),
            "critical_conflicts": sum(
                1 for c in self._conflicts if c.severity == ConflictSeverity.CRITICAL
            ),
        }

    # Internals

    def _rebuild_conflicts(self) -> None:
        window = DateRange.spanning([(a.start_date, a.end_date) for a in self._allocations])
        if not self._resources or window is None:
            self._conflicts = []
            return
        self._conflicts = detect_resource_conflicts(
            self._allocations, self._availabilities, window, self._resources
        )

    def _changed(self) -> None:
        self._rebuild_conflicts()
        logger.debug(
            "Resource conflicts recomputed", conflict_count=len(self._conflicts)
        )
        self._notify()
        if self._event_bus is not None:
            self._event_bus.publish(
                ResourceConflictsRecomputed(
                    conflict_count=len(self._conflicts),
                    resource_ids=tuple(sorted({c.resource_id for c in self._conflicts})),
                )
            )
