"""
Constraint Engine

Validates task date constraints, auto-resolves the ones that may be moved,
and keeps the project's constraint and violation sets.

Deviation rules per constraint kind:

    SNET / FNET   violated when the scheduled date is earlier than the anchor
    SNLT / FNLT   violated when the scheduled date is later than the anchor
    MSO / MFO     violated on any deviation; never auto-resolved
    ASAP / ALAP   no anchor, never violated

SNET, SNLT and MSO look at the task start; the others at the task end.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from ....core.config import settings
from ....core.observability import get_logger
from ...shared.base import ObservableService
from ..entities.task import Task
from ..events.domain_events import ConstraintViolationsRecomputed
from ..value_objects.calendar import WorkingCalendar
from ..value_objects.common import days_between
from ..value_objects.constraints import ConstraintViolation, TaskConstraint
from ..value_objects.enums import ConstraintType, SnapDirection, ViolationSeverity

if TYPE_CHECKING:
    from ....infrastructure.events.event_bus import EventBusInterface

logger = get_logger(__name__)


def _deviation(task: Task, constraint: TaskConstraint) -> tuple[date, int]:
    """Scheduled date the constraint looks at and its deviation in days."""
    anchor = constraint.date
    kind = constraint.type

    if kind in (ConstraintType.ASAP, ConstraintType.ALAP) or anchor is None:
        return task.start_date, 0

    scheduled = task.start_date if kind.anchors_start else task.end_date

    if kind in (ConstraintType.SNET, ConstraintType.FNET):
        return scheduled, max(0, days_between(scheduled, anchor))
    elif kind in (ConstraintType.SNLT, ConstraintType.FNLT):
        return scheduled, max(0, days_between(anchor, scheduled))
    elif kind in (ConstraintType.MSO, ConstraintType.MFO):
        return scheduled, abs(days_between(anchor, scheduled))
    else:
        raise ValueError(f"Unhandled constraint type: {kind}")


def suggest_fix(constraint_type: ConstraintType, violation_days: int) -> str:
    if constraint_type == ConstraintType.SNET:
        return f"Delay task start by {violation_days} day(s)"
    elif constraint_type == ConstraintType.SNLT:
        return f"Move task start earlier by {violation_days} day(s)"
    elif constraint_type == ConstraintType.FNET:
        return f"Delay task finish by {violation_days} day(s) or reduce duration"
    elif constraint_type == ConstraintType.FNLT:
        return f"Move task finish earlier by {violation_days} day(s) or reduce duration"
    elif constraint_type == ConstraintType.MSO:
        return "Task must start exactly on the constraint date"
    elif constraint_type == ConstraintType.MFO:
        return "Task must finish exactly on the constraint date"
    return "Adjust task dates to meet constraint"


def violation_severity(constraint_type: ConstraintType, violation_days: int) -> ViolationSeverity:
    if constraint_type.is_mandatory:
        return ViolationSeverity.CRITICAL
    if violation_days > settings.CONSTRAINT_ERROR_THRESHOLD_DAYS:
        return ViolationSeverity.ERROR
    return ViolationSeverity.WARNING


def validate_constraint(
    task: Task,
    constraint: TaskConstraint,
    calendar: WorkingCalendar | None = None,
) -> ConstraintViolation | None:
    """
    Check one constraint against one task.

    Args:
        task: Task whose dates are checked
        constraint: Constraint to check
        calendar: Accepted for symmetry with ``apply_constraint``; deviations
            are measured in calendar days

    Returns:
        The violation, or None when the constraint is satisfied or the
        deviation is within the constraint's tolerance
    """
    if constraint.date is None:
        return None

    scheduled, violation = _deviation(task, constraint)
    if violation == 0:
        return None

    tolerance = constraint.violation_tolerance
    if tolerance and violation <= tolerance:
        return None

    return ConstraintViolation(
        id=f"violation-{task.id}-{constraint.type.value}",
        task_id=task.id,
        task_name=task.name,
        constraint_type=constraint.type,
        scheduled_date=scheduled,
        constraint_date=constraint.date,
        violation=violation,
        severity=violation_severity(constraint.type, violation),
        can_auto_resolve=not constraint.type.is_mandatory,
        suggested_fix=suggest_fix(constraint.type, violation),
    )


def apply_constraint(
    task: Task,
    constraint: TaskConstraint,
    calendar: WorkingCalendar | None = None,
) -> Task:
    """
    Move a task so that it satisfies a constraint.

    The calendar-day span between start and end is preserved. With a
    calendar, the new start is snapped forward and the new end backward onto
    working days; the end never precedes the start. A task that already
    satisfies the constraint is returned unchanged (as a copy).
    """
    anchor = constraint.date
    if anchor is None:
        return task.model_copy(deep=True)

    _, deviation = _deviation(task, constraint)
    if deviation == 0:
        return task.model_copy(deep=True)

    span = timedelta(days=task.span_days)
    if constraint.type.anchors_start:
        start_date, end_date = anchor, anchor + span
    else:
        start_date, end_date = anchor - span, anchor

    if calendar is not None:
        start_date = calendar.snap_to_working_day(start_date, SnapDirection.NEXT)
        end_date = calendar.snap_to_working_day(end_date, SnapDirection.PREV)
        if end_date < start_date:
            end_date = start_date

    logger.debug(
        "Constraint applied",
        task_id=task.id,
        constraint_type=constraint.type.value,
        start_date=start_date.isoformat(),
        end_date=end_date.isoformat(),
    )
    return task.with_dates(start_date, end_date)


@dataclass
class ConstraintApplication:
    """Outcome of one auto-resolution pass."""

    tasks: list[Task]
    resolved: int
    remaining: int
    violations: list[ConstraintViolation] = field(default_factory=list)


class ConstraintEngine(ObservableService):
    """
    Holds task constraints and the violations found by the last validation.

    Constraints are unique per (task, kind). The violation set is rebuilt in
    full by ``validate_all``. The tasks and calendar of the last validation
    are kept, and every edit to the constraint set revalidates against them.
    """

    def __init__(
        self,
        constraints: list[TaskConstraint] | None = None,
        event_bus: EventBusInterface | None = None,
    ) -> None:
        super().__init__()
        self._constraints: list[TaskConstraint] = list(constraints or [])
        self._violations: list[ConstraintViolation] = []
        self._tasks: list[Task] | None = None
        self._calendar: WorkingCalendar | None = None
        self._event_bus = event_bus

    # Constraint management

    def get_constraints(self) -> list[TaskConstraint]:
        return list(self._constraints)

    def get_constraints_by_task(self, task_id: str) -> list[TaskConstraint]:
        return [c for c in self._constraints if c.task_id == task_id]

    def add_constraint(self, constraint: TaskConstraint) -> None:
        """Add a constraint, replacing one of the same kind on the same task."""
        self._constraints = [c for c in self._constraints if c.key != constraint.key]
        self._constraints.append(constraint)
        self._changed()

    def update_constraint(
        self, task_id: str, constraint_type: ConstraintType, **updates: Any
    ) -> TaskConstraint | None:
        for index, constraint in enumerate(self._constraints):
            if constraint.key == (task_id, constraint_type):
                updated = TaskConstraint.model_validate(
                    {**constraint.model_dump(), **updates}
                )
                self._constraints[index] = updated
                self._changed()
                return updated
        return None

    def remove_constraint(
        self, task_id: str, constraint_type: ConstraintType | None = None
    ) -> int:
        """Remove one kind of constraint from a task, or all of its constraints."""
        before = len(self._constraints)
        if constraint_type is not None:
            self._constraints = [
                c for c in self._constraints if c.key != (task_id, constraint_type)
            ]
        else:
            self._constraints = [c for c in self._constraints if c.task_id != task_id]
        self._changed()
        return before - len(self._constraints)

    # Violations

    def get_violations(self) -> list[ConstraintViolation]:
        return list(self._violations)

    def get_violations_by_task(self, task_id: str) -> list[ConstraintViolation]:
        return [v for v in self._violations if v.task_id == task_id]

    def validate_all(
        self, tasks: list[Task], calendar: WorkingCalendar | None = None
    ) -> list[ConstraintViolation]:
        """Rebuild the violation set; constraints on unknown tasks are skipped."""
        self._tasks = [task.model_copy(deep=True) for task in tasks]
        self._calendar = calendar
        self._changed()
        return self.get_violations()

    def _rebuild_violations(self) -> None:
        if self._tasks is None:
            self._violations = []
            return

        tasks_by_id = {task.id: task for task in self._tasks}
        violations: list[ConstraintViolation] = []
        for constraint in self._constraints:
            task = tasks_by_id.get(constraint.task_id)
            if task is None:
                continue
            violation = validate_constraint(task, constraint, self._calendar)
            if violation is not None:
                violations.append(violation)
        self._violations = violations

    def _changed(self) -> None:
        self._rebuild_violations()
        critical_count = sum(
            1 for v in self._violations if v.severity == ViolationSeverity.CRITICAL
        )
        logger.info(
            "Constraints validated",
            constraints=len(self._constraints),
            violations=len(self._violations),
            critical=critical_count,
        )

        self._notify()
        if self._event_bus is not None:
            self._event_bus.publish(
                ConstraintViolationsRecomputed(
                    violation_count=len(self._violations), critical_count=critical_count
                )
            )

    def apply_constraints(
        self, tasks: list[Task], calendar: WorkingCalendar | None = None
    ) -> ConstraintApplication:
        """
        Auto-resolve every auto-resolvable violation once, then revalidate.

        Works on a deep copy of ``tasks``; the caller's list is not modified.
        Constraints are applied in insertion order in a single pass.
        """
        adjusted = [task.model_copy(deep=True) for task in tasks]
        index_by_id = {task.id: index for index, task in enumerate(adjusted)}
        resolved = 0

        for constraint in self._constraints:
            index = index_by_id.get(constraint.task_id)
            if index is None:
                continue
            violation = validate_constraint(adjusted[index], constraint, calendar)
            if violation is not None and violation.can_auto_resolve:
                adjusted[index] = apply_constraint(adjusted[index], constraint, calendar)
                resolved += 1

        violations = self.validate_all(adjusted, calendar)
        logger.info(
            "Constraints applied", resolved=resolved, remaining=len(violations)
        )
        return ConstraintApplication(
            tasks=adjusted,
            resolved=resolved,
            remaining=len(violations),
            violations=violations,
        )

    def get_stats(self) -> dict[str, Any]:
        by_type = Counter(c.type.value for c in self._constraints)
        return {
            "total_constraints": len(self._constraints),
            "total_violations": len(self._violations),
            "critical_violations": sum(
                1 for v in self._violations if v.severity == ViolationSeverity.CRITICAL
            ),
            "auto_resolvable": sum(1 for v in self._violations if v.can_auto_resolve),
            "by_type": dict(by_type),
        }
