"""
Scenario Simulator

What-if analysis: applies hypothetical changes to a copy of the task set,
computes schedule metrics for the result and compares scenarios against a
baseline.

Metrics are deliberately simple. The critical path length is the longest
single task duration rather than a longest path through the dependency
network, total cost is a flat rate per task-day and resource utilization is
a fixed placeholder.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from ....core.config import settings
from ....core.observability import get_logger
from ...shared.base import ObservableService, new_id
from ...shared.exceptions import ValidationError
from ..entities.scenario import Scenario, ScenarioComparison
from ..entities.task import Dependency, Task
from ..events.domain_events import ScenarioChangesApplied, ScenarioCreated
from ..value_objects.common import days_between
from ..value_objects.enums import ScenarioChangeType, ScenarioStatus
from ..value_objects.scenario import (
    ChangeImpact,
    ScenarioChange,
    ScenarioDifference,
    ScenarioMetrics,
)

if TYPE_CHECKING:
    from ....infrastructure.events.event_bus import EventBusInterface

logger = get_logger(__name__)


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _apply_change(tasks: list[Task], change: ScenarioChange) -> list[Task]:
    """Apply one change; changes to unknown tasks are ignored."""
    index = next((i for i, t in enumerate(tasks) if t.id == change.entity_id), None)

    if change.type == ScenarioChangeType.TASK_DURATION:
        if index is None:
            return tasks
        task = tasks[index]
        duration = int(change.new_value)
        if duration < 0:
            raise ValidationError(
                "duration", duration, f"Task {task.id} cannot have a negative duration"
            )
        tasks[index] = task.rebuilt(
            duration=duration, end_date=task.start_date + timedelta(days=duration)
        )
    elif change.type == ScenarioChangeType.TASK_DATE:
        if index is None:
            return tasks
        task = tasks[index]
        if change.field == "start_date":
            new_start = _as_date(change.new_value)
            tasks[index] = task.rebuilt(
                start_date=new_start,
                end_date=new_start + timedelta(days=task.span_days),
            )
        elif change.field == "end_date":
            # Raises ValidationError when the new end precedes the start
            tasks[index] = task.with_dates(task.start_date, _as_date(change.new_value))
    elif change.type in (
        ScenarioChangeType.RESOURCE_ALLOCATION,
        ScenarioChangeType.DEPENDENCY,
        ScenarioChangeType.CONSTRAINT,
    ):
        # Recorded on the scenario; no effect on task dates
        pass
    else:
        raise ValueError(f"Unhandled scenario change type: {change.type}")

    return tasks


def _risk_score(
    tasks: list[Task], dependencies: list[Dependency], reference_date: date
) -> float:
    count = len(tasks)
    risk = 0.0

    average_duration = sum(t.effective_duration for t in tasks) / count
    if average_duration > 30:
        risk += 20
    elif average_duration > 14:
        risk += 10

    dependency_ratio = len(dependencies) / count
    if dependency_ratio > 2:
        risk += 30
    elif dependency_ratio > 1:
        risk += 15

    at_risk = sum(1 for t in tasks if t.status.is_at_risk)
    risk += (at_risk / count) * 20

    overdue = sum(1 for t in tasks if t.is_overdue(reference_date))
    risk += (overdue / count) * 30

    return min(100.0, risk)


def calculate_scenario_metrics(
    tasks: list[Task],
    dependencies: list[Dependency],
    reference_date: date | None = None,
) -> ScenarioMetrics:
    """
    Schedule metrics of a task set.

    Args:
        tasks: Tasks of the scenario
        dependencies: Dependencies between them (only their count matters)
        reference_date: Day used to decide which tasks are overdue; defaults
            to today. Pass it explicitly for reproducible results.
    """
    reference_date = reference_date or date.today()

    if not tasks:
        return ScenarioMetrics(
            total_duration=0,
            project_end_date=reference_date,
            total_cost=0.0,
            resource_utilization=0.0,
            critical_path_length=0,
            risk_score=0.0,
            completion_probability=100.0,
        )

    project_start = min(t.start_date for t in tasks)
    project_end = max(t.end_date for t in tasks)
    risk_score = _risk_score(tasks, dependencies, reference_date)

    return ScenarioMetrics(
        total_duration=days_between(project_start, project_end),
        project_end_date=project_end,
        total_cost=sum(t.effective_duration for t in tasks) * settings.SCENARIO_COST_PER_TASK_DAY,
        resource_utilization=settings.SCENARIO_RESOURCE_UTILIZATION,
        critical_path_length=max(t.effective_duration for t in tasks),
        risk_score=risk_score,
        completion_probability=max(0.0, 100.0 - risk_score),
    )


def create_scenario(
    name: str,
    description: str | None,
    baseline_tasks: list[Task],
    baseline_dependencies: list[Dependency],
    reference_date: date | None = None,
) -> Scenario:
    return Scenario(
        name=name,
        description=description,
        status=ScenarioStatus.DRAFT,
        metrics=calculate_scenario_metrics(
            baseline_tasks, baseline_dependencies, reference_date
        ),
    )


def apply_scenario_changes(
    base_scenario: Scenario,
    tasks: list[Task],
    changes: list[ScenarioChange],
    reference_date: date | None = None,
) -> tuple[Scenario, list[Task]]:
    """
    Apply changes in order to a copy of ``tasks``.

    Returns:
        A new draft scenario carrying the changes and the recomputed metrics,
        and the modified task list. Neither the base scenario nor the input
        tasks are modified.
    """
    modified = [t.model_copy(deep=True) for t in tasks]
    for change in changes:
        modified = _apply_change(modified, change)

    scenario = base_scenario.model_copy(
        update={
            "id": new_id("scenario"),
            "changes": list(changes),
            "metrics": calculate_scenario_metrics(modified, [], reference_date),
            "status": ScenarioStatus.DRAFT,
        },
        deep=True,
    )
    return scenario, modified


def calculate_change_impact(
    tasks: list[Task],
    dependencies: list[Dependency],
    change: ScenarioChange,
    reference_date: date | None = None,
) -> ScenarioChange:
    """
    Annotate a change with its effect on project end date and cost.

    ``affected_tasks`` counts the dependencies leaving the changed task.
    """
    if not any(t.id == change.entity_id for t in tasks):
        return change.model_copy(update={"impact": ChangeImpact()})

    before = calculate_scenario_metrics(tasks, dependencies, reference_date)
    modified = _apply_change([t.model_copy(deep=True) for t in tasks], change)
    after = calculate_scenario_metrics(modified, dependencies, reference_date)

    impact = ChangeImpact(
        affected_tasks=sum(1 for d in dependencies if d.from_task_id == change.entity_id),
        date_shift=days_between(before.project_end_date, after.project_end_date),
        cost_delta=after.total_cost - before.total_cost,
    )
    return change.model_copy(update={"impact": impact})


def _recommendations(scenarios: list[Scenario]) -> list[str]:
    recommendations: list[str] = []

    # Strictly better wins, so ties keep the earliest scenario
    best = scenarios[0]
    for scenario in scenarios[1:]:
        if scenario.metrics.completion_probability > best.metrics.completion_probability:
            best = scenario
    recommendations.append(
        f'Scenario "{best.name}" has the highest completion probability '
        f"({best.metrics.completion_probability:.1f}%)"
    )

    cheapest = scenarios[0]
    for scenario in scenarios[1:]:
        if scenario.metrics.total_cost < cheapest.metrics.total_cost:
            cheapest = scenario
    if cheapest.id != best.id:
        recommendations.append(
            f'Scenario "{cheapest.name}" offers the lowest cost '
            f"(${cheapest.metrics.total_cost:.2f})"
        )

    fastest = scenarios[0]
    for scenario in scenarios[1:]:
        if scenario.metrics.total_duration < fastest.metrics.total_duration:
            fastest = scenario
    if fastest.id not in (best.id, cheapest.id):
        recommendations.append(
            f'Scenario "{fastest.name}" completes {fastest.metrics.total_duration} days faster'
        )

    high_risk = [
        s for s in scenarios if s.metrics.risk_score > settings.SCENARIO_HIGH_RISK_THRESHOLD
    ]
    if high_risk:
        recommendations.append(
            f"Warning: {len(high_risk)} scenario(s) have high risk scores "
            f"(>{settings.SCENARIO_HIGH_RISK_THRESHOLD:g})"
        )

    return recommendations


def compare_scenarios(scenarios: list[Scenario]) -> ScenarioComparison:
    """Compare every scenario against the first one."""
    if not scenarios:
        return ScenarioComparison()

    baseline = scenarios[0].metrics
    differences: list[ScenarioDifference] = []

    for scenario in scenarios[1:]:
        metrics = scenario.metrics
        duration_delta = metrics.total_duration - baseline.total_duration
        cost_delta = metrics.total_cost - baseline.total_cost
        critical_changes: list[str] = []

        if abs(duration_delta) > settings.SCENARIO_CRITICAL_DURATION_DELTA_DAYS:
            direction = "increased" if duration_delta > 0 else "decreased"
            critical_changes.append(
                f"Project duration {direction} by {abs(duration_delta)} days"
            )

        if abs(cost_delta) > settings.SCENARIO_CRITICAL_COST_DELTA:
            direction = "increased" if cost_delta > 0 else "decreased"
            critical_changes.append(f"Total cost {direction} by ${abs(cost_delta):.2f}")

        if metrics.risk_score > baseline.risk_score + settings.SCENARIO_CRITICAL_RISK_DELTA:
            critical_changes.append("Risk score significantly increased")

        differences.append(
            ScenarioDifference(
                scenario_id=scenario.id,
                duration_delta=duration_delta,
                cost_delta=cost_delta,
                end_date_delta=days_between(baseline.project_end_date, metrics.project_end_date),
                critical_changes=tuple(critical_changes),
            )
        )

    return ScenarioComparison(
        scenarios=list(scenarios),
        differences=differences,
        recommendations=_recommendations(scenarios),
    )


class ScenarioSimulator(ObservableService):
    """Registry of what-if scenarios."""

    def __init__(
        self,
        scenarios: list[Scenario] | None = None,
        event_bus: EventBusInterface | None = None,
    ) -> None:
        super().__init__()
        self._scenarios: list[Scenario] = list(scenarios or [])
        self._active_scenario_id: str | None = None
        self._event_bus = event_bus

    def get_scenarios(self) -> list[Scenario]:
        return list(self._scenarios)

    def get_scenario_by_id(self, scenario_id: str) -> Scenario | None:
        for scenario in self._scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None

    def get_active_scenario(self) -> Scenario | None:
        if self._active_scenario_id is None:
            return None
        return self.get_scenario_by_id(self._active_scenario_id)

    def set_active_scenario(self, scenario_id: str | None) -> None:
        self._active_scenario_id = scenario_id
        self._notify()

    def create_scenario(
        self,
        name: str,
        description: str | None,
        tasks: list[Task],
        dependencies: list[Dependency],
        reference_date: date | None = None,
    ) -> Scenario:
        scenario = create_scenario(name, description, tasks, dependencies, reference_date)
        self._scenarios.append(scenario)
        logger.info("Scenario created", scenario_id=scenario.id, name=name)

        self._notify()
        if self._event_bus is not None:
            self._event_bus.publish(ScenarioCreated(scenario_id=scenario.id, name=name))
        return scenario

    def update_scenario(self, scenario_id: str, **updates: Any) -> Scenario | None:
        for index, scenario in enumerate(self._scenarios):
            if scenario.id == scenario_id:
                updated = Scenario.model_validate(
                    {**scenario.model_dump(), **updates, "id": scenario.id}
                )
                self._scenarios[index] = updated
                self._notify()
                return updated
        return None

    def delete_scenario(self, scenario_id: str) -> None:
        self._scenarios = [s for s in self._scenarios if s.id != scenario_id]
        if self._active_scenario_id == scenario_id:
            self._active_scenario_id = None
        self._notify()

    def apply_changes(
        self,
        base_scenario_id: str,
        tasks: list[Task],
        changes: list[ScenarioChange],
        reference_date: date | None = None,
    ) -> tuple[Scenario, list[Task]] | None:
        """Derive and register a new scenario; None when the base is unknown."""
        base = self.get_scenario_by_id(base_scenario_id)
        if base is None:
            logger.warning("Base scenario not found", scenario_id=base_scenario_id)
            return None

        scenario, modified = apply_scenario_changes(base, tasks, changes, reference_date)
        self._scenarios.append(scenario)
        logger.info(
            "Scenario changes applied",
            base_scenario_id=base.id,
            scenario_id=scenario.id,
            changes=len(changes),
        )

        self._notify()
        if self._event_bus is not None:
            self._event_bus.publish(
                ScenarioChangesApplied(
                    base_scenario_id=base.id,
                    scenario_id=scenario.id,
                    change_count=len(changes),
                )
            )
        return scenario, modified

    def calculate_impact(
        self,
        tasks: list[Task],
        dependencies: list[Dependency],
        change: ScenarioChange,
        reference_date: date | None = None,
    ) -> ScenarioChange:
        return calculate_change_impact(tasks, dependencies, change, reference_date)

    def compare(self, scenario_ids: list[str]) -> ScenarioComparison | None:
        """Compare registered scenarios; unknown ids are skipped."""
        scenarios = [
            s for s in (self.get_scenario_by_id(i) for i in scenario_ids) if s is not None
        ]
        if not scenarios:
            return None
        return compare_scenarios(scenarios)

    def clone_scenario(self, scenario_id: str, new_name: str) -> Scenario | None:
        original = self.get_scenario_by_id(scenario_id)
        if original is None:
            return None

        cloned = original.model_copy(
            update={
                "id": new_id("scenario"),
                "name": new_name,
                "created_date": date.today(),
                "status": ScenarioStatus.DRAFT,
            },
            deep=True,
        )
        self._scenarios.append(cloned)
        self._notify()
        return cloned

    def get_stats(self) -> dict[str, Any]:
        by_status = {status.value: 0 for status in ScenarioStatus}
        for scenario in self._scenarios:
            by_status[scenario.status.value] += 1
        return {
            "total_scenarios": len(self._scenarios),
            "active_scenario_id": self._active_scenario_id,
            "by_status": by_status,
        }
