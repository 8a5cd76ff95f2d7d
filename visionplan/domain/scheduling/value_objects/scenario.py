"""What-if scenario value objects."""

from datetime import date
from typing import Any

from pydantic import Field

from ...shared.base import ValueObject, new_id
from .enums import ScenarioChangeType


class ChangeImpact(ValueObject):
    affected_tasks: int = 0
    date_shift: int = 0
    cost_delta: float = 0.0


class ScenarioChange(ValueObject):
    """
    One edit applied to a copy of the baseline task set.

    ``field`` selects the edited attribute for date changes
    (``start_date`` or ``end_date``); ``new_value`` holds a day count for
    duration changes and a date for date changes.
    """

    id: str = Field(default_factory=lambda: new_id("change"))
    type: ScenarioChangeType
    entity_id: str
    field: str
    original_value: Any = None
    new_value: Any = None
    impact: ChangeImpact | None = None


class ScenarioMetrics(ValueObject):
    total_duration: int
    project_end_date: date
    total_cost: float
    resource_utilization: float
    critical_path_length: int
    risk_score: float = Field(ge=0, le=100)
    completion_probability: float = Field(ge=0, le=100)


class ScenarioDifference(ValueObject):
    """Deltas of one scenario against the comparison baseline."""

    scenario_id: str
    duration_delta: int
    cost_delta: float
    end_date_delta: int
    critical_changes: tuple[str, ...] = ()
