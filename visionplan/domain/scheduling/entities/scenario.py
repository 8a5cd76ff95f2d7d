"""Scenario entity: a named what-if variant of the project schedule."""

from datetime import date

from pydantic import BaseModel, Field

from ...shared.base import Entity, new_id
from ..value_objects.enums import ScenarioStatus
from ..value_objects.scenario import ScenarioChange, ScenarioDifference, ScenarioMetrics


class Scenario(Entity):
    id: str = Field(default_factory=lambda: new_id("scenario"))
    name: str = Field(min_length=1)
    description: str | None = None
    baseline_date: date = Field(default_factory=date.today)
    created_date: date = Field(default_factory=date.today)
    status: ScenarioStatus = ScenarioStatus.DRAFT
    changes: list[ScenarioChange] = Field(default_factory=list)
    metrics: ScenarioMetrics

    @property
    def is_active(self) -> bool:
        return self.status == ScenarioStatus.ACTIVE


class ScenarioComparison(BaseModel):
    """Scenarios compared against the first one, with recommendations."""

    scenarios: list[Scenario] = Field(default_factory=list)
    differences: list[ScenarioDifference] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
