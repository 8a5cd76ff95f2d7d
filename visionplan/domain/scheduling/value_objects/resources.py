"""Resource conflict and leveling option value objects."""

from __future__ import annotations

import datetime as dt

from pydantic import Field

from ....core.config import settings
from ...shared.base import ValueObject
from .enums import ConflictSeverity, LevelingMode, LevelingPriority, LevelingStrategy


class ResourceConflict(ValueObject):
    """A resource allocated beyond its availability on one day."""

    id: str
    resource_id: str
    date: dt.date
    allocated_units: float
    available_units: float
    overallocation: float
    affected_tasks: tuple[str, ...] = ()
    severity: ConflictSeverity


class LevelingOptions(ValueObject):
    mode: LevelingMode = LevelingMode.AUTOMATIC
    strategy: LevelingStrategy = LevelingStrategy.DELAY_TASKS
    priority: LevelingPriority = LevelingPriority.EARLIEST_START
    max_iterations: int = Field(
        default_factory=lambda: settings.LEVELING_MAX_ITERATIONS, ge=0
    )
