"""
Domain Events

Events published by the scheduling services after a mutation has rebuilt
their derived state. Events are immutable records; handlers re-read the
publishing service for details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all scheduling domain events."""

    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, kw_only=True)
class CalendarChanged(DomainEvent):
    """Raised when a calendar, its holidays, exceptions or assignments change."""

    calendar_id: str | None
    action: str


@dataclass(frozen=True, kw_only=True)
class ConstraintViolationsRecomputed(DomainEvent):
    """Raised after the violation set has been rebuilt."""

    violation_count: int
    critical_count: int


@dataclass(frozen=True, kw_only=True)
class ResourceConflictsRecomputed(DomainEvent):
    """Raised after the resource conflict set has been rebuilt."""

    conflict_count: int
    resource_ids: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ResourcesLeveled(DomainEvent):
    """Raised when an automatic leveling run finishes."""

    strategy: str
    iterations: int
    conflicts_before: int
    conflicts_after: int


@dataclass(frozen=True, kw_only=True)
class ScenarioCreated(DomainEvent):
    scenario_id: str
    name: str


@dataclass(frozen=True, kw_only=True)
class ScenarioChangesApplied(DomainEvent):
    """Raised when changes produce a new scenario from a base scenario."""

    base_scenario_id: str
    scenario_id: str
    change_count: int
