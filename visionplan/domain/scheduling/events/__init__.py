"""
Domain Events Module

Exports all scheduling domain events.
"""

from .domain_events import (
    # Calendar events
    CalendarChanged,
    # Constraint and conflict events
    ConstraintViolationsRecomputed,
    # Base class
    DomainEvent,
    ResourceConflictsRecomputed,
    ResourcesLeveled,
    ScenarioChangesApplied,
    # Scenario events
    ScenarioCreated,
)

__all__ = [
    "DomainEvent",
    "CalendarChanged",
    "ConstraintViolationsRecomputed",
    "ResourceConflictsRecomputed",
    "ResourcesLeveled",
    "ScenarioCreated",
    "ScenarioChangesApplied",
]
