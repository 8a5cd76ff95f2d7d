"""Entities for the scheduling domain."""

from .resource import Resource, ResourceAllocation, ResourceAvailability
from .scenario import Scenario, ScenarioComparison
from .task import Dependency, Task

__all__ = [
    "Dependency",
    "Resource",
    "ResourceAllocation",
    "ResourceAvailability",
    "Scenario",
    "ScenarioComparison",
    "Task",
]
