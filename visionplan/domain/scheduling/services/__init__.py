"""
Scheduling Domain Services

Services that own calendars, constraints, resource allocations and
scenarios, plus the pure functions they are built on.
"""

from .calendar_service import (
    CalendarInheritanceContext,
    CalendarRegistry,
    CalendarResolver,
    ResolvedCalendar,
)
from .constraint_engine import (
    ConstraintApplication,
    ConstraintEngine,
    apply_constraint,
    suggest_fix,
    validate_constraint,
)
from .rate_resolver import RateResolver, count_working_days, get_rate_effective_on
from .resource_ledger import (
    LevelingResult,
    ResourceLedger,
    calculate_resource_allocation,
    calculate_resource_utilization,
    conflict_severity,
    detect_resource_conflicts,
    find_available_resources,
    get_resource_availability,
    get_resource_workload,
    level_resources,
)
from .scenario_simulator import (
    ScenarioSimulator,
    apply_scenario_changes,
    calculate_change_impact,
    calculate_scenario_metrics,
    compare_scenarios,
    create_scenario,
)

__all__ = [
    # Calendars
    "CalendarInheritanceContext",
    "CalendarRegistry",
    "CalendarResolver",
    "ResolvedCalendar",
    # Constraints
    "ConstraintApplication",
    "ConstraintEngine",
    "apply_constraint",
    "suggest_fix",
    "validate_constraint",
    # Rates
    "RateResolver",
    "count_working_days",
    "get_rate_effective_on",
    # Resources
    "LevelingResult",
    "ResourceLedger",
    "calculate_resource_allocation",
    "calculate_resource_utilization",
    "conflict_severity",
    "detect_resource_conflicts",
    "find_available_resources",
    "get_resource_availability",
    "get_resource_workload",
    "level_resources",
    # Scenarios
    "ScenarioSimulator",
    "apply_scenario_changes",
    "calculate_change_impact",
    "calculate_scenario_metrics",
    "compare_scenarios",
    "create_scenario",
]
