"""Value objects for the scheduling domain."""

from .calendar import (
    CalendarAssignment,
    CalendarException,
    Holiday,
    WorkingCalendar,
    WorkingDay,
    WorkingHours,
    WorkingTimeResult,
)
from .common import DateRange, days_between, iter_days
from .constraints import ConstraintViolation, TaskConstraint
from .enums import (
    AllocationUnitType,
    CalendarEntityType,
    CalendarSource,
    ConflictSeverity,
    ConstraintType,
    HolidayType,
    LevelingMode,
    LevelingPriority,
    LevelingStrategy,
    RateType,
    ScenarioChangeType,
    ScenarioStatus,
    SnapDirection,
    TaskStatus,
    ViolationSeverity,
)
from .rates import (
    MultiRateCost,
    PeriodCost,
    RateAssignment,
    RateBreakdown,
    RateRecord,
    ResolvedCost,
    ResolvedRate,
    TimeVariedCost,
)
from .resources import LevelingOptions, ResourceConflict
from .scenario import ChangeImpact, ScenarioChange, ScenarioDifference, ScenarioMetrics

__all__ = [
    # Calendar
    "CalendarAssignment",
    "CalendarException",
    "Holiday",
    "WorkingCalendar",
    "WorkingDay",
    "WorkingHours",
    "WorkingTimeResult",
    # Common
    "DateRange",
    "days_between",
    "iter_days",
    # Constraints
    "ConstraintViolation",
    "TaskConstraint",
    # Enums
    "AllocationUnitType",
    "CalendarEntityType",
    "CalendarSource",
    "ConflictSeverity",
    "ConstraintType",
    "HolidayType",
    "LevelingMode",
    "LevelingPriority",
    "LevelingStrategy",
    "RateType",
    "ScenarioChangeType",
    "ScenarioStatus",
    "SnapDirection",
    "TaskStatus",
    "ViolationSeverity",
    # Rates
    "MultiRateCost",
    "PeriodCost",
    "RateAssignment",
    "RateBreakdown",
    "RateRecord",
    "ResolvedCost",
    "ResolvedRate",
    "TimeVariedCost",
    # Resources
    "LevelingOptions",
    "ResourceConflict",
    # Scenarios
    "ChangeImpact",
    "ScenarioChange",
    "ScenarioDifference",
    "ScenarioMetrics",
]
