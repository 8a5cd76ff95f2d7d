"""Domain enums for scheduling."""

from enum import Enum, IntEnum


class TaskStatus(str, Enum):
    """Task status enumeration."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DELAYED = "delayed"

    @property
    def is_terminal(self) -> bool:
        return self == TaskStatus.COMPLETED

    @property
    def is_at_risk(self) -> bool:
        """Statuses counted as a schedule risk factor."""
        return self in {TaskStatus.NOT_STARTED, TaskStatus.ON_HOLD}


class HolidayType(str, Enum):
    PUBLIC = "public"
    COMPANY = "company"
    PROJECT = "project"


class SnapDirection(str, Enum):
    """Search direction when moving a date onto a working day."""

    NEXT = "next"
    PREV = "prev"
    NEAREST = "nearest"


class CalendarSource(str, Enum):
    """Precedence tier that supplied an effective calendar."""

    RESOURCE = "resource"
    ACTIVITY = "activity"
    PROJECT = "project"
    DEFAULT = "default"

    @property
    def label(self) -> str:
        return {
            CalendarSource.RESOURCE: "Resource calendar",
            CalendarSource.ACTIVITY: "Inherited from activity",
            CalendarSource.PROJECT: "Inherited from project",
            CalendarSource.DEFAULT: "Default calendar",
        }[self]


class CalendarEntityType(str, Enum):
    TASK = "task"
    RESOURCE = "resource"


class ConstraintType(str, Enum):
    """Task date constraint kinds."""

    ASAP = "ASAP"  # As Soon As Possible
    ALAP = "ALAP"  # As Late As Possible
    SNET = "SNET"  # Start No Earlier Than
    SNLT = "SNLT"  # Start No Later Than
    FNET = "FNET"  # Finish No Earlier Than
    FNLT = "FNLT"  # Finish No Later Than
    MSO = "MSO"  # Must Start On
    MFO = "MFO"  # Must Finish On

    @property
    def requires_date(self) -> bool:
        return self not in {ConstraintType.ASAP, ConstraintType.ALAP}

    @property
    def is_mandatory(self) -> bool:
        """Mandatory constraints are never auto-resolved."""
        return self in {ConstraintType.MSO, ConstraintType.MFO}

    @property
    def anchors_start(self) -> bool:
        return self in {ConstraintType.SNET, ConstraintType.SNLT, ConstraintType.MSO}


class ViolationSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AllocationUnitType(str, Enum):
    PERCENTAGE = "percentage"
    HOURS = "hours"


class ConflictSeverity(str, Enum):
    """Overallocation severity tiers, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _CONFLICT_SEVERITY_RANK[self]


_CONFLICT_SEVERITY_RANK = {
    ConflictSeverity.LOW: 1,
    ConflictSeverity.MEDIUM: 2,
    ConflictSeverity.HIGH: 3,
    ConflictSeverity.CRITICAL: 4,
}


class LevelingMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class LevelingStrategy(str, Enum):
    DELAY_TASKS = "delay_tasks"
    REDUCE_ALLOCATION = "reduce_allocation"


class LevelingPriority(str, Enum):
    """Which affected task the delay strategy moves."""

    EARLIEST_START = "earliest_start"
    CRITICAL_PATH = "critical_path"
    TASK_PRIORITY = "task_priority"


class ScenarioStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class ScenarioChangeType(str, Enum):
    TASK_DURATION = "task_duration"
    TASK_DATE = "task_date"
    RESOURCE_ALLOCATION = "resource_allocation"
    DEPENDENCY = "dependency"
    CONSTRAINT = "constraint"


class RateType(IntEnum):
    """Billing rate kinds, identified by their numeric code."""

    STANDARD = 1
    OVERTIME = 2
    EXTERNAL = 3
    SPECIAL = 4
    EMERGENCY = 5

    @property
    def multiplier(self) -> float:
        """Factor applied to a default rate when no rate record matches."""
        return RATE_TYPE_MULTIPLIERS[self]

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


RATE_TYPE_MULTIPLIERS: dict[RateType, float] = {
    RateType.STANDARD: 1.0,
    RateType.OVERTIME: 1.5,
    RateType.EXTERNAL: 1.2,
    RateType.SPECIAL: 1.3,
    RateType.EMERGENCY: 2.0,
}
