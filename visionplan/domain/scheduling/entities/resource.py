"""Resource entities: people, crews and equipment, and their allocations."""

from datetime import date, timedelta

from pydantic import Field, model_validator

from ....core.config import settings
from ...shared.base import Entity, ValueObject
from ..value_objects.enums import AllocationUnitType


class Resource(Entity):
    """A resource with a default daily capacity."""

    name: str = Field(min_length=1)
    role: str = "labor"
    capacity: float = Field(
        default_factory=lambda: settings.DEFAULT_RESOURCE_CAPACITY, ge=0
    )
    capabilities: list[str] = Field(default_factory=list)
    calendar_id: str | None = None


class ResourceAllocation(Entity):
    """Units of a resource assigned to a task over an inclusive date range."""

    resource_id: str
    task_id: str
    start_date: date
    end_date: date
    units: float = Field(ge=0)
    unit_type: AllocationUnitType = AllocationUnitType.HOURS
    cost: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ResourceAllocation":
        if self.end_date < self.start_date:
            raise ValueError("Allocation end date must not be before its start date")
        return self

    def covers(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def shifted(self, days: int) -> "ResourceAllocation":
        delta = timedelta(days=days)
        return self.model_copy(
            update={
                "start_date": self.start_date + delta,
                "end_date": self.end_date + delta,
            }
        )


class ResourceAvailability(ValueObject):
    """Overrides a resource's default capacity for a date range."""

    resource_id: str
    start_date: date
    end_date: date
    available_units: float = Field(ge=0)
    reason: str | None = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ResourceAvailability":
        if self.end_date < self.start_date:
            raise ValueError("Availability end date must not be before its start date")
        return self

    def covers(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date
