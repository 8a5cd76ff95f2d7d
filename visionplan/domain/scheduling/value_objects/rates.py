"""
Rate Value Objects

Time-effective billing rates and the cost breakdowns computed from them.
A rate record is authoritative for its type inside its effective window;
open window bounds default to the epoch and to 9999-12-31.
"""

from __future__ import annotations

import datetime as dt
from datetime import date

from pydantic import Field, model_validator

from ...shared.base import ValueObject
from .enums import RateType

EPOCH = date(1970, 1, 1)
FAR_FUTURE = date(9999, 12, 31)


class RateRecord(ValueObject):
    resource_id: str
    rate_type: RateType = RateType.STANDARD
    price_per_unit: float = Field(ge=0)
    cost_per_use: float | None = Field(default=None, ge=0)
    effective_from: date | None = None
    effective_to: date | None = None

    @model_validator(mode="after")
    def window_ordered(self) -> RateRecord:
        if (
            self.effective_from is not None
            and self.effective_to is not None
            and self.effective_to < self.effective_from
        ):
            raise ValueError("Rate effective_to must not be before effective_from")
        return self

    def is_effective_on(self, check_date: date) -> bool:
        start = self.effective_from or EPOCH
        end = self.effective_to or FAR_FUTURE
        return start <= check_date <= end


class ResolvedRate(ValueObject):
    """The rate that applies to one resource, type and day."""

    resource_id: str
    rate_type: RateType
    rate: float
    cost_per_use: float = 0.0
    effective_from: date | None = None
    effective_to: date | None = None
    is_default: bool = False

    @property
    def rate_type_name(self) -> str:
        return self.rate_type.display_name


class PeriodCost(ValueObject):
    date: dt.date
    units: float
    rate: float
    cost: float


class TimeVariedCost(ValueObject):
    total_cost: float
    period_costs: tuple[PeriodCost, ...] = ()


class ResolvedCost(ValueObject):
    """Single-rate cost of an assignment over a number of working days."""

    resource_id: str
    rate_type: RateType
    price_per_unit: float
    cost_per_use: float = 0.0
    total_units: float
    total_cost: float
    effective_date: date | None = None
    is_default: bool = False


class RateBreakdown(ValueObject):
    """Units and cost of one assignment billed at one resolved rate."""

    resource_id: str
    rate_type: RateType
    rate: float
    total_units: float
    total_cost: float


class RateAssignment(ValueObject):
    """Inputs for costing one resource assignment."""

    resource_id: str
    rates: tuple[RateRecord, ...] = ()
    rate_type: RateType = RateType.STANDARD
    default_rate: float = Field(default=0.0, ge=0)
    units: float = Field(default=100.0, ge=0)
    units_per_time: float = Field(default=8.0, ge=0)
    start_date: date
    end_date: date
    exclude_weekends: bool = True


class MultiRateCost(ValueObject):
    total_cost: float
    breakdown: tuple[RateBreakdown, ...] = ()
    period_details: tuple[PeriodCost, ...] = ()
