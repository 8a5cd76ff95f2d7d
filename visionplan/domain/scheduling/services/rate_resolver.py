"""
Rate Resolver

Resolves which billing rate applies to a resource on a given day and costs
assignments whose rate changes while they run.
"""

from datetime import date

from ....core.observability import get_logger
from ..value_objects.common import iter_days
from ..value_objects.enums import RateType
from ..value_objects.rates import (
    MultiRateCost,
    PeriodCost,
    RateAssignment,
    RateBreakdown,
    RateRecord,
    ResolvedCost,
    ResolvedRate,
    TimeVariedCost,
)

logger = get_logger(__name__)

WEEKEND_DAYS = {5, 6}


def _newest_first(rate: RateRecord) -> tuple[int, int]:
    # Records without effective_from sort after every dated record
    if rate.effective_from is None:
        return (1, 0)
    return (0, -rate.effective_from.toordinal())


def get_rate_effective_on(
    rates: list[RateRecord] | tuple[RateRecord, ...],
    rate_type: RateType,
    check_date: date,
) -> RateRecord | None:
    """
    The authoritative rate record of a type on a day.

    Among records whose effective window contains the day, the one with the
    latest ``effective_from`` wins; undated records rank last.
    """
    applicable = sorted(
        (r for r in rates if r.rate_type == rate_type and r.is_effective_on(check_date)),
        key=_newest_first,
    )
    return applicable[0] if applicable else None


def count_working_days(start_date: date, end_date: date) -> int:
    """Monday to Friday days in an inclusive range."""
    return sum(1 for day in iter_days(start_date, end_date) if day.weekday() not in WEEKEND_DAYS)


class RateResolver:
    """
    Resolves effective rates and the costs derived from them.

    When no record matches, the default rate scaled by the rate type's
    multiplier is used and the result is flagged as a default rate.
    """

    def resolve_rate(
        self,
        resource_id: str,
        rate_type: RateType,
        reference_date: date,
        rates: list[RateRecord] | tuple[RateRecord, ...],
        default_rate: float,
    ) -> ResolvedRate:
        record = get_rate_effective_on(
            [r for r in rates if r.resource_id == resource_id], rate_type, reference_date
        )
        if record is None:
            logger.debug(
                "No rate record matched; using default rate",
                resource_id=resource_id,
                rate_type=rate_type.display_name,
                reference_date=reference_date.isoformat(),
            )
            return ResolvedRate(
                resource_id=resource_id,
                rate_type=rate_type,
                rate=default_rate * rate_type.multiplier,
                is_default=True,
            )

        return ResolvedRate(
            resource_id=resource_id,
            rate_type=rate_type,
            rate=record.price_per_unit,
            cost_per_use=record.cost_per_use or 0.0,
            effective_from=record.effective_from,
            effective_to=record.effective_to,
            is_default=False,
        )

    def resolve_resource_cost(
        self,
        resource_id: str,
        rate_type: RateType,
        units: float,
        working_days: int,
        units_per_time: float,
        rates: list[RateRecord] | tuple[RateRecord, ...],
        default_rate: float,
        reference_date: date | None = None,
    ) -> ResolvedCost:
        """
        Cost of an assignment billed at the single rate effective on a day.

        Args:
            resource_id: Resource being billed
            rate_type: Rate kind to resolve
            units: Allocation percentage (100 means full time)
            working_days: Number of days billed
            units_per_time: Units per day at 100%
            rates: Rate records to resolve from
            default_rate: Fallback rate before the type multiplier
            reference_date: Day the rate is resolved for; defaults to today
        """
        resolved = self.resolve_rate(
            resource_id, rate_type, reference_date or date.today(), rates, default_rate
        )
        total_units = (units / 100) * units_per_time * working_days
        return ResolvedCost(
            resource_id=resource_id,
            rate_type=rate_type,
            price_per_unit=resolved.rate,
            cost_per_use=0.0,
            total_units=total_units,
            total_cost=total_units * resolved.rate,
            effective_date=resolved.effective_from,
            is_default=resolved.is_default,
        )

    def calculate_time_varied_cost(
        self,
        resource_id: str,
        rates: list[RateRecord] | tuple[RateRecord, ...],
        rate_type: RateType,
        default_rate: float,
        units: float,
        units_per_time: float,
        start_date: date,
        end_date: date,
        exclude_weekends: bool = True,
    ) -> TimeVariedCost:
        """Cost of an assignment with the rate resolved independently per day."""
        daily_units = (units / 100) * units_per_time
        period_costs: list[PeriodCost] = []
        total_cost = 0.0

        for day in iter_days(start_date, end_date):
            if exclude_weekends and day.weekday() in WEEKEND_DAYS:
                continue
            rate = self.resolve_rate(resource_id, rate_type, day, rates, default_rate).rate
            cost = daily_units * rate
            period_costs.append(PeriodCost(date=day, units=daily_units, rate=rate, cost=cost))
            total_cost += cost

        return TimeVariedCost(total_cost=total_cost, period_costs=tuple(period_costs))

    def calculate_multi_rate_cost(self, assignments: list[RateAssignment]) -> MultiRateCost:
        """
        Total cost of several assignments.

        The breakdown has one entry per assignment and resolved rate value,
        in order of first appearance.
        """
        breakdown: list[RateBreakdown] = []
        period_details: list[PeriodCost] = []
        total_cost = 0.0

        for assignment in assignments:
            varied = self.calculate_time_varied_cost(
                assignment.resource_id,
                assignment.rates,
                assignment.rate_type,
                assignment.default_rate,
                assignment.units,
                assignment.units_per_time,
                assignment.start_date,
                assignment.end_date,
                assignment.exclude_weekends,
            )
            period_details.extend(varied.period_costs)

            by_rate: dict[float, list[float]] = {}
            for period in varied.period_costs:
                totals = by_rate.setdefault(period.rate, [0.0, 0.0])
                totals[0] += period.units
                totals[1] += period.cost

            breakdown.extend(
                RateBreakdown(
                    resource_id=assignment.resource_id,
                    rate_type=assignment.rate_type,
                    rate=rate,
                    total_units=total_units,
                    total_cost=cost,
                )
                for rate, (total_units, cost) in by_rate.items()
            )
            total_cost += varied.total_cost

        logger.debug(
            "Multi-rate cost calculated",
            assignments=len(assignments),
            total_cost=total_cost,
        )
        return MultiRateCost(
            total_cost=total_cost,
            breakdown=tuple(breakdown),
            period_details=tuple(period_details),
        )
