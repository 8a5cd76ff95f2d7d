"""Tests for effective-rate resolution and rate-aware costing."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from visionplan.domain.scheduling.services.rate_resolver import (
    RateResolver,
    count_working_days,
    get_rate_effective_on,
)
from visionplan.domain.scheduling.value_objects.enums import RateType
from visionplan.domain.scheduling.value_objects.rates import RateAssignment

from ..fixtures import create_rate


@pytest.fixture
def resolver():
    return RateResolver()


@pytest.fixture
def rates():
    """Standard rate of 50 from January, raised to 60 from June."""
    return [
        create_rate(50.0, effective_from=date(2024, 1, 1)),
        create_rate(60.0, effective_from=date(2024, 6, 1)),
    ]


class TestRateRecord:
    def test_window_must_be_ordered(self):
        with pytest.raises(PydanticValidationError):
            create_rate(50.0, effective_from=date(2024, 6, 1), effective_to=date(2024, 1, 1))

    def test_open_bounds(self):
        rate = create_rate(50.0)

        assert rate.is_effective_on(date(1970, 1, 1))
        assert rate.is_effective_on(date(2999, 1, 1))

    def test_closed_window(self):
        rate = create_rate(50.0, date(2024, 1, 1), date(2024, 1, 31))

        assert rate.is_effective_on(date(2024, 1, 31))
        assert not rate.is_effective_on(date(2024, 2, 1))


class TestEffectiveRate:
    def test_latest_effective_record_wins(self, rates):
        assert get_rate_effective_on(rates, RateType.STANDARD, date(2024, 7, 1)).price_per_unit == 60.0
        assert get_rate_effective_on(rates, RateType.STANDARD, date(2024, 3, 1)).price_per_unit == 50.0

    def test_before_first_record_nothing_matches(self, rates):
        assert get_rate_effective_on(rates, RateType.STANDARD, date(2023, 12, 31)) is None

    def test_undated_record_ranks_last(self):
        rates = [
            create_rate(45.0),
            create_rate(50.0, effective_from=date(2024, 1, 1)),
        ]

        assert get_rate_effective_on(rates, RateType.STANDARD, date(2024, 3, 1)).price_per_unit == 50.0
        assert get_rate_effective_on(rates, RateType.STANDARD, date(2023, 3, 1)).price_per_unit == 45.0

    def test_other_types_ignored(self, rates):
        assert get_rate_effective_on(rates, RateType.OVERTIME, date(2024, 7, 1)) is None

    def test_expired_record_skipped(self):
        rates = [
            create_rate(50.0, effective_from=date(2024, 1, 1)),
            create_rate(70.0, effective_from=date(2024, 2, 1), effective_to=date(2024, 2, 29)),
        ]

        assert get_rate_effective_on(rates, RateType.STANDARD, date(2024, 2, 15)).price_per_unit == 70.0
        assert get_rate_effective_on(rates, RateType.STANDARD, date(2024, 3, 1)).price_per_unit == 50.0


class TestResolveRate:
    def test_matching_record(self, resolver, rates):
        resolved = resolver.resolve_rate(
            "crane-1", RateType.STANDARD, date(2024, 7, 1), rates, default_rate=40.0
        )

        assert resolved.rate == 60.0
        assert resolved.effective_from == date(2024, 6, 1)
        assert not resolved.is_default
        assert resolved.rate_type_name == "Standard"

    def test_default_rate_scaled_by_type(self, resolver, rates):
        resolved = resolver.resolve_rate(
            "crane-1", RateType.OVERTIME, date(2024, 7, 1), rates, default_rate=40.0
        )

        assert resolved.rate == 60.0
        assert resolved.is_default
        assert resolved.effective_from is None

    def test_records_of_other_resources_ignored(self, resolver):
        rates = [create_rate(90.0, resource_id="crane-2")]

        resolved = resolver.resolve_rate(
            "crane-1", RateType.STANDARD, date(2024, 7, 1), rates, default_rate=40.0
        )

        assert resolved.rate == 40.0
        assert resolved.is_default

    @pytest.mark.parametrize(
        "rate_type,expected",
        [
            (RateType.STANDARD, 100.0),
            (RateType.OVERTIME, 150.0),
            (RateType.EXTERNAL, 120.0),
            (RateType.SPECIAL, 130.0),
            (RateType.EMERGENCY, 200.0),
        ],
    )
    def test_default_multipliers(self, resolver, rate_type, expected):
        resolved = resolver.resolve_rate("crane-1", rate_type, date(2024, 7, 1), [], 100.0)

        assert resolved.rate == pytest.approx(expected)


class TestResourceCost:
    def test_single_rate_cost(self, resolver, rates):
        cost = resolver.resolve_resource_cost(
            "crane-1",
            RateType.STANDARD,
            units=50.0,
            working_days=5,
            units_per_time=8.0,
            rates=rates,
            default_rate=40.0,
            reference_date=date(2024, 7, 1),
        )

        assert cost.total_units == 20.0
        assert cost.price_per_unit == 60.0
        assert cost.total_cost == 1200.0
        assert cost.effective_date == date(2024, 6, 1)
        assert not cost.is_default

    def test_count_working_days(self):
        assert count_working_days(date(2024, 1, 8), date(2024, 1, 14)) == 5
        assert count_working_days(date(2024, 1, 13), date(2024, 1, 14)) == 0


class TestTimeVariedCost:
    def test_rate_change_mid_assignment(self, resolver, rates):
        # Friday 2024-05-31 through Tuesday 2024-06-04
        cost = resolver.calculate_time_varied_cost(
            "crane-1",
            rates,
            RateType.STANDARD,
            default_rate=40.0,
            units=100.0,
            units_per_time=8.0,
            start_date=date(2024, 5, 31),
            end_date=date(2024, 6, 4),
        )

        assert [p.date for p in cost.period_costs] == [
            date(2024, 5, 31),
            date(2024, 6, 3),
            date(2024, 6, 4),
        ]
        assert [p.rate for p in cost.period_costs] == [50.0, 60.0, 60.0]
        assert cost.total_cost == 1360.0

    def test_weekends_included_on_request(self, resolver, rates):
        cost = resolver.calculate_time_varied_cost(
            "crane-1",
            rates,
            RateType.STANDARD,
            default_rate=40.0,
            units=100.0,
            units_per_time=8.0,
            start_date=date(2024, 5, 31),
            end_date=date(2024, 6, 4),
            exclude_weekends=False,
        )

        assert len(cost.period_costs) == 5
        assert cost.total_cost == 400.0 + 4 * 480.0


class TestMultiRateCost:
    def test_breakdown_per_rate(self, resolver, rates):
        assignments = [
            RateAssignment(
                resource_id="crane-1",
                rates=tuple(rates),
                start_date=date(2024, 5, 31),
                end_date=date(2024, 6, 4),
            ),
            RateAssignment(
                resource_id="welder-1",
                default_rate=30.0,
                units=50.0,
                start_date=date(2024, 6, 3),
                end_date=date(2024, 6, 3),
            ),
        ]

        result = resolver.calculate_multi_rate_cost(assignments)

        assert [(b.resource_id, b.rate, b.total_units, b.total_cost) for b in result.breakdown] == [
            ("crane-1", 50.0, 8.0, 400.0),
            ("crane-1", 60.0, 16.0, 960.0),
            ("welder-1", 30.0, 4.0, 120.0),
        ]
        assert result.total_cost == 1480.0
        assert len(result.period_details) == 4

    def test_no_assignments(self, resolver):
        result = resolver.calculate_multi_rate_cost([])

        assert result.total_cost == 0.0
        assert result.breakdown == ()
