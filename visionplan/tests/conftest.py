"""Shared pytest configuration for the scheduling engine tests."""

from datetime import date

import pytest

from visionplan.domain.scheduling.value_objects.calendar import WorkingCalendar
from visionplan.infrastructure.events.event_bus import InMemoryEventBus


@pytest.fixture
def standard_calendar() -> WorkingCalendar:
    """Monday to Friday calendar without holidays."""
    return WorkingCalendar.standard()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def monday() -> date:
    """A Monday (2024-01-08) used as the anchor for most schedules."""
    return date(2024, 1, 8)
