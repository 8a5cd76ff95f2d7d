"""
Calendar Service

Holds the project's working calendars, their holidays, exceptions and
entity assignments, and resolves which calendar governs a task or resource
allocation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ....core.observability import get_logger
from ...shared.base import ObservableService, new_id
from ...shared.exceptions import NotFoundError
from ..entities.task import Task
from ..events.domain_events import CalendarChanged
from ..value_objects.calendar import (
    CalendarAssignment,
    CalendarException,
    Holiday,
    WorkingCalendar,
)
from ..value_objects.enums import CalendarEntityType, CalendarSource

if TYPE_CHECKING:
    from ....infrastructure.events.event_bus import EventBusInterface

logger = get_logger(__name__)


class CalendarRegistry(ObservableService):
    """
    Registry of working calendars.

    The first calendar is active on construction; an empty registry starts
    with the standard Monday to Friday calendar. Lookups of unknown ids return
    None and mutations targeting unknown ids are ignored.
    """

    def __init__(
        self,
        calendars: list[WorkingCalendar] | None = None,
        event_bus: EventBusInterface | None = None,
    ) -> None:
        super().__init__()
        self._calendars: list[WorkingCalendar] = list(calendars or []) or [
            WorkingCalendar.standard()
        ]
        self._assignments: list[CalendarAssignment] = []
        self._active_calendar_id: str | None = self._calendars[0].id
        self._event_bus = event_bus

    # Calendar management

    def get_calendars(self) -> list[WorkingCalendar]:
        return list(self._calendars)

    def get_calendar_by_id(self, calendar_id: str) -> WorkingCalendar | None:
        for calendar in self._calendars:
            if calendar.id == calendar_id:
                return calendar
        return None

    def require_calendar(self, calendar_id: str) -> WorkingCalendar:
        calendar = self.get_calendar_by_id(calendar_id)
        if calendar is None:
            raise NotFoundError("calendar", calendar_id)
        return calendar

    def get_active_calendar(self) -> WorkingCalendar | None:
        if self._active_calendar_id is None:
            return None
        return self.get_calendar_by_id(self._active_calendar_id)

    def set_active_calendar(self, calendar_id: str) -> bool:
        if self.get_calendar_by_id(calendar_id) is None:
            logger.warning("Cannot activate unknown calendar", calendar_id=calendar_id)
            return False
        self._active_calendar_id = calendar_id
        self._changed(calendar_id, "activated")
        return True

    def add_calendar(self, calendar: WorkingCalendar) -> None:
        self._calendars.append(calendar)
        self._changed(calendar.id, "added")

    def update_calendar(
        self, calendar_id: str, **updates: Any
    ) -> WorkingCalendar | None:
        """
        Replace fields of a calendar.

        The merged calendar is re-validated, so invalid updates raise
        pydantic's ``ValidationError`` and leave the registry unchanged.
        """
        index = self._index_of(calendar_id)
        if index is None:
            return None

        current = self._calendars[index]
        updated = WorkingCalendar.model_validate(
            {**current.model_dump(), **updates, "id": current.id}
        )
        self._calendars[index] = updated
        self._changed(calendar_id, "updated")
        return updated

    def delete_calendar(self, calendar_id: str) -> bool:
        """Remove a calendar; the only calendar and the active one are kept."""
        if len(self._calendars) == 1 or calendar_id == self._active_calendar_id:
            logger.info("Calendar deletion refused", calendar_id=calendar_id)
            return False

        index = self._index_of(calendar_id)
        if index is None:
            return False

        del self._calendars[index]
        self._changed(calendar_id, "deleted")
        return True

    def clone_calendar(self, calendar_id: str, new_name: str) -> WorkingCalendar | None:
        original = self.get_calendar_by_id(calendar_id)
        if original is None:
            return None

        cloned = original.model_copy(
            update={"id": new_id("calendar"), "name": new_name}, deep=True
        )
        self._calendars.append(cloned)
        self._changed(cloned.id, "cloned")
        return cloned

    # Holidays

    def add_holiday(self, calendar_id: str, holiday: Holiday) -> bool:
        return self._replace_calendar(
            calendar_id,
            lambda calendar: {"holidays": (*calendar.holidays, holiday)},
            "holiday_added",
        )

    def update_holiday(self, calendar_id: str, holiday_id: str, **updates: Any) -> bool:
        calendar = self.get_calendar_by_id(calendar_id)
        if calendar is None or not any(h.id == holiday_id for h in calendar.holidays):
            return False

        holidays = tuple(
            Holiday.model_validate({**h.model_dump(), **updates, "id": h.id})
            if h.id == holiday_id
            else h
            for h in calendar.holidays
        )
        return self._replace_calendar(
            calendar_id, lambda _: {"holidays": holidays}, "holiday_updated"
        )

    def remove_holiday(self, calendar_id: str, holiday_id: str) -> bool:
        return self._replace_calendar(
            calendar_id,
            lambda calendar: {
                "holidays": tuple(h for h in calendar.holidays if h.id != holiday_id)
            },
            "holiday_removed",
        )

    # Exceptions

    def add_exception(self, calendar_id: str, exception: CalendarException) -> bool:
        return self._replace_calendar(
            calendar_id,
            lambda calendar: {"exceptions": (*calendar.exceptions, exception)},
            "exception_added",
        )

    def remove_exception(self, calendar_id: str, exception_id: str) -> bool:
        return self._replace_calendar(
            calendar_id,
            lambda calendar: {
                "exceptions": tuple(
                    e for e in calendar.exceptions if e.id != exception_id
                )
            },
            "exception_removed",
        )

    # Assignments

    def assign_calendar(
        self, entity_id: str, entity_type: CalendarEntityType, calendar_id: str
    ) -> CalendarAssignment:
        """Assign a calendar to an entity, replacing any previous assignment."""
        assignment = CalendarAssignment(
            entity_id=entity_id, entity_type=entity_type, calendar_id=calendar_id
        )
        self._assignments = [
            a
            for a in self._assignments
            if not (a.entity_id == entity_id and a.entity_type == entity_type)
        ]
        self._assignments.append(assignment)
        self._changed(calendar_id, "assigned")
        return assignment

    def get_assignments(self) -> list[CalendarAssignment]:
        return list(self._assignments)

    def get_calendar_for_entity(
        self, entity_id: str, entity_type: CalendarEntityType
    ) -> WorkingCalendar | None:
        """Assigned calendar of an entity, else the active calendar."""
        for assignment in self._assignments:
            if assignment.entity_id == entity_id and assignment.entity_type == entity_type:
                calendar = self.get_calendar_by_id(assignment.calendar_id)
                if calendar is not None:
                    return calendar
                break
        return self.get_active_calendar()

    # Internals

    def _index_of(self, calendar_id: str) -> int | None:
        for index, calendar in enumerate(self._calendars):
            if calendar.id == calendar_id:
                return index
        return None

    def _replace_calendar(
        self,
        calendar_id: str,
        build_updates: Callable[[WorkingCalendar], dict[str, Any]],
        action: str,
    ) -> bool:
        index = self._index_of(calendar_id)
        if index is None:
            return False

        current = self._calendars[index]
        self._calendars[index] = WorkingCalendar.model_validate(
            {**current.model_dump(), **build_updates(current)}
        )
        self._changed(calendar_id, action)
        return True

    def _changed(self, calendar_id: str | None, action: str) -> None:
        logger.debug("Calendar registry changed", calendar_id=calendar_id, action=action)
        self._notify()
        if self._event_bus is not None:
            self._event_bus.publish(CalendarChanged(calendar_id=calendar_id, action=action))


@dataclass(frozen=True)
class CalendarInheritanceContext:
    """Calendar ids available at each precedence tier, most specific first."""

    resource_calendar_id: str | None = None
    activity_calendar_id: str | None = None
    project_calendar_id: str | None = None


@dataclass(frozen=True)
class ResolvedCalendar:
    calendar: WorkingCalendar
    source: CalendarSource
    source_id: str | None = None

    @property
    def label(self) -> str:
        return self.source.label


class CalendarResolver:
    """
    Picks the effective calendar for a task or allocation.

    Precedence is resource, then activity, then project, then the registry's
    active calendar. An id that does not resolve falls through to the next
    tier.
    """

    def __init__(self, registry: CalendarRegistry) -> None:
        self._registry = registry

    def resolve(self, context: CalendarInheritanceContext) -> ResolvedCalendar:
        """
        Resolve the effective calendar.

        Raises:
            NotFoundError: If no tier resolves and there is no active calendar
        """
        tiers = (
            (CalendarSource.RESOURCE, context.resource_calendar_id),
            (CalendarSource.ACTIVITY, context.activity_calendar_id),
            (CalendarSource.PROJECT, context.project_calendar_id),
        )
        for source, calendar_id in tiers:
            if not calendar_id:
                continue
            calendar = self._registry.get_calendar_by_id(calendar_id)
            if calendar is not None:
                return ResolvedCalendar(calendar=calendar, source=source, source_id=calendar_id)
            logger.debug(
                "Calendar id did not resolve", source=source.value, calendar_id=calendar_id
            )

        default_calendar = self._registry.get_active_calendar()
        if default_calendar is None:
            raise NotFoundError("calendar", None)

        return ResolvedCalendar(
            calendar=default_calendar,
            source=CalendarSource.DEFAULT,
            source_id=default_calendar.id,
        )

    def resolve_for_allocation(
        self,
        resource_calendar_id: str | None,
        task: Task | None = None,
        project_calendar_id: str | None = None,
    ) -> ResolvedCalendar:
        return self.resolve(
            CalendarInheritanceContext(
                resource_calendar_id=resource_calendar_id,
                activity_calendar_id=task.calendar_id if task is not None else None,
                project_calendar_id=project_calendar_id,
            )
        )

    @staticmethod
    def inheritance_label(source: CalendarSource) -> str:
        return source.label
