"""
Event bus implementation for domain event publishing and subscription.

The event bus provides a central mechanism for publishing domain events
and routing them to registered event handlers. Publishing is synchronous:
handlers run in subscription order before ``publish`` returns.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable

from visionplan.core.observability import get_logger
from visionplan.domain.scheduling.events.domain_events import DomainEvent

logger = get_logger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventBusInterface(ABC):
    """
    Abstract interface for event bus implementations.

    Defines the contract for publishing events and subscribing to event types.
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all registered handlers.

        Args:
            event: Domain event to publish
        """

    @abstractmethod
    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandler
    ) -> Callable[[], None]:
        """
        Subscribe a handler to a specific event type.

        Args:
            event_type: Type of event to subscribe to
            handler: Handler function to call when event is published

        Returns:
            Callable that unsubscribes the handler
        """

    @abstractmethod
    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """
        Unsubscribe a handler from a specific event type.

        Args:
            event_type: Type of event to unsubscribe from
            handler: Handler function to remove
        """

    @abstractmethod
    def clear_handlers(self, event_type: type[DomainEvent] | None = None) -> None:
        """
        Clear event handlers.

        Args:
            event_type: Optional event type to clear handlers for. If None, clears all.
        """


class InMemoryEventBus(EventBusInterface):
    """
    In-memory implementation of event bus.

    Supports multiple handlers per event type and keeps a bounded history of
    published events. A failing handler is logged and does not stop the
    remaining handlers.
    """

    def __init__(self, max_history_size: int = 1000) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._event_history: list[DomainEvent] = []
        self._max_history_size = max_history_size

    def publish(self, event: DomainEvent) -> None:
        self._add_to_history(event)

        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug("No handlers registered", event_type=event_type.__name__)
            return

        logger.debug(
            "Publishing event",
            event_type=event_type.__name__,
            handler_count=len(handlers),
        )

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # Continue with other handlers even if one fails
                logger.error(
                    "Error handling event",
                    event_type=event_type.__name__,
                    handler=repr(handler),
                    error=str(e),
                )

    def subscribe(
        self, event_type: type[DomainEvent], handler: EventHandler
    ) -> Callable[[], None]:
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)
            logger.debug("Subscribed handler", event_type=event_type.__name__)
        else:
            logger.warning(
                "Handler already subscribed", event_type=event_type.__name__
            )

        def unsubscribe() -> None:
            if handler in self._handlers.get(event_type, []):
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        if handler in self._handlers.get(event_type, []):
            self._handlers[event_type].remove(handler)
            logger.debug("Unsubscribed handler", event_type=event_type.__name__)
        else:
            logger.warning("Handler not found", event_type=event_type.__name__)

    def clear_handlers(self, event_type: type[DomainEvent] | None = None) -> None:
        if event_type:
            self._handlers.pop(event_type, None)
            logger.debug("Cleared handlers", event_type=event_type.__name__)
        else:
            self._handlers.clear()
            logger.debug("Cleared all event handlers")

    def get_handler_count(self, event_type: type[DomainEvent]) -> int:
        return len(self._handlers.get(event_type, []))

    def get_event_history(
        self, event_type: type[DomainEvent] | None = None
    ) -> list[DomainEvent]:
        """
        Get history of published events.

        Args:
            event_type: Optional event type to filter by

        Returns:
            List of published events, oldest first
        """
        if event_type:
            return [event for event in self._event_history if type(event) is event_type]
        return self._event_history.copy()

    def clear_event_history(self) -> None:
        self._event_history.clear()

    def _add_to_history(self, event: DomainEvent) -> None:
        """Add event to history, maintaining size limit."""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history.pop(0)  # Remove oldest event
