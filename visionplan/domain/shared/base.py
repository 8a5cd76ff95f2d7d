"""Base classes for domain entities, value objects and observable services."""

from collections.abc import Callable
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from ...core.observability import get_logger

logger = get_logger(__name__)

Listener = Callable[[], None]


def new_id(prefix: str) -> str:
    """Generate a readable unique identifier such as ``scenario-1f2e...``."""
    return f"{prefix}-{uuid4().hex[:12]}"


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True)


class Entity(BaseModel):
    """Base class for entities (have identity, can change over time)."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=lambda: str(uuid4()))

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        return hash(self.id)

    def same_values(self, other: "Entity") -> bool:
        """Field-by-field comparison, ignoring identity semantics."""
        return self.model_dump() == other.model_dump()


class ObservableService:
    """
    Base class for stateful domain services.

    Mutating operations rebuild their derived state in full and then call
    ``_notify``. Listeners receive no arguments and are expected to re-read
    the service's getters.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Zero-argument callable invoked after every mutation

        Returns:
            Callable that removes the listener; calling it twice is harmless
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                # Continue with other listeners even if one fails
                logger.error(
                    "Error in service listener",
                    service=type(self).__name__,
                    error=str(e),
                )
