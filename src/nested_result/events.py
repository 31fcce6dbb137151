"""Observer pattern for aggregation events.

Provides event types, the observer protocol, a mixin adding observer support
to a class, and an observer that forwards events to the logging module.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "LoggingObserver",
    "ObservableMixin",
    "ResultEvent",
    "ResultEventType",
    "ResultObserver",
]


class ResultEventType(Enum):
    """Types of events emitted while aggregating results."""

    AGGREGATION_STARTED = auto()
    """Emitted before the slots of an aggregation are evaluated."""

    SLOT_EVALUATED = auto()
    """Emitted once per slot after its Result is available."""

    SLOT_FAILED = auto()
    """Emitted for each slot whose Result is a Failure, in slot order."""

    AGGREGATION_COMPLETED = auto()
    """Emitted after the combined Result has been assembled."""


@dataclass
class ResultEvent:
    """An event that can be observed.

    Attributes:
        event_type: The type of event that occurred.
        source: The object that emitted the event.
        data: Event-specific data dictionary.

    Example:
        event = ResultEvent(
            event_type=ResultEventType.SLOT_FAILED,
            source=aggregator,
            data={"slot": "hgt", "index": 3, "error": error},
        )
    """

    event_type: ResultEventType
    source: object
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ResultObserver(Protocol):
    """Protocol for event observers.

    Example:
        class CountingObserver:
            def __init__(self) -> None:
                self.failures = 0

            def on_event(self, event: ResultEvent) -> None:
                if event.event_type == ResultEventType.SLOT_FAILED:
                    self.failures += 1
    """

    def on_event(self, event: ResultEvent) -> None:
        """Handle an event.

        Args:
            event: The event to handle.
        """
        ...


class ObservableMixin:
    """Mixin giving a class a list of observers and a way to emit events.

    Observers are kept in registration order; each one receives every event
    the instance emits. ``observing()`` registers an observer for the
    duration of a ``with`` block only.

    Example:
        with aggregator.observing(LoggingObserver()):
            aggregator.run(slots)
    """

    def _registry(self) -> list[ResultObserver]:
        registry: list[ResultObserver] | None = self.__dict__.get("_observers")
        if registry is None:
            registry = self.__dict__["_observers"] = []
        return registry

    def add_observer(self, observer: ResultObserver) -> None:
        """Register an observer. Registering the same observer twice is a no-op."""
        registry = self._registry()
        if observer not in registry:
            registry.append(observer)

    def remove_observer(self, observer: ResultObserver) -> None:
        """Unregister an observer; unknown observers are ignored."""
        registry = self._registry()
        if observer in registry:
            registry.remove(observer)

    @contextmanager
    def observing(self, observer: ResultObserver) -> Iterator[ResultObserver]:
        """Register ``observer`` until the ``with`` block exits."""
        self.add_observer(observer)
        try:
            yield observer
        finally:
            self.remove_observer(observer)

    def notify(self, event: ResultEvent) -> None:
        """Send ``event`` to every registered observer."""
        for observer in tuple(self._registry()):
            observer.on_event(event)

    def emit(self, event_type: ResultEventType, **data: Any) -> ResultEvent:
        """Build an event sourced from this instance, notify observers and return it."""
        event = ResultEvent(event_type=event_type, source=self, data=data)
        self.notify(event)
        return event

    @property
    def observers(self) -> list[ResultObserver]:
        return list(self._registry())

    def clear_observers(self) -> None:
        self._registry().clear()


class LoggingObserver:
    """Forward events to a logger.

    Failed slots are logged at WARNING with the rendered error, everything
    else at DEBUG.

    Example:
        aggregator.add_observer(LoggingObserver())
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("nested_result")

    def on_event(self, event: ResultEvent) -> None:
        data = event.data
        if event.event_type == ResultEventType.SLOT_FAILED:
            self._logger.warning(
                "Slot %r of %r failed:\n%s",
                data.get("slot"),
                data.get("name"),
                data["error"].render() if data.get("error") is not None else "",
            )
        elif event.event_type == ResultEventType.AGGREGATION_COMPLETED:
            self._logger.debug(
                "Aggregation %r completed: %d/%d slots failed in %.2fms",
                data.get("name"),
                data.get("failed_count", 0),
                data.get("slot_count", 0),
                data.get("duration_ms", 0.0),
            )
        else:
            self._logger.debug("%s %s", event.event_type.name, data)
