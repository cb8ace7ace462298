# core/event_bus.py — InMemoryEventBus implementation
#
# Synchronous single-process pub/sub. The maintenance service publishes
# schedule/completion events after each committed mutation; subscribers
# (cache invalidation, notifications) decide what to do with them.

import logging
from collections import defaultdict
from typing import Callable, Any

from core.interfaces.event_bus import EventBus, Event

log = logging.getLogger("event_bus")


class InMemoryEventBus(EventBus):
    """
    Synchronous in-process event bus.

    Handlers run in registration order. A handler that raises is logged and
    skipped; it never fails the mutation that published the event.
    """

    def __init__(self):
        self._handlers: dict[str, list[Callable[[Event], Any]]] = defaultdict(list)
        # "*" subscribers receive every event
        self._wildcard_handlers: list[Callable[[Event], Any]] = []

    def publish(self, event: Event) -> None:
        """Dispatch an event to its type's handlers, then to wildcard handlers."""
        handlers = list(self._handlers.get(event.event_type, []))
        handlers.extend(self._wildcard_handlers)
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                log.error(
                    f"Event handler {handler!r} raised for event "
                    f"'{event.event_type}': {e}",
                    exc_info=True,
                )

    def subscribe(self, event_type: str, handler: Callable[[Event], Any]) -> None:
        """Register a handler for an event type ("*" for all events)."""
        bucket = self._wildcard_handlers if event_type == "*" else self._handlers[event_type]
        if handler not in bucket:
            bucket.append(handler)

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        """Remove a previously registered handler. Unknown handlers are ignored."""
        bucket = self._wildcard_handlers if event_type == "*" else self._handlers.get(event_type, [])
        if handler in bucket:
            bucket.remove(handler)


_bus: InMemoryEventBus = InMemoryEventBus()


def get_event_bus() -> InMemoryEventBus:
    """Return the application-level event bus singleton."""
    return _bus
