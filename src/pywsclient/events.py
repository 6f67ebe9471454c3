"""Event objects and an asynchronous event emitter."""

from __future__ import annotations

import inspect
import uuid
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from pywsclient.constants import DEFAULT_MAX_EVENT_LISTENERS
from pywsclient.types import EventData, EventType, Timestamp
from pywsclient.utils import get_logger, get_timestamp

__all__: list[str] = ["Event", "EventEmitter", "EventHandler"]

logger = get_logger(name=__name__)

EventHandler: TypeAlias = Callable[["Event"], Awaitable[None] | None]


@dataclass(kw_only=True)
class Event:
    """A notification with its payload and metadata."""

    type: EventType | str
    timestamp: Timestamp = field(default_factory=get_timestamp)
    data: EventData = None
    source: Any = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        """Convert known event type strings to the enumeration."""
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            try:
                self.type = EventType(self.type)
            except ValueError:
                logger.warning("Unknown event type string: '%s'", self.type)

    def to_dict(self) -> dict[str, Any]:
        """Convert the event to a dictionary."""
        return {
            "id": self.event_id,
            "type": self.type,
            "timestamp": self.timestamp,
            "data": self.data,
            "source": self.source,
        }

    def __repr__(self) -> str:
        """Provide a developer-friendly representation."""
        return f"Event(type={self.type}, id={self.event_id}, timestamp={self.timestamp})"

    def __str__(self) -> str:
        """Provide a short representation."""
        return f"Event({self.type}, {self.event_id[:8]})"


class EventEmitter:
    """Dispatch events to registered handlers in registration order."""

    _emitter_initialized: bool = False

    def __init__(self, *, max_listeners: int = DEFAULT_MAX_EVENT_LISTENERS) -> None:
        """Initialize the emitter; repeated calls are ignored."""
        if self._emitter_initialized:
            return

        self._max_listeners = max_listeners
        self._handlers: defaultdict[EventType | str, list[EventHandler]] = defaultdict(list)
        self._once_handlers: defaultdict[EventType | str, list[EventHandler]] = defaultdict(list)
        self._emitter_initialized = True

    async def emit(self, *, event_type: EventType | str, data: EventData = None, source: Any = None) -> None:
        """Emit an event and wait for its handlers to complete."""
        event = Event(type=event_type, data=data, source=source)
        handlers = list(self._handlers.get(event.type, ()))
        handlers.extend(self._once_handlers.pop(event.type, []))
        if not handlers:
            return

        logger.debug("Emitting event %s to %d handlers", event.type, len(handlers))
        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Error in event handler for %s: %s", event.type, e, exc_info=True)

    def listener_count(self, *, event_type: EventType | str) -> int:
        """Return the number of handlers registered for an event type."""
        return len(self._handlers.get(event_type, ())) + len(self._once_handlers.get(event_type, ()))

    def off(self, *, event_type: EventType | str, handler: EventHandler | None = None) -> None:
        """Remove a handler, or every handler when none is given."""
        if handler is None:
            self._handlers.pop(event_type, None)
            self._once_handlers.pop(event_type, None)
            return

        for registry in (self._handlers, self._once_handlers):
            handlers = registry.get(event_type)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def on(self, *, event_type: EventType | str, handler: EventHandler) -> None:
        """Register a handler for an event type."""
        handlers = self._handlers[event_type]
        if handler in handlers:
            logger.warning("Handler already registered for event %s", event_type)
            return
        self._check_listener_limit(event_type=event_type)
        handlers.append(handler)

    def once(self, *, event_type: EventType | str, handler: EventHandler) -> None:
        """Register a handler that is removed after its first invocation."""
        self._check_listener_limit(event_type=event_type)
        self._once_handlers[event_type].append(handler)

    def remove_all_listeners(self, *, event_type: EventType | str | None = None) -> None:
        """Remove every handler, optionally only for one event type."""
        if event_type is None:
            self._handlers.clear()
            self._once_handlers.clear()
        else:
            self.off(event_type=event_type)

    def _check_listener_limit(self, *, event_type: EventType | str) -> None:
        """Log a warning when an event type exceeds the listener limit."""
        if self.listener_count(event_type=event_type) >= self._max_listeners:
            logger.warning(
                "Possible memory leak: %d listeners registered for event %s (max %d)",
                self.listener_count(event_type=event_type) + 1,
                event_type,
                self._max_listeners,
            )
