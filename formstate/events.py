"""Notification events for the formstate engine.

This module provides the event data structure and event emitter that let a
rendering layer follow engine state. Every engine command publishes a typed
FormEvent once it has fully completed.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from dateutil import parser as date_parser

from formstate.types import EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single notification about an engine command.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_01H8...")
        type: Event type from EventType enum
        ts: UTC timestamp when the command completed
        name: Field the command targeted, when there is exactly one
        payload: Optional command-specific data (e.g., error, added names)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     type=EventType.FIELD_CHANGED,
        ...     ts=datetime.now(timezone.utc),
        ...     name="email",
        ... )
        >>> event.to_dict()["type"]
        'field.changed'
    """
    event_id: str
    type: EventType
    ts: datetime
    name: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Convert string type to EventType enum if needed."""
        if isinstance(self.type, str):
            object.__setattr__(self, "type", EventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "ts": self.ts.isoformat(),
        }
        if self.name is not None:
            result["name"] = self.name
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Single-line JSON; payload values that are not JSON types are stringified."""
        return json.dumps(self.to_dict(), separators=(',', ':'), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary (camelCase keys)."""
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            ts=date_parser.isoparse(data["ts"]),
            name=data.get("name"),
            payload=data.get("payload"),
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event subscriber callbacks.

Subscribers are called synchronously after a command completes.
"""


class EventEmitter:
    """Event emitter for managing subscribers and dispatching events.

    Features:
    - Type-specific subscriptions (listen to specific event types)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch (subscribers called in registration order)
    - Error isolation (a failing subscriber is logged, others still run)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.FORM_SUBMITTED, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type; unknown listeners are ignored."""
        if event_type in self._listeners:
            try:
                self._listeners[event_type].remove(listener)
            except ValueError:
                pass

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from the wildcard subscription; unknown listeners are ignored."""
        try:
            self._any_listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event to all registered subscribers.

        Type-specific subscribers run first, then wildcard subscribers. A
        subscriber that raises is logged and skipped.
        """
        targets = list(self._listeners.get(event.type, [])) + list(self._any_listeners)
        for listener in targets:
            try:
                listener(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", listener, event.type.value)

    def clear(self) -> None:
        """Remove all subscribers."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Count subscribers for one type, or all of them (wildcards included)."""
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        total = len(self._any_listeners)
        for listeners in self._listeners.values():
            total += len(listeners)
        return total


__all__ = [
    "FormEvent",
    "EventType",
    "EventListener",
    "EventEmitter",
]
