"""Core type definitions for the formstate engine.

This module defines the fundamental types shared across the engine:
- ListenerRole: The three listener groups a field can carry
- EventType: Notification types published after each engine command
- FieldEvent: The ``{name, value}`` payload the UI layer hands to the engine
- ValidationContext: Read-only snapshot handed to context-aware validators

These types form the contract between the rendering layer and the engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from typing_extensions import TypedDict


class ListenerRole(str, Enum):
    """Listener groups, in the order they are reconciled on submit."""
    ON_CHANGE = "onChange"
    ON_BLUR = "onBlur"
    ON_SUBMIT = "onSubmit"


class EventType(str, Enum):
    """Notification types emitted by the engine.

    One event is published after each command has fully completed.
    """
    FIELD_CHANGED = "field.changed"
    FIELD_BLURRED = "field.blurred"
    FORM_SUBMITTED = "form.submitted"
    VALUES_UPDATED = "values.updated"
    ERRORS_UPDATED = "errors.updated"
    VALUE_DELETED = "value.deleted"
    ERROR_DELETED = "error.deleted"
    VALUES_RESET = "values.reset"
    ERRORS_RESET = "errors.reset"
    FORM_RESET = "form.reset"
    FIELDS_ADDED = "fields.added"
    FIELDS_REMOVED = "fields.removed"
    FIELD_MOVED = "field.moved"
    FIELD_UPDATED = "field.updated"
    FIELDS_RESET = "fields.reset"
    FIELDS_REPLACED = "fields.replaced"


class FieldEventDict(TypedDict):
    """Mapping form of a UI event."""
    name: str
    value: Any


@dataclass(frozen=True)
class FieldEvent:
    """A UI event targeting one field.

    Attributes:
        name: Name of the field the event belongs to
        value: Current value reported by the UI control

    Examples:
        >>> FieldEvent.coerce({"name": "email", "value": "a@b.c"})
        FieldEvent(name='email', value='a@b.c')
    """
    name: str
    value: Any = None

    @classmethod
    def coerce(cls, event: Union["FieldEvent", Mapping[str, Any]]) -> "FieldEvent":
        """Accept either a FieldEvent or a ``{name, value}`` mapping."""
        if isinstance(event, FieldEvent):
            return event
        return cls(name=event["name"], value=event.get("value"))

    def to_dict(self) -> FieldEventDict:
        """Convert to dict for serialization."""
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class ValidationContext:
    """Snapshot of engine state handed to context-aware validators.

    Only passed when ``EngineConfig.pass_context`` is enabled. Every mapping is
    a copy; mutating it has no effect on the engine.

    Attributes:
        name: Field currently being validated
        values: Copy of the value store
        errors: Copy of the error store
        fields: Ordered field definitions at validation time
        has_submitted: Whether the last terminal event was a submit attempt
    """
    name: str
    values: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, Any] = field(default_factory=dict)
    fields: Tuple[Any, ...] = ()
    has_submitted: bool = False


Validator = Callable[..., Optional[Any]]
"""A validator returns an error payload, or None when the value is acceptable.

Called as ``fn(value)``, or ``fn(value, context)`` when context passing is on.
"""


__all__ = [
    "ListenerRole",
    "EventType",
    "FieldEventDict",
    "FieldEvent",
    "ValidationContext",
    "Validator",
]
