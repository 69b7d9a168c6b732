"""FormEngine orchestrator for the formstate package.

This module provides the FormEngine class that coordinates the field table,
the listener pipeline and the value/error stores. It exposes the change, blur
and submit entry points a rendering layer calls, the store commands, and the
field mutators.

Every entry point runs to completion synchronously. Validators may call back
into the engine (for example to add or reset fields); such nested calls finish
before the outer call resumes.

Usage:
    >>> required = lambda value: "Required" if value in (None, "") else None
    >>> engine = FormEngine([
    ...     {"name": "a", "listener": {"onSubmit": [required]}},
    ...     {"name": "b"},
    ... ], initial_values={"a": ""})
    >>> engine.on_submit()
    (False, 1)
    >>> engine.errors
    {'a': 'Required'}
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from formstate.config import DEFAULT_CONFIG, EngineConfig
from formstate.events import EventEmitter, EventListener, FormEvent
from formstate.fields import FieldDefinition, FieldLike, FieldTable
from formstate.listeners import collect_functions, group_for, run
from formstate.store import Store
from formstate.types import EventType, FieldEvent, ListenerRole, ValidationContext

logger = logging.getLogger(__name__)


EventLike = Union[FieldEvent, Mapping[str, Any]]


class FormEngine:
    """State engine for one form instance.

    The engine exclusively owns its field table, value store, error store and
    ``has_submitted`` flag. Read accessors return copies.

    Attributes:
        config: Behaviour switches (see EngineConfig)
        events: Emitter that publishes a FormEvent after each command

    Examples:
        >>> engine = FormEngine([{"name": "email"}])
        >>> engine.on_change({"name": "email", "value": "a@b.c"})
        >>> engine.values
        {'email': 'a@b.c'}
        >>> engine.has_submitted
        False
    """

    def __init__(
        self,
        initial_fields: Iterable[FieldLike] = (),
        initial_values: Optional[Mapping[str, Any]] = None,
        config: Optional[Union[EngineConfig, Mapping[str, Any]]] = None,
    ):
        """Initialize the engine.

        Args:
            initial_fields: Ordered field definitions (mappings or
                FieldDefinition instances); kept as the ``reset_fields`` baseline
            initial_values: Optional pre-filled values
            config: EngineConfig or a mapping accepted by EngineConfig.from_dict

        Raises:
            FieldDefinitionError: If a field definition is malformed
            ConfigError: If ``config`` is a malformed mapping
        """
        if config is None:
            config = DEFAULT_CONFIG
        elif not isinstance(config, EngineConfig):
            config = EngineConfig.from_dict(config)
        self.config = config
        self.events = EventEmitter()

        self._table = FieldTable(initial_fields)
        self._initial_values: Dict[str, Any] = dict(initial_values or {})
        self._values = Store(self._initial_values, delete_removes_key=config.delete_removes_key)
        self._errors = Store(delete_removes_key=config.delete_removes_key)
        self._has_submitted = False

    # Read accessors

    @property
    def values(self) -> Dict[str, Any]:
        return self._values.snapshot()

    @property
    def errors(self) -> Dict[str, Any]:
        return self._errors.snapshot()

    @property
    def fields(self) -> Tuple[FieldDefinition, ...]:
        return self._table.fields

    @property
    def field_record(self) -> Dict[str, FieldDefinition]:
        return self._table.record

    @property
    def has_submitted(self) -> bool:
        return self._has_submitted

    @property
    def initial_fields(self) -> Tuple[FieldDefinition, ...]:
        return self._table.initial

    @property
    def initial_values(self) -> Dict[str, Any]:
        return dict(self._initial_values)

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        return self._table.get(name)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the whole engine state."""
        return {
            "values": self.values,
            "errors": self.errors,
            "fields": [fd.to_dict() for fd in self._table],
            "hasSubmitted": self._has_submitted,
        }

    # Notifications

    def subscribe(self, listener: EventListener, event_type: Optional[EventType] = None) -> None:
        """Register a subscriber for one event type, or for all of them."""
        if event_type is None:
            self.events.on_any(listener)
        else:
            self.events.on(event_type, listener)

    def unsubscribe(self, listener: EventListener, event_type: Optional[EventType] = None) -> None:
        if event_type is None:
            self.events.off_any(listener)
        else:
            self.events.off(event_type, listener)

    def _emit(
        self,
        event_type: EventType,
        name: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self.config.emit_events:
            return
        self.events.emit(FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            type=event_type,
            ts=datetime.now(timezone.utc),
            name=name,
            payload=payload,
        ))

    # Event dispatch

    def _context_for(self, name: str) -> Optional[ValidationContext]:
        if not self.config.pass_context:
            return None
        return ValidationContext(
            name=name,
            values=self._values.snapshot(),
            errors=self._errors.snapshot(),
            fields=self._table.fields,
            has_submitted=self._has_submitted,
        )

    def _write_error(self, name: str, error: Any) -> None:
        if error is None:
            self._errors.delete(name)
        else:
            self._errors.set(name, error)

    def on_change(self, event: EventLike) -> None:
        """Handle a value change for one field.

        Clears ``has_submitted`` and stores the new value. When the field has
        change validators its recorded error is cleared first, then the
        validators run against the stored value and their result is recorded.
        Errors of fields without change validators are left alone.
        """
        event = FieldEvent.coerce(event)
        name, value = event.name, event.value

        if self._has_submitted:
            self._has_submitted = False

        field = self._table.get(name)
        if field is None:
            logger.debug("Change for unknown field '%s': value stored, no validation", name)
        fns = group_for(field.listener if field else None, ListenerRole.ON_CHANGE)

        # Only fields re-validated on change get their stale error cleared.
        if fns is not None and self._errors.has_value(name):
            self._errors.delete(name)

        self._values.set(name, value)

        if fns is not None:
            self._write_error(name, run(fns, value, self._context_for(name)))

        self._emit(EventType.FIELD_CHANGED, name=name, payload=dict(
            event.to_dict(), error=self._errors.get(name),
        ))

    def on_blur(self, event: EventLike) -> None:
        """Run the field's blur validators and record their result.

        Values and ``has_submitted`` are left untouched.
        """
        event = FieldEvent.coerce(event)
        name, value = event.name, event.value

        field = self._table.get(name)
        if field is None:
            logger.debug("Blur for unknown field '%s' ignored", name)
            return

        fns = group_for(field.listener, ListenerRole.ON_BLUR)
        if fns is not None:
            self._write_error(name, run(fns, value, self._context_for(name)))

        self._emit(EventType.FIELD_BLURRED, name=name, payload=dict(
            event.to_dict(), error=self._errors.get(name),
        ))

    def on_submit(self) -> Tuple[bool, int]:
        """Validate every field with a listener against its stored value.

        Each field runs its change, blur and submit validators in that order.
        The error store is replaced by the fresh results: one entry per field
        with a listener (None when it passed), none for fields without one.

        Returns:
            ``(is_valid, error_count)``
        """
        self._has_submitted = True

        submit_errors: Dict[str, Any] = {}
        count = 0
        for field in self._table.fields:
            # Fields removed by a validator earlier in this submit are dropped.
            if field.listener is None or field.name not in self._table:
                continue
            value = self._values.get(field.name)
            if value is None:
                value = self.config.missing_value
            error = run(collect_functions(field.listener), value, self._context_for(field.name))
            submit_errors[field.name] = error
            if error is not None:
                count += 1

        self._errors.replace(submit_errors)

        is_valid = count == 0
        logger.info("Form submitted: valid=%s errors=%d", is_valid, count)
        self._emit(EventType.FORM_SUBMITTED, payload={"isValid": is_valid, "errorCount": count})
        return is_valid, count

    # Value/error store commands

    def set_values(self, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the values (e.g. to pre-fill a form)."""
        self._values.merge(partial)
        self._emit(EventType.VALUES_UPDATED, payload={"keys": list(partial)})

    def set_errors(self, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the errors."""
        self._errors.merge(partial)
        self._emit(EventType.ERRORS_UPDATED, payload={"keys": list(partial)})

    def delete_value(self, key: str) -> None:
        self._values.delete(key)
        self._emit(EventType.VALUE_DELETED, name=key)

    def delete_error(self, key: str) -> None:
        self._errors.delete(key)
        self._emit(EventType.ERROR_DELETED, name=key)

    def reset_values(self) -> None:
        self._values.reset()
        self._emit(EventType.VALUES_RESET)

    def reset_errors(self) -> None:
        self._errors.reset()
        self._emit(EventType.ERRORS_RESET)

    def reset_form(self) -> None:
        """Empty both values and errors; subscribers see a single event."""
        self._errors.reset()
        self._values.reset()
        self._emit(EventType.FORM_RESET)

    # Field mutators

    def add_fields(self, new_fields: Union[FieldLike, Iterable[FieldLike]], index: int) -> None:
        """Insert one or more definitions at ``index`` (clamped to the list bounds).

        Raises:
            FieldDefinitionError: If a new definition is malformed
        """
        added = self._table.add(new_fields, index)
        self._emit(EventType.FIELDS_ADDED, payload={
            "names": [fd.name for fd in added],
            "index": index,
        })

    def remove_fields(self, names: Union[str, Iterable[str]]) -> None:
        """Remove one name or several; unknown names are ignored."""
        removed = self._table.remove(names)
        if not removed:
            logger.debug("remove_fields matched nothing: %r", names)
            return
        self._emit(EventType.FIELDS_REMOVED, payload={"names": removed})

    def move_field(self, from_index: int, to_index: int) -> None:
        if not self._table.move(from_index, to_index):
            logger.debug("move_field(%d, %d) out of range, ignored", from_index, to_index)
            return
        self._emit(EventType.FIELD_MOVED, payload={"from": from_index, "to": to_index})

    def change_field(self, partial: Mapping[str, Any], name: str) -> None:
        """Shallow-merge ``partial`` into the named field; ``name`` itself is kept."""
        if self._table.change(partial, name) is None:
            logger.debug("change_field for unknown field '%s' ignored", name)
            return
        self._emit(EventType.FIELD_UPDATED, name=name, payload={"keys": list(partial)})

    def reset_fields(self) -> None:
        """Restore the field list captured at construction."""
        self._table.reset()
        self._emit(EventType.FIELDS_RESET)

    def set_fields(self, fields: Iterable[FieldLike]) -> None:
        """Replace the whole field list; ``reset_fields`` still restores the initial one.

        Raises:
            FieldDefinitionError: If a definition is malformed or a name repeats
        """
        self._table.replace(fields)
        self._emit(EventType.FIELDS_REPLACED, payload={"names": [fd.name for fd in self._table]})


__all__ = [
    "FormEngine",
]
