"""Listener pipeline for the formstate engine.

A field carries up to three ordered validator groups (change, blur, submit).
This module turns a field's ListenerConfig into an ordered function list and
runs that list against a single value, returning the first reported error.

Usage:
    >>> required = lambda value: "Required" if value in (None, "") else None
    >>> listener = ListenerConfig(on_submit=(required,))
    >>> run(collect_functions(listener), "")
    'Required'
    >>> run(collect_functions(listener), "filled") is None
    True
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from formstate.schema import LISTENER_KEYS
from formstate.types import ListenerRole, ValidationContext, Validator

logger = logging.getLogger(__name__)


def _as_group(fns: Optional[Iterable[Validator]]) -> Optional[Tuple[Validator, ...]]:
    if fns is None:
        return None
    return tuple(fns)


@dataclass(frozen=True)
class ListenerConfig:
    """Validator groups attached to a field.

    Each group is optional and keeps its own order. An empty group is kept
    as an empty tuple and behaves like "no error".

    Attributes:
        on_change: Validators run on change events
        on_blur: Validators run on blur events
        on_submit: Validators run on submit, after the change and blur groups

    Examples:
        >>> cfg = ListenerConfig.from_dict({"onChange": [str.strip]})
        >>> cfg.on_change == (str.strip,)
        True
        >>> cfg.on_blur is None
        True
    """
    on_change: Optional[Tuple[Validator, ...]] = None
    on_blur: Optional[Tuple[Validator, ...]] = None
    on_submit: Optional[Tuple[Validator, ...]] = None

    def __post_init__(self):
        """Normalize lists to tuples so the config stays immutable."""
        for attr in ("on_change", "on_blur", "on_submit"):
            object.__setattr__(self, attr, _as_group(getattr(self, attr)))

    def group(self, role: ListenerRole) -> Optional[Tuple[Validator, ...]]:
        """Return the validator group for ``role`` (None when absent)."""
        if role == ListenerRole.ON_CHANGE:
            return self.on_change
        if role == ListenerRole.ON_BLUR:
            return self.on_blur
        return self.on_submit

    def to_dict(self) -> Dict[str, List[Validator]]:
        """Convert to the camelCase mapping form, omitting absent groups."""
        result: Dict[str, List[Validator]] = {}
        for role in ListenerRole:
            fns = self.group(role)
            if fns is not None:
                result[role.value] = list(fns)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ListenerConfig":
        """Create ListenerConfig from a mapping with camelCase or snake_case keys."""
        groups: Dict[ListenerRole, Any] = {}
        for key, fns in data.items():
            role = LISTENER_KEYS[key]
            if fns is not None:
                groups[role] = fns
        return cls(
            on_change=groups.get(ListenerRole.ON_CHANGE),
            on_blur=groups.get(ListenerRole.ON_BLUR),
            on_submit=groups.get(ListenerRole.ON_SUBMIT),
        )


def group_for(listener: Optional[ListenerConfig], role: ListenerRole) -> Optional[Tuple[Validator, ...]]:
    """Return a single validator group, tolerating a missing listener."""
    if listener is None:
        return None
    return listener.group(role)


def collect_functions(listener: Optional[ListenerConfig]) -> List[Validator]:
    """Concatenate change, blur and submit groups in that fixed order.

    Used on submit so that no rule is skipped just because the user never
    triggered a change or blur on the field.
    """
    fns: List[Validator] = []
    if listener is None:
        return fns
    for role in ListenerRole:
        group = listener.group(role)
        if group:
            fns.extend(group)
    return fns


def run(
    fns: Optional[Iterable[Validator]],
    value: Any,
    context: Optional[ValidationContext] = None,
) -> Optional[Any]:
    """Run validators in order and return the first error, or None.

    Non-callable entries are skipped. Once an error is latched the remaining
    validators are not called. Exceptions raised by a validator propagate.

    Args:
        fns: Ordered validators (None or empty means "no error")
        value: Value under validation
        context: When given, each validator is called as ``fn(value, context)``
    """
    if not fns:
        return None

    for fn in fns:
        if not callable(fn):
            logger.debug("Skipping non-callable validator %r", fn)
            continue
        result = fn(value) if context is None else fn(value, context)
        if result is not None:
            return result
    return None


__all__ = [
    "ListenerConfig",
    "group_for",
    "collect_functions",
    "run",
]
