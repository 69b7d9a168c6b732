"""Field table for the formstate engine.

The field table is the authoritative, ordered set of field definitions. The
ordered list is the source of truth for every mutation and for iteration
order; a name-keyed mapping is derived from it at the end of each mutation so
that lookups are O(1) and never stale.

Usage:
    >>> table = FieldTable([{"name": "email"}, {"name": "password"}])
    >>> [f.name for f in table.fields]
    ['email', 'password']
    >>> table.add([{"name": "username"}], 0)
    [FieldDefinition(name='username', listener=None, options=mappingproxy({}))]
    >>> [f.name for f in table.fields]
    ['username', 'email', 'password']
    >>> table.get("email").name
    'email'
"""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from formstate.errors import ConfigIssue, FieldDefinitionError, IssueCode
from formstate.listeners import ListenerConfig
from formstate.schema import field_definition_validator

logger = logging.getLogger(__name__)


RESERVED_KEYS = ("name", "listener")


@dataclass(frozen=True)
class FieldDefinition:
    """A named input slot tracked by the engine.

    Attributes:
        name: Unique identifier within the active field set
        listener: Optional validator groups; a field without one never
            produces or clears errors
        options: Arbitrary extra attributes (label, placeholder, ...) carried
            for the rendering layer; stored as a read-only copy

    Examples:
        >>> fd = FieldDefinition.from_dict({"name": "email", "label": "E-mail"})
        >>> dict(fd.options)
        {'label': 'E-mail'}
        >>> fd.to_dict()
        {'label': 'E-mail', 'name': 'email'}
    """
    name: str
    listener: Optional[ListenerConfig] = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Freeze a private copy of ``options``."""
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def __getitem__(self, key: str) -> Any:
        """Read an attribute the way the mapping form exposes it."""
        if key == "name":
            return self.name
        if key == "listener":
            return self.listener
        return self.options[key]

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def merged(self, partial: Mapping[str, Any]) -> "FieldDefinition":
        """Return a copy with ``partial`` shallow-merged in.

        The ``name`` key is ignored so a field's identity never changes. A
        ``listener`` key replaces the listener; every other key is merged into
        ``options``.
        """
        listener = self.listener
        if "listener" in partial:
            listener = _coerce_listener(partial["listener"], self.name)
        options = dict(self.options)
        options.update({k: v for k, v in partial.items() if k not in RESERVED_KEYS})
        return replace(self, listener=listener, options=options)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the mapping form accepted by ``from_dict``."""
        result: Dict[str, Any] = dict(self.options)
        result["name"] = self.name
        if self.listener is not None:
            result["listener"] = self.listener.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "") -> "FieldDefinition":
        """Create FieldDefinition from a mapping.

        Raises:
            FieldDefinitionError: If the mapping is malformed
        """
        checked = dict(data)
        listener = checked.get("listener")
        if isinstance(listener, ListenerConfig):
            checked.pop("listener")
        issues = field_definition_validator.validate(checked, prefix=path)
        if issues:
            raise FieldDefinitionError(
                f"Invalid field definition: {issues[0].message}", issues=issues
            )
        return cls(
            name=data["name"],
            listener=_coerce_listener(listener, data["name"]),
            options={k: v for k, v in data.items() if k not in RESERVED_KEYS},
        )


FieldLike = Union[FieldDefinition, Mapping[str, Any]]


def _coerce_listener(listener: Any, name: str) -> Optional[ListenerConfig]:
    if listener is None or isinstance(listener, ListenerConfig):
        return listener
    issues = field_definition_validator.validate({"name": name, "listener": listener})
    if issues:
        raise FieldDefinitionError(
            f"Invalid listener for field '{name}': {issues[0].message}", issues=issues
        )
    return ListenerConfig.from_dict(listener)


def coerce_field(item: FieldLike, path: str = "") -> FieldDefinition:
    """Turn a mapping or FieldDefinition into a FieldDefinition."""
    if isinstance(item, FieldDefinition):
        return item
    if not isinstance(item, Mapping):
        issue = ConfigIssue(
            path=path,
            code=IssueCode.INVALID_TYPE,
            message=f"Field '{path}' has invalid type. Expected object, got {type(item).__name__}",
            received=type(item).__name__,
        )
        raise FieldDefinitionError(issue.message, issues=[issue])
    return FieldDefinition.from_dict(item, path=path)


def coerce_fields(items: Iterable[FieldLike]) -> List[FieldDefinition]:
    """Coerce a sequence of definitions, reporting every issue at once.

    Raises:
        FieldDefinitionError: If any definition is malformed
    """
    fields: List[FieldDefinition] = []
    issues: List[ConfigIssue] = []
    for index, item in enumerate(items):
        try:
            fields.append(coerce_field(item, path=str(index)))
        except FieldDefinitionError as exc:
            issues.extend(exc.issues)
    if issues:
        raise FieldDefinitionError(
            f"Invalid field definitions ({len(issues)} issue(s))", issues=issues
        )
    return fields


def _duplicate_issues(fields: Sequence[FieldDefinition]) -> List[ConfigIssue]:
    seen: Set[str] = set()
    issues: List[ConfigIssue] = []
    for index, fd in enumerate(fields):
        if fd.name in seen:
            issues.append(ConfigIssue(
                path=f"{index}.name",
                code=IssueCode.DUPLICATE_NAME,
                message=f"Field name '{fd.name}' is used more than once",
                received=fd.name,
            ))
        seen.add(fd.name)
    return issues


def to_record(array: Iterable[FieldDefinition]) -> Dict[str, FieldDefinition]:
    """Name-keyed view of an ordered field list."""
    return {fd.name: fd for fd in array}


def to_array(record: Mapping[str, FieldDefinition]) -> List[FieldDefinition]:
    """Ordered list from a name-keyed mapping, in the mapping's order."""
    return list(record.values())


def _clamp(index: int, upper: int) -> int:
    return max(0, min(index, upper))


class FieldTable:
    """Ordered field definitions plus a derived name-keyed mapping.

    The list is only ever replaced through ``_commit``, which rebuilds the
    mapping before returning. The initial configuration is kept as the
    baseline for ``reset``.

    Raises:
        FieldDefinitionError: If the initial definitions are malformed or
            reuse a name
    """

    def __init__(self, initial_fields: Iterable[FieldLike] = ()):
        fields = self._checked(initial_fields)
        self._initial: Tuple[FieldDefinition, ...] = tuple(fields)
        self._fields: List[FieldDefinition] = []
        self._record: Dict[str, FieldDefinition] = {}
        self._commit(list(fields))

    @staticmethod
    def _checked(items: Iterable[FieldLike]) -> List[FieldDefinition]:
        fields = coerce_fields(items)
        issues = _duplicate_issues(fields)
        if issues:
            raise FieldDefinitionError(issues[0].message, issues=issues)
        return fields

    def _commit(self, fields: List[FieldDefinition]) -> None:
        self._fields = fields
        self._record = to_record(fields)

    @property
    def fields(self) -> Tuple[FieldDefinition, ...]:
        return tuple(self._fields)

    @property
    def record(self) -> Dict[str, FieldDefinition]:
        return dict(self._record)

    @property
    def initial(self) -> Tuple[FieldDefinition, ...]:
        return self._initial

    def get(self, name: str) -> Optional[FieldDefinition]:
        return self._record.get(name)

    def index_of(self, name: str) -> int:
        """Position of ``name`` in the ordered list, or -1."""
        for index, fd in enumerate(self._fields):
            if fd.name == name:
                return index
        return -1

    def __contains__(self, name: object) -> bool:
        return name in self._record

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self):
        return iter(tuple(self._fields))

    def add(self, new_fields: Union[FieldLike, Iterable[FieldLike]], index: int) -> List[FieldDefinition]:
        """Splice ``new_fields`` in at ``index`` and return what was inserted.

        ``index`` is clamped to ``[0, len]``. Names already present (or
        repeated within ``new_fields``) are skipped.
        """
        if isinstance(new_fields, (FieldDefinition, Mapping)):
            new_fields = [new_fields]
        incoming = coerce_fields(new_fields)

        accepted: List[FieldDefinition] = []
        taken = set(self._record)
        for fd in incoming:
            if fd.name in taken:
                logger.warning("Skipping field '%s': name already in the field table", fd.name)
                continue
            taken.add(fd.name)
            accepted.append(fd)

        position = _clamp(index, len(self._fields))
        self._commit(self._fields[:position] + accepted + self._fields[position:])
        return accepted

    def remove(self, names: Union[str, Iterable[str]]) -> List[str]:
        """Drop every field whose name is in ``names``; unknown names are ignored."""
        targets = {names} if isinstance(names, str) else set(names)
        removed = [fd.name for fd in self._fields if fd.name in targets]
        if removed:
            self._commit([fd for fd in self._fields if fd.name not in targets])
        return removed

    def move(self, from_index: int, to_index: int) -> bool:
        """Move the field at ``from_index`` to ``to_index``.

        Both indices must be valid positions; otherwise nothing happens and
        False is returned.
        """
        size = len(self._fields)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return False
        fields = list(self._fields)
        fields.insert(to_index, fields.pop(from_index))
        self._commit(fields)
        return True

    def change(self, partial: Mapping[str, Any], name: str) -> Optional[FieldDefinition]:
        """Merge ``partial`` into the named field and return the new definition."""
        index = self.index_of(name)
        if index < 0:
            return None
        updated = self._fields[index].merged(partial)
        fields = list(self._fields)
        fields[index] = updated
        self._commit(fields)
        return updated

    def reset(self) -> None:
        """Restore the configuration captured at construction."""
        self._commit(list(self._initial))

    def replace(self, fields: Iterable[FieldLike]) -> None:
        """Replace the whole list; the reset baseline is unchanged."""
        self._commit(self._checked(fields))


__all__ = [
    "FieldDefinition",
    "FieldLike",
    "coerce_field",
    "coerce_fields",
    "to_record",
    "to_array",
    "FieldTable",
]
