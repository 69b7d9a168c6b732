"""Name-keyed value and error stores.

The engine owns two independent Store instances, one for values and one for
errors. Updates shallow-merge into the current mapping; nothing ties a store
to field table membership, so entries for removed fields stay until they are
deleted or reset.
"""

from typing import Any, Dict, Iterator, Mapping, Optional


class Store:
    """A name-keyed mapping with shallow-merge update semantics.

    Attributes:
        delete_removes_key: When True, ``delete`` removes the key; otherwise
            the key is kept with a None value

    Examples:
        >>> store = Store({"a": 1})
        >>> store.merge({"b": 2})
        >>> store.snapshot()
        {'a': 1, 'b': 2}
        >>> store.delete("a")
        >>> store.snapshot()
        {'b': 2}
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None, delete_removes_key: bool = True):
        self._data: Dict[str, Any] = dict(initial or {})
        self.delete_removes_key = delete_removes_key

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has_value(self, key: str) -> bool:
        """True when ``key`` holds a non-None entry.

        A key present with None and a missing key read the same.
        """
        return self._data.get(key) is not None

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def merge(self, partial: Mapping[str, Any]) -> None:
        """Shallow-merge ``partial`` into the store."""
        self._data.update(partial)

    def delete(self, key: str) -> None:
        """Clear ``key`` without touching other entries."""
        if self.delete_removes_key:
            self._data.pop(key, None)
        else:
            self._data[key] = None

    def replace(self, data: Mapping[str, Any]) -> None:
        self._data = dict(data)

    def reset(self) -> None:
        self._data = {}

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Store({self._data!r})"


__all__ = [
    "Store",
]
