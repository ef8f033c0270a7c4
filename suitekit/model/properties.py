"""Typed property bags attached to tree nodes."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

# Well-known property keys
CATEGORY = "Category"
DESCRIPTION = "Description"
PARALLEL_SCOPE = "ParallelScope"


class PropertyBag:
    """Mapping of property key to an ordered set of string values.

    Keys keep insertion order. Values under a key never repeat.
    """

    def __init__(self, items: Mapping[str, Iterable[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {}
        if items:
            for key, values in items.items():
                self._data.setdefault(key, [])
                for value in values:
                    self.add(key, value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> PropertyBag:
        """Build a bag from loosely typed manifest data.

        Scalars become one-element lists and every value is converted to
        a string. ``None`` values declare the key with no values.
        """
        bag = cls()
        if not data:
            return bag
        if not isinstance(data, Mapping):
            raise ValueError(f"Properties must be a mapping, got: {data!r}")
        for key, raw in data.items():
            key = str(key)
            bag._data.setdefault(key, [])
            if raw is None:
                continue
            values = raw if isinstance(raw, (list, tuple)) else [raw]
            for value in values:
                bag.add(key, str(value))
        return bag

    def add(self, key: str, value: str) -> None:
        values = self._data.setdefault(key, [])
        if value not in values:
            values.append(value)

    def get(self, key: str) -> list[str]:
        """Return a copy of the values for a key (empty if absent)."""
        return list(self._data.get(key, []))

    def keys(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._data.items()}

    def merge(self, other: PropertyBag) -> PropertyBag:
        """Return a new bag with this bag's values followed by other's.

        Per key, values from ``other`` that are already present are dropped.
        This bag's keys come first, then keys only ``other`` has.
        """
        merged = PropertyBag()
        merged._data = self.to_dict()
        for key, values in other._data.items():
            merged._data.setdefault(key, [])
            for value in values:
                merged.add(key, value)
        return merged

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> list[str]:
        return list(self._data[key])

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyBag):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"PropertyBag({self._data!r})"


def merge_along_path(bags: Iterable[PropertyBag]) -> PropertyBag:
    """Merge bags root-first, as inheritance flows down a tree path."""
    merged = PropertyBag()
    for bag in bags:
        merged = merged.merge(bag)
    return merged
