# sts/core/information.py
"""
Hierarchical metadata container.

An ``InformationSet`` is an ordered key/value store whose values may themselves
be ``InformationSet`` instances (sub-containers). Items are addressed by name
inside one container, or by a dotted path across containers
(``"model.level"``). Two lookups are provided:

- ``search(path, expected_type)``: exact path resolution;
- ``deep_search(name, expected_type)``: depth-first search of a plain name in
  the container and then in its sub-containers, in insertion order.

Both return ``None`` when nothing of the requested type is found, so callers
decide how a miss is reported.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from sts.core.exceptions import raise_parameter_error

logger = logging.getLogger("sts.core.information")

T = TypeVar('T')

# Separator of the components of a path
SEPARATOR = "."


def split_path(path: str) -> List[str]:
    """Split a dotted path into its components."""
    return path.split(SEPARATOR)


def join_path(*names: str) -> str:
    """Join names into a dotted path, skipping empty prefixes."""
    return SEPARATOR.join(n for n in names if n)


class InformationSet:
    """Ordered, hierarchical key/value store.

    Example:
        >>> info = InformationSet()
        >>> info.subset("model").add("level", 1.0)
        >>> info.search("model.level", float)
        1.0
        >>> info.deep_search("level", float)
        1.0
    """

    def __init__(self) -> None:
        self._items: Dict[str, Any] = {}

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not name or SEPARATOR in name:
            raise_parameter_error(
                f"Invalid item name: {name!r}",
                param_name="name",
                param_value=name,
                constraint=f"non-empty string without '{SEPARATOR}'"
            )

    def add(self, name: str, value: Any) -> None:
        """Store a value under a name, replacing any previous value.

        Raises:
            ParameterError: If the name is empty or contains the separator
        """
        self._check_name(name)
        self._items[name] = value

    def subset(self, name: str) -> "InformationSet":
        """Sub-container stored under a name, created when missing.

        Raises:
            ParameterError: If the name is invalid or holds a plain value
        """
        self._check_name(name)
        existing = self._items.get(name)
        if isinstance(existing, InformationSet):
            return existing
        if existing is not None:
            raise_parameter_error(
                f"Item {name!r} is not a sub-container",
                param_name="name",
                param_value=name,
                constraint="name of a sub-container"
            )
        created = InformationSet()
        self._items[name] = created
        return created

    def get(self, name: str, expected_type: Type[T] = object) -> Optional[T]:
        """Item of this container with the given name and type, or None."""
        value = self._items.get(name)
        if value is None or not isinstance(value, expected_type):
            return None
        return value

    def remove(self, name: str) -> bool:
        """Remove an item; returns whether it existed."""
        return self._items.pop(name, None) is not None

    def search(self, path: str, expected_type: Type[T] = object) -> Optional[T]:
        """Resolve a dotted path exactly.

        Returns:
            The item at path if it exists and is an instance of expected_type,
            None otherwise
        """
        names = split_path(path)
        current: InformationSet = self
        for name in names[:-1]:
            child = current._items.get(name)
            if not isinstance(child, InformationSet):
                return None
            current = child
        return current.get(names[-1], expected_type)

    def deep_search(self, name: str, expected_type: Type[T] = object) -> Optional[T]:
        """Depth-first search of a plain name.

        Items of this container are inspected before the sub-containers, which
        are visited in insertion order.
        """
        found = self.get(name, expected_type)
        if found is not None:
            return found
        for value in self._items.values():
            if isinstance(value, InformationSet):
                found = value.deep_search(name, expected_type)
                if found is not None:
                    return found
        return None

    def get_dictionary(self, expected_type: Type[Any] = object, prefix: str = "") -> List[str]:
        """Full paths of every item of the given type (sub-containers excluded)."""
        paths: List[str] = []
        for name, value in self._items.items():
            path = join_path(prefix, name)
            if isinstance(value, InformationSet):
                paths.extend(value.get_dictionary(expected_type, path))
            elif isinstance(value, expected_type):
                paths.append(path)
        return paths

    def walk(self, prefix: str = "") -> Iterator[Tuple[str, Any]]:
        """Iterate over (path, value) for every leaf item."""
        for name, value in self._items.items():
            path = join_path(prefix, name)
            if isinstance(value, InformationSet):
                yield from value.walk(path)
            else:
                yield path, value

    def names(self) -> List[str]:
        return list(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, name: str) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"InformationSet({', '.join(self._items)})"
