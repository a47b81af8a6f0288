# sts/core/mapper.py
"""
Named quantity registry.

An ``InformationMapper`` associates names with extraction functions
(``Mapper``) that compute a value from a source object. It is shared by every
result of one class, so it is protected by a re-entrant lock: readers take the
lock for the whole duration of a lookup, and registrations take it as well, so
a name can be added at any time without disturbing concurrent readers.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from sts.core.exceptions import NameNotFoundError, TypeMismatchError

logger = logging.getLogger("sts.core.mapper")

S = TypeVar('S')  # Source type
T = TypeVar('T')  # Value type


@dataclass(frozen=True)
class Mapper(Generic[S, T]):
    """Extraction function with its declared value type.

    Attributes:
        value_type: Type of the values produced by the extraction
        retrieve: Function computing the value from a source object
    """
    value_type: Type[T]
    retrieve: Callable[[S], T]

    def __call__(self, source: S) -> T:
        return self.retrieve(source)


class InformationMapper(Generic[S]):
    """Thread-safe table ``name -> Mapper``.

    Attributes:
        lock: Re-entrant lock serializing lookups and registrations
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._mappers: Dict[str, Mapper[S, Any]] = {}

    def add(self, name: str, mapper: Mapper[S, Any]) -> None:
        """Register (or replace) the extraction of a name.

        A plain callable is accepted and registered with value type ``object``.
        """
        if not isinstance(mapper, Mapper):
            if not callable(mapper):
                raise TypeError(f"mapper must be a Mapper or a callable, got {type(mapper).__name__}")
            mapper = Mapper(object, mapper)
        with self.lock:
            replaced = name in self._mappers
            self._mappers[name] = mapper
        logger.debug(f"{'Replaced' if replaced else 'Registered'} mapping '{name}'")

    def remove(self, name: str) -> bool:
        """Unregister a name. Returns False when nothing was registered under it."""
        with self.lock:
            removed = self._mappers.pop(name, None) is not None
        if removed:
            logger.debug(f"Removed mapping '{name}'")
        return removed

    def contains(self, name: str) -> bool:
        with self.lock:
            return name in self._mappers

    def get_mapper(self, name: str) -> Optional[Mapper[S, Any]]:
        with self.lock:
            return self._mappers.get(name)

    def get_data(self, source: S, name: str, expected_type: Type[T] = object) -> T:
        """Run the extraction registered under name.

        Raises:
            NameNotFoundError: If no extraction is registered under name
            TypeMismatchError: If the value is not an instance of expected_type
        """
        with self.lock:
            mapper = self._mappers.get(name)
            if mapper is None:
                raise NameNotFoundError(
                    f"No mapping registered for '{name}'",
                    name=name,
                    searched=["registry"]
                )
            value = mapper(source)
        if not isinstance(value, expected_type):
            raise TypeMismatchError(
                f"Value of '{name}' is not of the requested type",
                name=name,
                expected_type=expected_type,
                actual_type=type(value)
            )
        return value

    def fill_dictionary(self, prefix: Optional[str], dictionary: Dict[str, type]) -> None:
        """Add every registered name (optionally prefixed) with its value type."""
        with self.lock:
            for name, mapper in self._mappers.items():
                key = f"{prefix}.{name}" if prefix else name
                dictionary[key] = mapper.value_type

    def names(self) -> List[str]:
        with self.lock:
            return list(self._mappers)

    def __len__(self) -> int:
        with self.lock:
            return len(self._mappers)
