'''
Abstract base classes for the STS Toolbox.

This module defines the contract shared by processing results: retrieval of
named quantities, a dictionary of the available names, access to the metadata
container and to processing messages. Seasonal adjustment results add the
series decomposition on top of that contract.
'''

import abc
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Type, TypeVar

from sts.core.information import InformationSet

T = TypeVar('T')


class ProcessingLevel(Enum):
    """Severity of a processing message."""
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True)
class ProcessingInformation:
    """Message emitted while a result was computed.

    Attributes:
        source: Component that emitted the message
        name: Short identifier of the message
        message: Human readable description
        level: Severity of the message
    """
    source: str
    name: str
    message: str
    level: ProcessingLevel = ProcessingLevel.INFO


class ProcessingResults(abc.ABC):
    """Results exposing named quantities.

    Concrete results resolve names through a registry of extraction functions
    and, as a fallback, through their metadata container.
    """

    @abc.abstractmethod
    def contains(self, name: str) -> bool:
        """Whether a quantity can be resolved under name."""
        pass

    @abc.abstractmethod
    def get_data(self, name: str, expected_type: Type[T] = object) -> T:
        """Resolve a quantity by name.

        Raises:
            NameNotFoundError: If nothing resolves under name
            TypeMismatchError: If the value is not an instance of expected_type
        """
        pass

    @abc.abstractmethod
    def get_dictionary(self) -> Dict[str, type]:
        """Resolvable names with the type of their values."""
        pass

    @abc.abstractmethod
    def get_information(self) -> InformationSet:
        """Metadata container of the result."""
        pass

    def get_processing_information(self) -> List[ProcessingInformation]:
        """Messages emitted during processing (none by default)."""
        return []

    def __contains__(self, name: str) -> bool:
        return self.contains(name)


class SaResults(ProcessingResults):
    """Seasonal adjustment results."""

    @abc.abstractmethod
    def get_series_decomposition(self) -> Any:
        """Decomposition of the series in the space of the original data."""
        pass
