# sts/core/types.py

"""
Core type annotations and custom types for the STS Toolbox.

This module defines the type system for the STS Toolbox: the enumerations
shared by the decomposition machinery, and protocol classes describing the
collaborators of a decomposition result (the structural model handle and the
smoothing engine).
"""

from enum import Enum, auto
from typing import Any, List, Literal, Protocol, Tuple, runtime_checkable

import numpy as np

# Logging levels accepted by the configuration
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class StructuralComponent(Enum):
    """Structural blocks of a basic structural model, in state-vector order."""
    NOISE = "noise"
    CYCLE = "cycle"
    LEVEL = "level"
    SLOPE = "slope"
    SEASONAL = "seasonal"


# Order in which present components consume state positions
COMPONENT_ORDER: Tuple[StructuralComponent, ...] = (
    StructuralComponent.NOISE,
    StructuralComponent.CYCLE,
    StructuralComponent.LEVEL,
    StructuralComponent.SLOPE,
    StructuralComponent.SEASONAL,
)


class DecompositionMode(Enum):
    """How the components of a decomposition combine into the series."""
    ADDITIVE = auto()
    MULTIPLICATIVE = auto()

    def is_multiplicative(self) -> bool:
        return self is DecompositionMode.MULTIPLICATIVE


class ComponentType(Enum):
    """Kinds of series appearing in a decomposition."""
    SERIES = auto()
    TREND = auto()
    SEASONAL = auto()
    SEASONALLY_ADJUSTED = auto()
    IRREGULAR = auto()
    UNDEFINED = auto()


class ComponentInformation(Enum):
    """Which part of a component series is meant."""
    VALUE = auto()
    STDEV = auto()
    FORECAST = auto()
    FORECAST_STDEV = auto()


# Protocol classes for structural typing


@runtime_checkable
class HasComponentPositions(Protocol):
    """Protocol for structural model handles consumed by a decomposition."""

    @property
    def frequency(self) -> int:
        ...

    def has(self, component: StructuralComponent) -> bool:
        """Whether the component is present in the model."""
        ...

    def cmp_positions(self) -> List[int]:
        """State positions of the present components, in extraction order."""
        ...

    def compute_reduced_model(self) -> Any:
        """Reduced-form (UCARIMA) representation of the model."""
        ...


@runtime_checkable
class HasComponent(Protocol):
    """Protocol for smoothing results."""

    def component(self, position: int) -> np.ndarray:
        """Smoothed estimates of one state position at every time point."""
        ...


@runtime_checkable
class HasSmooth(Protocol):
    """Protocol for smoothing engines."""

    def smooth(self, data: Any, model: Any) -> HasComponent:
        """Run the smoother over data under model."""
        ...
