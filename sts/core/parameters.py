# sts/core/parameters.py

"""
Parameter containers and validation infrastructure for the STS Toolbox.

This module provides the base class of the dataclass parameter containers, the
validators that enforce their constraints, and the transformations between the
constrained parameter space and the unconstrained space in which likelihood
functions are evaluated.
"""

from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Optional, Type, TypeVar

import numpy as np

from sts.core.validation import validate_parameter_bounds

P = TypeVar('P', bound='ParameterBase')  # Generic type for parameter subclasses


class ParameterBase:
    """Base class for all parameter containers.

    This class provides common functionality for parameter validation,
    transformation, and serialization that is shared across all parameter types.
    """

    def validate(self) -> None:
        """Validate parameter constraints.

        Raises:
            ParameterError: If parameter constraints are violated
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to a dictionary."""
        if is_dataclass(self):
            return asdict(self)
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    def to_array(self) -> np.ndarray:
        """Convert parameters to a NumPy array.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("to_array must be implemented by subclass")

    @classmethod
    def from_array(cls: Type[P], array: np.ndarray, **kwargs: Any) -> P:
        """Create parameters from a NumPy array.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("from_array must be implemented by subclass")

    def transform(self) -> np.ndarray:
        """Transform parameters to unconstrained space.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("transform must be implemented by subclass")

    @classmethod
    def inverse_transform(cls: Type[P], array: np.ndarray, **kwargs: Any) -> P:
        """Transform parameters from unconstrained space back to constrained space.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError("inverse_transform must be implemented by subclass")

    def copy(self: P) -> P:
        """Create a copy of the parameter object."""
        if is_dataclass(self):
            return type(self)(**self.to_dict())
        new_instance = type(self)()
        for k, v in self.__dict__.items():
            if not k.startswith('_'):
                setattr(new_instance, k, v)
        return new_instance


# Parameter validators

def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a parameter is non-negative.

    Raises:
        ParameterError: If the parameter is negative or not finite
    """
    return validate_parameter_bounds(value, param_name, lower_bound=0.0)


def validate_range(value: float, param_name: str,
                   min_value: Optional[float] = None,
                   max_value: Optional[float] = None,
                   inclusive: bool = True) -> float:
    """Validate that a parameter is within a range.

    Args:
        value: Parameter value to validate
        param_name: Name of the parameter for error messages
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        inclusive: Whether the bounds belong to the range

    Raises:
        ParameterError: If the parameter is outside the range
    """
    return validate_parameter_bounds(
        value, param_name, lower_bound=min_value, upper_bound=max_value,
        lower_inclusive=inclusive, upper_inclusive=inclusive
    )


# Parameter transformation functions

def transform_variance(value: float) -> float:
    """Map a non-negative variance to the real line (standard deviation)."""
    return float(np.sqrt(value))


def inverse_transform_variance(value: float) -> float:
    """Map a real number to a non-negative variance (square)."""
    return float(value * value)


def transform_probability(value: float) -> float:
    """Transform a parameter in (0, 1) to unconstrained space using logit."""
    eps = np.finfo(float).eps
    value = np.clip(value, eps, 1 - eps)
    return float(np.log(value / (1 - value)))


def inverse_transform_probability(value: float) -> float:
    """Transform a parameter from unconstrained space to (0, 1) using the sigmoid."""
    return float(1.0 / (1.0 + np.exp(-value)))


def transform_lower_bounded(value: float, lower: float) -> float:
    """Transform a parameter in (lower, inf) to unconstrained space using log."""
    return float(np.log(value - lower))


def inverse_transform_lower_bounded(value: float, lower: float) -> float:
    """Transform a parameter from unconstrained space to (lower, inf)."""
    return float(lower + np.exp(value))
