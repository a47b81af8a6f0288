# sts/models/structural/specification.py
"""
Specification and parameters of basic structural models.

A basic structural model (BSM) decomposes a series into an irregular (noise)
term, a stochastic cycle, a local level with an optional slope, and a dummy
seasonal. ``ModelSpecification`` declares which of these components are
present; ``BsmParameters`` holds the disturbance variances and the cycle
parameters.
"""

import logging
from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from sts.core.exceptions import ModelSpecificationError, raise_parameter_error
from sts.core.parameters import (
    ParameterBase, inverse_transform_lower_bounded, inverse_transform_probability,
    inverse_transform_variance, transform_lower_bounded, transform_probability,
    transform_variance, validate_non_negative, validate_range
)
from sts.core.types import COMPONENT_ORDER, StructuralComponent

logger = logging.getLogger("sts.models.structural.specification")


@dataclass(frozen=True)
class ModelSpecification:
    """Components present in a basic structural model.

    Attributes:
        noise: Irregular component
        cycle: Stochastic damped cycle
        level: Local level
        slope: Stochastic slope of the level (requires the level)
        seasonal: Dummy seasonal component
    """
    noise: bool = True
    cycle: bool = False
    level: bool = True
    slope: bool = True
    seasonal: bool = True

    def __post_init__(self) -> None:
        if self.slope and not self.level:
            raise ModelSpecificationError(
                "A slope requires a level component",
                model_type="BSM",
                parameter="slope",
                valid_options=["level=True", "slope=False"]
            )

    def has(self, component: StructuralComponent) -> bool:
        return bool(getattr(self, component.value))

    @property
    def components(self) -> Tuple[StructuralComponent, ...]:
        """Present components, in state-vector order."""
        return tuple(c for c in COMPONENT_ORDER if self.has(c))

    @property
    def component_count(self) -> int:
        return len(self.components)

    def __str__(self) -> str:
        return "BSM(" + ", ".join(c.value for c in self.components) + ")"


@dataclass
class BsmParameters(ParameterBase):
    """Hyper-parameters of a basic structural model.

    Variances of absent components are ignored by the model.

    Attributes:
        noise_var: Variance of the irregular
        level_var: Variance of the level disturbance
        slope_var: Variance of the slope disturbance
        seasonal_var: Variance of the seasonal disturbance
        cycle_var: Variance of the cycle disturbances
        cycle_damping: Damping factor of the cycle, in (0, 1)
        cycle_period: Period of the cycle in number of observations, > 2
    """
    noise_var: float = 1.0
    level_var: float = 0.1
    slope_var: float = 0.01
    seasonal_var: float = 0.1
    cycle_var: float = 0.1
    cycle_damping: float = 0.8
    cycle_period: float = 24.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate BSM parameter constraints.

        Raises:
            ParameterError: If parameter constraints are violated
        """
        super().validate()
        for name in ("noise_var", "level_var", "slope_var", "seasonal_var", "cycle_var"):
            validate_non_negative(getattr(self, name), name)
        validate_range(self.cycle_damping, "cycle_damping", 0.0, 1.0, inclusive=False)
        validate_range(self.cycle_period, "cycle_period", min_value=2.0, inclusive=False)

    @property
    def cycle_frequency(self) -> float:
        """Angular frequency of the cycle."""
        return 2.0 * np.pi / self.cycle_period

    def variance(self, component: StructuralComponent) -> float:
        return float(getattr(self, f"{component.value}_var"))

    def to_array(self) -> np.ndarray:
        return np.array([
            self.noise_var, self.level_var, self.slope_var, self.seasonal_var,
            self.cycle_var, self.cycle_damping, self.cycle_period
        ])

    @classmethod
    def from_array(cls, array: np.ndarray, **kwargs: Any) -> "BsmParameters":
        array = np.asarray(array, dtype=np.float64)
        if array.shape != (7,):
            raise_parameter_error(
                f"BSM parameter array must have 7 elements, got shape {array.shape}",
                param_name="array",
                param_value=array.shape,
                constraint="shape (7,)"
            )
        return cls(*[float(v) for v in array])

    def transform(self) -> np.ndarray:
        """Parameters in unconstrained space (standard deviations, logit, log)."""
        return np.array([
            transform_variance(self.noise_var),
            transform_variance(self.level_var),
            transform_variance(self.slope_var),
            transform_variance(self.seasonal_var),
            transform_variance(self.cycle_var),
            transform_probability(self.cycle_damping),
            transform_lower_bounded(self.cycle_period, 2.0),
        ])

    @classmethod
    def inverse_transform(cls, array: np.ndarray, **kwargs: Any) -> "BsmParameters":
        array = np.asarray(array, dtype=np.float64)
        if array.shape != (7,):
            raise ValueError(f"Array length must be 7, got {array.shape}")
        return cls(
            noise_var=inverse_transform_variance(array[0]),
            level_var=inverse_transform_variance(array[1]),
            slope_var=inverse_transform_variance(array[2]),
            seasonal_var=inverse_transform_variance(array[3]),
            cycle_var=inverse_transform_variance(array[4]),
            cycle_damping=inverse_transform_probability(array[5]),
            cycle_period=inverse_transform_lower_bounded(array[6], 2.0),
        )

    def scaled(self, factor: float) -> "BsmParameters":
        """Same parameters with every variance multiplied by factor."""
        return BsmParameters(
            noise_var=self.noise_var * factor,
            level_var=self.level_var * factor,
            slope_var=self.slope_var * factor,
            seasonal_var=self.seasonal_var * factor,
            cycle_var=self.cycle_var * factor,
            cycle_damping=self.cycle_damping,
            cycle_period=self.cycle_period,
        )
