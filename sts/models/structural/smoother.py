# sts/models/structural/smoother.py
"""
Kalman smoothing of basic structural models.

``Smoother`` runs the Kalman filter over a series (missing values included, so
a series extended with a forecast horizon yields forecasts of the states) and
then the fixed-interval smoother. The heavy recursions live in
``_numba_core``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from sts.core.config import get_config
from sts.core.exceptions import raise_parameter_error
from sts.models.structural._numba_core import kalman_filter, state_smoother
from sts.models.structural.bsm import BasicStructuralModel
from sts.timeseries.data import TsData
from sts.timeseries.period import TsDomain

logger = logging.getLogger("sts.models.structural.smoother")


@dataclass
class FilteringResults:
    """Output of the Kalman filter.

    Attributes:
        domain: Domain of the filtered series
        predicted_states: One-step-ahead predictions of the states (n, m)
        predicted_covariances: Covariances of the predictions (n, m, m)
        innovations: Prediction errors (0 where the update was skipped)
        innovation_variances: Variances of the prediction errors
        gains: Kalman gains (n, m)
        used: Observations that entered an update
    """
    domain: TsDomain
    predicted_states: np.ndarray
    predicted_covariances: np.ndarray
    innovations: np.ndarray
    innovation_variances: np.ndarray
    gains: np.ndarray
    used: np.ndarray

    @property
    def nobs(self) -> int:
        return int(self.used.sum())


@dataclass
class SmoothingResults:
    """Smoothed states of a model over a domain.

    Attributes:
        domain: Domain of the smoothed series
        states: Smoothed states (n, m)
        variances: Variances of the smoothed states (n, m)
        filtering: Filter output the smoother was computed from
    """
    domain: TsDomain
    states: np.ndarray
    variances: np.ndarray
    filtering: FilteringResults

    def _check_position(self, position: int) -> None:
        if not 0 <= position < self.states.shape[1]:
            raise_parameter_error(
                f"State position out of range: {position}",
                param_name="position",
                param_value=position,
                constraint=f"0 <= position < {self.states.shape[1]}"
            )

    def component(self, position: int) -> np.ndarray:
        """Smoothed estimates of one state position at every time point."""
        self._check_position(position)
        return self.states[:, position].copy()

    def component_variance(self, position: int) -> np.ndarray:
        """Variances of the smoothed estimates of one state position."""
        self._check_position(position)
        return self.variances[:, position].copy()

    def component_stdev(self, position: int) -> np.ndarray:
        return np.sqrt(np.maximum(self.component_variance(position), 0.0))


class Smoother:
    """Kalman filter and fixed-interval smoother for structural models.

    Args:
        tolerance: Innovation variances below this threshold skip the update
            (defaults to ``numerical.variance_tolerance``)
    """

    def __init__(self, tolerance: Optional[float] = None) -> None:
        self._tolerance = tolerance

    @property
    def tolerance(self) -> float:
        if self._tolerance is not None:
            return self._tolerance
        return float(get_config("numerical", "variance_tolerance", 1e-12))

    def filter(self, data: TsData, model: BasicStructuralModel) -> FilteringResults:
        """Run the Kalman filter.

        Args:
            data: Series to filter (NaN values are treated as missing)
            model: Structural model

        Returns:
            FilteringResults: Predictions, innovations and gains
        """
        if not isinstance(data, TsData):
            raise TypeError(f"data must be a TsData, got {type(data).__name__}")
        a0, p0 = model.initial_state()
        a_pred, p_pred, v, f, k, used = kalman_filter(
            np.ascontiguousarray(data.values, dtype=np.float64),
            model.design(),
            model.transition(),
            model.state_cov(),
            a0,
            p0,
            self.tolerance
        )
        return FilteringResults(data.domain, a_pred, p_pred, v, f, k, used)

    def smooth(self, data: TsData, model: BasicStructuralModel) -> SmoothingResults:
        """Smoothed states of the model over the domain of data."""
        filtering = self.filter(data, model)
        states, variances = state_smoother(
            model.design(),
            model.transition(),
            filtering.predicted_states,
            filtering.predicted_covariances,
            filtering.innovations,
            filtering.innovation_variances,
            filtering.gains,
            filtering.used
        )
        logger.debug(
            f"Smoothed {model} over {data.domain} "
            f"({filtering.nobs} observations, {data.length - filtering.nobs} missing)"
        )
        return SmoothingResults(data.domain, states, variances, filtering)
