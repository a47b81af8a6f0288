# sts/models/structural/monitor.py
"""
Estimation monitor of basic structural models.

``BsmMonitor`` holds a structural model together with the series it was fitted
to. The hyper-parameters are either estimated by maximum likelihood through
``statsmodels.tsa.UnobservedComponents`` (``process``) or supplied directly
(``from_model``). The monitor then exposes the concentrated likelihood of the
retained model and the likelihood function of the hyper-parameters.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import statsmodels.api as sm

from sts.core.config import get_config
from sts.core.exceptions import EstimationError, warn_model
from sts.core.types import StructuralComponent
from sts.models.structural.bsm import BasicStructuralModel
from sts.models.structural.likelihood import Likelihood, compute_likelihood
from sts.models.structural.smoother import Smoother
from sts.models.structural.specification import BsmParameters, ModelSpecification
from sts.timeseries.data import TsData

logger = logging.getLogger("sts.models.structural.monitor")

# Bounds applied to the cycle parameters returned by statsmodels
_DAMPING_EPS = 1e-6
_MIN_CYCLE_PERIOD = 2.0 + 1e-6


def _estimated_count(spec: ModelSpecification) -> int:
    count = sum(1 for c in spec.components if c is not StructuralComponent.CYCLE)
    if spec.cycle:
        count += 3
    return count


def _parameters_from_statsmodels(spec: ModelSpecification, values: Dict[str, float]) -> BsmParameters:
    """Map the parameters of a fitted UnobservedComponents model."""
    defaults = BsmParameters()
    kwargs: Dict[str, Any] = {
        "noise_var": values.get("sigma2.irregular", 0.0) if spec.noise else 0.0,
        "level_var": values.get("sigma2.level", 0.0) if spec.level else 0.0,
        "slope_var": values.get("sigma2.trend", 0.0) if spec.slope else 0.0,
        "seasonal_var": values.get("sigma2.seasonal", 0.0) if spec.seasonal else 0.0,
        "cycle_var": values.get("sigma2.cycle", 0.0) if spec.cycle else 0.0,
        "cycle_damping": defaults.cycle_damping,
        "cycle_period": defaults.cycle_period,
    }
    if spec.cycle:
        frequency = values.get("frequency.cycle")
        if frequency is not None and frequency > 0:
            kwargs["cycle_period"] = max(2.0 * np.pi / frequency, _MIN_CYCLE_PERIOD)
        damping = values.get("damping.cycle")
        if damping is not None:
            kwargs["cycle_damping"] = float(np.clip(damping, _DAMPING_EPS, 1.0 - _DAMPING_EPS))
    for name in ("noise_var", "level_var", "slope_var", "seasonal_var", "cycle_var"):
        kwargs[name] = max(float(kwargs[name]), 0.0)
    return BsmParameters(**kwargs)


@dataclass
class LikelihoodFunctionPoint:
    """Likelihood function evaluated at one parameter vector.

    Attributes:
        parameters: Unconstrained parameter vector
        value: Log-likelihood
        likelihood: Full likelihood object
    """
    parameters: np.ndarray
    value: float
    likelihood: Likelihood


class LikelihoodFunction:
    """Concentrated log-likelihood as a function of the hyper-parameters.

    The argument is the unconstrained vector of ``BsmParameters.transform``;
    entries of absent components are ignored.

    Args:
        y: Observed series
        model: Model giving the specification and the frequency
        smoother: Filtering engine
    """

    def __init__(self, y: TsData, model: BasicStructuralModel, smoother: Optional[Smoother] = None) -> None:
        self._y = y
        self._model = model
        self._smoother = smoother or Smoother()
        self._nparams = _estimated_count(model.spec)

    @property
    def dim(self) -> int:
        return 7

    def evaluate(self, x: np.ndarray) -> LikelihoodFunctionPoint:
        x = np.asarray(x, dtype=np.float64)
        params = BsmParameters.inverse_transform(x)
        likelihood = compute_likelihood(
            self._y, self._model.with_params(params), self._nparams, self._smoother
        )
        return LikelihoodFunctionPoint(x.copy(), likelihood.loglikelihood, likelihood)

    def __call__(self, x: np.ndarray) -> float:
        return self.evaluate(x).value


class BsmMonitor:
    """Holder of a fitted basic structural model.

    Args:
        smoother: Filtering engine used for the likelihood (a default
            ``Smoother`` when omitted)

    Example:
        >>> monitor = BsmMonitor()
        >>> monitor.process(y, ModelSpecification(cycle=False))
        >>> model = monitor.get_result()
    """

    def __init__(self, smoother: Optional[Smoother] = None) -> None:
        self._smoother = smoother or Smoother()
        self._model: Optional[BasicStructuralModel] = None
        self._y: Optional[TsData] = None
        self._nparams = 0
        self._likelihood: Optional[Likelihood] = None
        self._fit_result: Any = None

    @classmethod
    def from_model(cls, model: BasicStructuralModel, y: TsData,
                   smoother: Optional[Smoother] = None) -> "BsmMonitor":
        """Monitor of a model whose hyper-parameters are known."""
        if not isinstance(model, BasicStructuralModel):
            raise TypeError(f"model must be a BasicStructuralModel, got {type(model).__name__}")
        if not isinstance(y, TsData):
            raise TypeError(f"y must be a TsData, got {type(y).__name__}")
        monitor = cls(smoother)
        monitor._model = model
        monitor._y = y
        return monitor

    def process(self, y: TsData, spec: ModelSpecification) -> "BsmMonitor":
        """Estimate the hyper-parameters of a model by maximum likelihood.

        Args:
            y: Observed series (log-transformed beforehand for multiplicative
                decompositions)
            spec: Components of the model

        Returns:
            BsmMonitor: self

        Raises:
            EstimationError: If statsmodels fails to fit the model
        """
        if not isinstance(y, TsData):
            raise TypeError(f"y must be a TsData, got {type(y).__name__}")
        frequency = y.frequency
        # Validates the specification against the frequency
        BasicStructuralModel(spec, BsmParameters(), frequency)

        method = get_config("numerical", "optimization_method", "lbfgs")
        maxiter = get_config("numerical", "max_iterations", 500)
        logger.info(f"Estimating {spec} on {y.domain} with method '{method}'")
        try:
            mod = sm.tsa.UnobservedComponents(
                y.to_numpy(),
                irregular=spec.noise,
                level=spec.level,
                stochastic_level=spec.level,
                trend=spec.slope,
                stochastic_trend=spec.slope,
                seasonal=frequency if spec.seasonal else None,
                stochastic_seasonal=spec.seasonal,
                cycle=spec.cycle,
                stochastic_cycle=spec.cycle,
                damped_cycle=spec.cycle,
            )
            res = mod.fit(method=method, maxiter=maxiter, disp=False)
        except Exception as e:
            raise EstimationError(
                f"Structural model estimation failed: {str(e)}",
                model_type=str(spec),
                estimation_method=method,
                issue="statsmodels UnobservedComponents fit",
                details=str(e)
            ) from e

        converged = res.mle_retvals.get("converged", True) if res.mle_retvals else True
        if not converged:
            warn_model(
                "Maximum likelihood estimation did not converge",
                model_type=str(spec),
                issue="non-convergence",
                parameter="maxiter",
                value=maxiter
            )

        values = dict(zip(mod.param_names, np.asarray(res.params, dtype=np.float64)))
        params = _parameters_from_statsmodels(spec, values)
        self._model = BasicStructuralModel(spec, params, frequency)
        self._y = y
        self._nparams = _estimated_count(spec)
        self._likelihood = None
        self._fit_result = res
        logger.debug(f"Estimated parameters: {params.to_dict()}")
        return self

    def _check_processed(self) -> None:
        if self._model is None:
            raise EstimationError(
                "No model available",
                issue="process() or from_model() must be called first"
            )

    @property
    def y(self) -> Optional[TsData]:
        return self._y

    @property
    def fit_result(self) -> Any:
        """statsmodels results object of the last estimation (None for known models)."""
        return self._fit_result

    def get_result(self) -> BasicStructuralModel:
        """The retained structural model."""
        self._check_processed()
        return self._model

    def get_likelihood(self) -> Likelihood:
        """Concentrated likelihood of the retained model (computed once)."""
        self._check_processed()
        if self._likelihood is None:
            self._likelihood = compute_likelihood(self._y, self._model, self._nparams, self._smoother)
        return self._likelihood

    def likelihood_function(self) -> LikelihoodFunction:
        """Log-likelihood as a function of the unconstrained hyper-parameters."""
        self._check_processed()
        return LikelihoodFunction(self._y, self._model, self._smoother)

    def max_likelihood_function(self) -> LikelihoodFunctionPoint:
        """Likelihood function evaluated at the retained hyper-parameters."""
        return self.likelihood_function().evaluate(self._model.params.transform())
