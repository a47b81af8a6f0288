# sts/models/structural/likelihood.py
"""
Concentrated diffuse log-likelihood of structural models.

The likelihood is computed from the prediction error decomposition of the
Kalman filter. The first observations, as many as there are diffuse state
elements, only serve to initialize the non-stationary states and are excluded.
The scale of the disturbance variances is concentrated out.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from sts.core.exceptions import NumericError
from sts.models.structural.bsm import BasicStructuralModel
from sts.models.structural.smoother import FilteringResults, Smoother
from sts.timeseries.data import TsData

logger = logging.getLogger("sts.models.structural.likelihood")


@dataclass
class Likelihood:
    """Concentrated log-likelihood and its by-products.

    Attributes:
        loglikelihood: Value of the concentrated log-likelihood
        sigma2: Concentrated scale of the disturbance variances
        nobs: Number of non-missing observations
        ndiffuse: Number of diffuse state elements
        residuals: Standardized one-step-ahead prediction errors
        nparams: Number of estimated hyper-parameters
    """
    loglikelihood: float
    sigma2: float
    nobs: int
    ndiffuse: int
    residuals: TsData
    nparams: int = 0

    @property
    def neffective(self) -> int:
        """Number of observations entering the likelihood."""
        return self.nobs - self.ndiffuse

    @property
    def aic(self) -> float:
        return -2.0 * self.loglikelihood + 2.0 * self.nparams

    @property
    def bic(self) -> float:
        return -2.0 * self.loglikelihood + self.nparams * np.log(self.neffective)

    def ser(self) -> float:
        """Standard error of the residuals."""
        return float(np.sqrt(self.sigma2))


def _residuals(data: TsData, filtering: FilteringResults, skip: int) -> TsData:
    observed = np.flatnonzero(filtering.used)
    first = int(observed[skip]) if observed.size > skip else data.length
    values = np.full(data.length - first, np.nan)
    used = filtering.used[first:]
    v = filtering.innovations[first:]
    f = filtering.innovation_variances[first:]
    values[used] = v[used] / np.sqrt(f[used])
    return TsData(data.start + first, values)


def compute_likelihood(data: TsData,
                       model: BasicStructuralModel,
                       nparams: int = 0,
                       smoother: Optional[Smoother] = None) -> Likelihood:
    """Concentrated diffuse log-likelihood of a model for a series.

    Args:
        data: Observed series (missing values are skipped)
        model: Structural model with its hyper-parameters
        nparams: Number of estimated hyper-parameters (for the criteria)
        smoother: Filtering engine (a default ``Smoother`` when omitted)

    Returns:
        Likelihood: Log-likelihood, scale and standardized residuals

    Raises:
        NumericError: If the series has no observation beyond the diffuse part
    """
    smoother = smoother or Smoother()
    filtering = smoother.filter(data, model)
    d = model.diffuse_dim
    used_idx = np.flatnonzero(filtering.used)
    nobs = int(used_idx.size)
    if nobs <= d:
        raise NumericError(
            "Not enough observations to evaluate the likelihood",
            operation="likelihood",
            values=nobs,
            error_type="insufficient data",
            details=f"{nobs} observations for {d} diffuse elements"
        )

    effective = used_idx[d:]
    v = filtering.innovations[effective]
    f = filtering.innovation_variances[effective]
    n = effective.size
    ssq = float(np.sum(v * v / f))
    sigma2 = ssq / n
    logdet = float(np.sum(np.log(f)))
    if sigma2 <= 0.0:
        ll = -np.inf
    else:
        ll = -0.5 * (n * np.log(2.0 * np.pi * sigma2) + logdet + n)

    return Likelihood(
        loglikelihood=float(ll),
        sigma2=sigma2,
        nobs=nobs,
        ndiffuse=d,
        residuals=_residuals(data, filtering, d),
        nparams=nparams
    )
