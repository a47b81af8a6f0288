"""
STS Toolbox UCARIMA Module

ARIMA models in lag-polynomial form, unobserved components ARIMA models with
their reduced form and normalization, and Wiener-Kolmogorov estimators of the
components.
"""

import logging

logger = logging.getLogger("sts.models.ucarima")

from .arima import ArimaModel, polynomial_acgf, spectral_factorization
from .ucarima import UcarimaModel
from .wiener_kolmogorov import WienerKolmogorovEstimator, WienerKolmogorovEstimators

__all__ = [
    "ArimaModel",
    "UcarimaModel",
    "WienerKolmogorovEstimator",
    "WienerKolmogorovEstimators",
    "polynomial_acgf",
    "spectral_factorization",
]
