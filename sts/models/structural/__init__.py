"""
STS Toolbox Structural Models Module

Basic structural models (BSM) in state-space form, their Kalman smoother and
concentrated likelihood, maximum likelihood estimation through statsmodels
(``BsmMonitor``) and the decomposition results (``StsResults``).
"""

import logging

logger = logging.getLogger("sts.models.structural")

from .specification import BsmParameters, ModelSpecification
from .bsm import BasicStructuralModel
from .smoother import FilteringResults, Smoother, SmoothingResults
from .likelihood import Likelihood, compute_likelihood
from .monitor import BsmMonitor, LikelihoodFunction, LikelihoodFunctionPoint
from .results import StsResults

__all__ = [
    "BasicStructuralModel",
    "BsmMonitor",
    "BsmParameters",
    "FilteringResults",
    "Likelihood",
    "LikelihoodFunction",
    "LikelihoodFunctionPoint",
    "ModelSpecification",
    "Smoother",
    "SmoothingResults",
    "StsResults",
    "compute_likelihood",
]
