"""
STS Toolbox Models Module

- ``structural``: basic structural models, Kalman smoothing, estimation and
  decomposition results
- ``ucarima``: ARIMA and UCARIMA models, Wiener-Kolmogorov estimators
"""

import logging

logger = logging.getLogger("sts.models")

from . import ucarima
from . import structural

__all__ = ["structural", "ucarima"]
