"""
STS Toolbox Time Series Module

Regular calendars and immutable time series used by the decomposition:

- ``TsPeriod``: one period of a calendar with 1, 2, 3, 4, 6 or 12 periods a year
- ``TsDomain``: a contiguous run of periods
- ``TsData``: a read-only float series on a domain (NaN marks missing values)
"""

import logging

logger = logging.getLogger("sts.timeseries")

from .period import TsDomain, TsPeriod
from .data import TsData

__all__ = ["TsPeriod", "TsDomain", "TsData"]
