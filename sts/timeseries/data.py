# sts/timeseries/data.py
"""
Immutable, frequency-tagged time series.

``TsData`` couples a start period with a read-only vector of float values.
Missing observations are represented by NaN. All operations return new series;
the values of an existing series are never modified.
"""

import logging
from typing import Optional, Union

import numpy as np
import pandas as pd

from sts.core.exceptions import raise_data_error, raise_domain_mismatch_error
from sts.core.validation import validate_non_negative_integer, validate_vector
from sts.timeseries.period import TsDomain, TsPeriod

logger = logging.getLogger("sts.timeseries.data")

Operand = Union["TsData", float, int]


class TsData:
    """A contiguous, equally spaced time series.

    Args:
        start: Period of the first observation
        values: Observations (NaN marks a missing value)
    """

    __slots__ = ("_start", "_values")

    def __init__(self, start: TsPeriod, values) -> None:
        if not isinstance(start, TsPeriod):
            raise TypeError(f"start must be a TsPeriod, got {type(start).__name__}")
        array = validate_vector(values, vector_name="values", allow_nan=True, allow_inf=True)
        array = array.copy()
        array.flags.writeable = False
        self._start = start
        self._values = array

    # Constructors

    @classmethod
    def zeros(cls, domain: TsDomain) -> "TsData":
        """All-zero series over a domain."""
        return cls(domain.start, np.zeros(domain.length))

    @classmethod
    def missing(cls, domain: TsDomain) -> "TsData":
        """All-missing series over a domain."""
        return cls(domain.start, np.full(domain.length, np.nan))

    @classmethod
    def from_series(cls, series: pd.Series) -> "TsData":
        """Build a series from a pandas Series indexed by a monthly, quarterly or
        yearly PeriodIndex (or a DatetimeIndex convertible to one).

        Raises:
            DataError: If the index is not a regular period index
        """
        index = series.index
        if isinstance(index, pd.DatetimeIndex):
            if index.freq is None:
                inferred = pd.infer_freq(index) if len(index) >= 3 else None
                if inferred is None:
                    raise_data_error(
                        "Cannot infer the frequency of the series index",
                        data_name=str(series.name) if series.name is not None else "series",
                        issue="irregular DatetimeIndex"
                    )
                index = index.to_period(inferred)
            else:
                index = index.to_period()
        if not isinstance(index, pd.PeriodIndex):
            raise_data_error(
                "Series must be indexed by a PeriodIndex or a DatetimeIndex",
                data_name=str(series.name) if series.name is not None else "series",
                issue=f"index of type {type(series.index).__name__}"
            )
        if len(index) == 0:
            raise_data_error("Series is empty", issue="no observations")
        start = TsPeriod.from_pandas(index[0])
        expected = pd.period_range(start=index[0], periods=len(index))
        if not index.equals(expected):
            raise_data_error(
                "Series index has gaps or is not sorted",
                data_name=str(series.name) if series.name is not None else "series",
                issue="non-contiguous PeriodIndex"
            )
        return cls(start, series.to_numpy(dtype=np.float64))

    # Properties

    @property
    def start(self) -> TsPeriod:
        return self._start

    @property
    def domain(self) -> TsDomain:
        return TsDomain(self._start, len(self._values))

    @property
    def frequency(self) -> int:
        return self._start.frequency

    @property
    def length(self) -> int:
        return len(self._values)

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the observations."""
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index):
        return self._values[index]

    def get(self, period: TsPeriod) -> float:
        """Value at a period, NaN when the period is outside the series."""
        pos = self.domain.search(period)
        return float(self._values[pos]) if pos >= 0 else float("nan")

    def to_numpy(self) -> np.ndarray:
        """Writable copy of the observations."""
        return self._values.copy()

    def count_missing(self) -> int:
        return int(np.isnan(self._values).sum())

    # Arithmetic

    @staticmethod
    def add(left: Optional["TsData"], right: Optional["TsData"]) -> Optional["TsData"]:
        """Sum of two optional series.

        A missing operand yields the other operand; otherwise the sum is
        defined on the intersection of both domains.
        """
        if left is None:
            return right
        if right is None:
            return left
        return left._combine(right, np.add)

    @staticmethod
    def subtract(left: Optional["TsData"], right: Optional["TsData"]) -> Optional["TsData"]:
        """Difference of two optional series (see ``add`` for None handling)."""
        if right is None:
            return left
        if left is None:
            return -right
        return left._combine(right, np.subtract)

    def _combine(self, other: "TsData", op) -> "TsData":
        domain = self.domain.intersection(other.domain)
        lhs = self._slice(domain)
        rhs = other._slice(domain)
        return TsData(domain.start, op(lhs, rhs))

    def _slice(self, domain: TsDomain) -> np.ndarray:
        """Values on a sub-domain of the series domain."""
        offset = domain.start - self._start
        return self._values[offset:offset + domain.length]

    def __add__(self, other: Operand) -> "TsData":
        if isinstance(other, TsData):
            return TsData.add(self, other)
        if isinstance(other, (int, float, np.number)):
            return TsData(self._start, self._values + other)
        return NotImplemented

    def __radd__(self, other: Operand) -> "TsData":
        return self.__add__(other)

    def __sub__(self, other: Operand) -> "TsData":
        if isinstance(other, TsData):
            return TsData.subtract(self, other)
        if isinstance(other, (int, float, np.number)):
            return TsData(self._start, self._values - other)
        return NotImplemented

    def __rsub__(self, other: Operand) -> "TsData":
        if isinstance(other, (int, float, np.number)):
            return TsData(self._start, other - self._values)
        return NotImplemented

    def __mul__(self, other: Operand) -> "TsData":
        if isinstance(other, TsData):
            return self._combine(other, np.multiply)
        if isinstance(other, (int, float, np.number)):
            return TsData(self._start, self._values * other)
        return NotImplemented

    def __rmul__(self, other: Operand) -> "TsData":
        return self.__mul__(other)

    def __neg__(self) -> "TsData":
        return TsData(self._start, -self._values)

    # Domain operations

    def drop(self, n_first: int, n_last: int) -> "TsData":
        """Remove n_first leading and n_last trailing observations."""
        n_first = validate_non_negative_integer(n_first, "n_first")
        n_last = validate_non_negative_integer(n_last, "n_last")
        domain = self.domain.drop(n_first, n_last)
        return TsData(domain.start, self._values[n_first:n_first + domain.length])

    def extend(self, n_before: int, n_after: int) -> "TsData":
        """Pad the series with missing values on both sides."""
        n_before = validate_non_negative_integer(n_before, "n_before")
        n_after = validate_non_negative_integer(n_after, "n_after")
        values = np.concatenate([
            np.full(n_before, np.nan), self._values, np.full(n_after, np.nan)
        ])
        return TsData(self._start - n_before, values)

    def fit_to_domain(self, domain: TsDomain) -> "TsData":
        """Restrict or pad the series to a requested domain.

        Periods of the requested domain outside the series become missing.

        Raises:
            DomainMismatchError: If the frequencies differ or the requested
                domain does not overlap the series domain
        """
        if domain.frequency != self.frequency:
            raise_domain_mismatch_error(
                "Cannot fit a series to a domain of another frequency",
                source_domain=self.domain,
                requested_domain=domain,
                issue="frequency mismatch"
            )
        if domain == self.domain:
            return self
        common = self.domain.intersection(domain)
        if common.is_empty() and not domain.is_empty():
            raise_domain_mismatch_error(
                "Requested domain does not overlap the series",
                source_domain=self.domain,
                requested_domain=domain,
                issue="no overlap"
            )
        values = np.full(domain.length, np.nan)
        offset = common.start - domain.start
        values[offset:offset + common.length] = self._slice(common)
        return TsData(domain.start, values)

    def update(self, other: "TsData") -> "TsData":
        """Merge another series into this one.

        The result covers the union of both domains; non-missing values of the
        other series replace the values of this series where both are defined.

        Raises:
            DomainMismatchError: If the frequencies differ
        """
        domain = self.domain.union(other.domain)
        values = np.full(domain.length, np.nan)
        offset = self._start - domain.start
        values[offset:offset + self.length] = self._values
        offset = other._start - domain.start
        block = values[offset:offset + other.length]
        present = ~np.isnan(other._values)
        block[present] = other._values[present]
        return TsData(domain.start, values)

    # Transformations

    def exp(self) -> "TsData":
        return TsData(self._start, np.exp(self._values))

    def log(self) -> "TsData":
        """Natural logarithm.

        Raises:
            DataError: If the series contains non-positive values
        """
        observed = self._values[~np.isnan(self._values)]
        if (observed <= 0).any():
            raise_data_error(
                "Cannot take the logarithm of non-positive values",
                data_name="series",
                issue="non-positive values",
                index=int(np.flatnonzero(self._values <= 0)[0])
            )
        return TsData(self._start, np.log(self._values))

    # Comparison and conversion

    def equals(self, other: "TsData", tolerance: float = 0.0) -> bool:
        """Same domain and values within an absolute tolerance (NaN == NaN)."""
        if not isinstance(other, TsData) or self.domain != other.domain:
            return False
        return bool(np.allclose(self._values, other._values, rtol=0.0, atol=tolerance, equal_nan=True))

    def to_series(self, name: Optional[str] = None) -> pd.Series:
        """Convert to a pandas Series.

        Monthly, quarterly and yearly series get a PeriodIndex; other
        frequencies are labelled with the period strings.
        """
        if self.frequency in (1, 4, 12):
            index = self.domain.to_pandas()
        else:
            index = pd.Index(self.domain.labels())
        return pd.Series(self._values.copy(), index=index, name=name)

    def __repr__(self) -> str:
        return f"TsData(start={self._start}, length={self.length})"
