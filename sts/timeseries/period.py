# sts/timeseries/period.py
"""
Periods and domains of equally spaced time series.

A ``TsPeriod`` identifies one period of a regular calendar (yearly, half-yearly,
four-monthly, quarterly, bi-monthly or monthly) by its frequency and an ordinal
counted from year 0. A ``TsDomain`` is a contiguous run of periods of the same
frequency, described by its first period and its length.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd

from sts.core.exceptions import raise_domain_mismatch_error, raise_parameter_error
from sts.core.validation import validate_frequency, validate_non_negative_integer

logger = logging.getLogger("sts.timeseries.period")

# Pandas period codes for the frequencies pandas can represent directly
_PANDAS_FREQUENCIES = {1: "Y", 4: "Q", 12: "M"}


@dataclass(frozen=True, order=True)
class TsPeriod:
    """One period of a regular time series calendar.

    Attributes:
        frequency: Number of periods per year
        ordinal: Periods elapsed since the first period of year 0
    """
    frequency: int
    ordinal: int

    def __post_init__(self) -> None:
        validate_frequency(self.frequency)

    @classmethod
    def from_year_position(cls, frequency: int, year: int, position: int) -> "TsPeriod":
        """Build a period from its year and its 0-based position within the year.

        Raises:
            ParameterError: If the position is outside [0, frequency)
        """
        frequency = validate_frequency(frequency)
        if not 0 <= position < frequency:
            raise_parameter_error(
                f"Position {position} is not valid for frequency {frequency}",
                param_name="position",
                param_value=position,
                constraint=f"0 <= position < {frequency}"
            )
        return cls(frequency, year * frequency + position)

    @classmethod
    def from_pandas(cls, period: pd.Period) -> "TsPeriod":
        """Convert a monthly, quarterly or yearly pandas Period."""
        code = period.freqstr.upper()
        if code.startswith("M"):
            return cls.from_year_position(12, period.year, period.month - 1)
        if code.startswith("Q"):
            return cls.from_year_position(4, period.year, period.quarter - 1)
        if code.startswith("A") or code.startswith("Y"):
            return cls.from_year_position(1, period.year, 0)
        raise_parameter_error(
            f"Unsupported pandas period frequency: {period.freqstr}",
            param_name="period",
            param_value=period.freqstr,
            constraint="monthly, quarterly or yearly"
        )

    @property
    def year(self) -> int:
        return self.ordinal // self.frequency

    @property
    def position(self) -> int:
        return self.ordinal % self.frequency

    def to_pandas(self) -> pd.Period:
        """Convert to a pandas Period (frequencies 1, 4 and 12 only)."""
        code = _PANDAS_FREQUENCIES.get(self.frequency)
        if code is None:
            raise_parameter_error(
                f"Frequency {self.frequency} has no pandas period equivalent",
                param_name="frequency",
                param_value=self.frequency,
                constraint=f"one of {sorted(_PANDAS_FREQUENCIES)}"
            )
        if self.frequency == 12:
            return pd.Period(year=self.year, month=self.position + 1, freq=code)
        if self.frequency == 4:
            return pd.Period(year=self.year, quarter=self.position + 1, freq=code)
        return pd.Period(year=self.year, freq=code)

    def _check_frequency(self, other: "TsPeriod") -> None:
        if other.frequency != self.frequency:
            raise_domain_mismatch_error(
                "Periods have different frequencies",
                source_domain=self,
                requested_domain=other,
                issue="frequency mismatch"
            )

    def __add__(self, n: int) -> "TsPeriod":
        if not isinstance(n, (int, np.integer)):
            return NotImplemented
        return TsPeriod(self.frequency, self.ordinal + int(n))

    def __sub__(self, other):
        if isinstance(other, TsPeriod):
            self._check_frequency(other)
            return self.ordinal - other.ordinal
        if isinstance(other, (int, np.integer)):
            return TsPeriod(self.frequency, self.ordinal - int(other))
        return NotImplemented

    def __str__(self) -> str:
        if self.frequency == 12:
            return f"{self.year}-{self.position + 1:02d}"
        if self.frequency == 4:
            return f"{self.year}Q{self.position + 1}"
        if self.frequency == 1:
            return f"{self.year}"
        return f"{self.year}P{self.position + 1}"


@dataclass(frozen=True)
class TsDomain:
    """A contiguous run of periods.

    Attributes:
        start: First period of the domain
        length: Number of periods (may be 0)
    """
    start: TsPeriod
    length: int

    def __post_init__(self) -> None:
        validate_non_negative_integer(self.length, "length")

    @classmethod
    def of(cls, frequency: int, year: int, position: int, length: int) -> "TsDomain":
        return cls(TsPeriod.from_year_position(frequency, year, position), length)

    @classmethod
    def range(cls, start: TsPeriod, end: TsPeriod) -> "TsDomain":
        """Domain from start (inclusive) to end (exclusive)."""
        return cls(start, max(0, end - start))

    @property
    def frequency(self) -> int:
        return self.start.frequency

    @property
    def end(self) -> TsPeriod:
        """First period after the domain."""
        return self.start + self.length

    @property
    def last(self) -> TsPeriod:
        """Last period of the domain.

        Raises:
            DomainMismatchError: If the domain is empty
        """
        if self.length == 0:
            raise_domain_mismatch_error(
                "An empty domain has no last period",
                source_domain=self,
                issue="empty domain"
            )
        return self.start + (self.length - 1)

    def is_empty(self) -> bool:
        return self.length == 0

    def get(self, index: int) -> TsPeriod:
        if not 0 <= index < self.length:
            raise IndexError(f"Period index {index} out of range for domain of length {self.length}")
        return self.start + index

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[TsPeriod]:
        for i in range(self.length):
            yield self.start + i

    def __contains__(self, period: TsPeriod) -> bool:
        return self.contains(period)

    def contains(self, period: TsPeriod) -> bool:
        return period.frequency == self.frequency and 0 <= period - self.start < self.length

    def search(self, period: TsPeriod) -> int:
        """Position of period in the domain, or -1 when it is outside."""
        if not self.contains(period):
            return -1
        return period - self.start

    def _check_frequency(self, other: "TsDomain") -> None:
        if other.frequency != self.frequency:
            raise_domain_mismatch_error(
                "Domains have different frequencies",
                source_domain=self,
                requested_domain=other,
                issue="frequency mismatch"
            )

    def intersection(self, other: "TsDomain") -> "TsDomain":
        """Common periods of both domains (possibly empty).

        Raises:
            DomainMismatchError: If the frequencies differ
        """
        self._check_frequency(other)
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        return TsDomain(start, max(0, end - start))

    def union(self, other: "TsDomain") -> "TsDomain":
        """Smallest domain covering both domains (gaps included).

        Raises:
            DomainMismatchError: If the frequencies differ
        """
        self._check_frequency(other)
        if other.is_empty():
            return self
        if self.is_empty():
            return other
        start = min(self.start, other.start)
        end = max(self.end, other.end)
        return TsDomain(start, end - start)

    def extend(self, n_before: int, n_after: int) -> "TsDomain":
        return TsDomain(self.start - n_before, max(0, self.length + n_before + n_after))

    def drop(self, n_first: int, n_last: int) -> "TsDomain":
        return TsDomain(self.start + n_first, max(0, self.length - n_first - n_last))

    def to_pandas(self) -> pd.PeriodIndex:
        """PeriodIndex covering the domain (frequencies 1, 4 and 12 only)."""
        return pd.period_range(start=self.start.to_pandas(), periods=self.length)

    def labels(self) -> list:
        """String labels of the periods."""
        return [str(p) for p in self]

    def __str__(self) -> str:
        if self.length == 0:
            return f"[{self.start}, empty]"
        return f"[{self.start} - {self.last}] ({self.length} periods)"

