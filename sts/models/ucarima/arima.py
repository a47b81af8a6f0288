# sts/models/ucarima/arima.py
"""
ARIMA models in lag-polynomial form.

An ``ArimaModel`` describes ``phi(B) x_t = theta(B) a_t`` with ``Var(a_t) = var``.
Both polynomials are stored in ascending powers of the backshift operator B and
have a unit constant term; ``phi`` may contain unit roots (differencing,
seasonal summation), so the model need not be stationary.

The module also implements the spectral factorization used to express a sum
of ARIMA models as a single ARIMA model.
"""

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.polynomial import polynomial as P

from sts.core.config import get_config
from sts.core.exceptions import NumericError
from sts.core.validation import validate_parameter_bounds, validate_polynomial

logger = logging.getLogger("sts.models.ucarima.arima")

Polynomial = Union[Sequence[float], np.ndarray]


def polynomial_acgf(coefficients: np.ndarray) -> np.ndarray:
    """Autocovariance generating function of a polynomial with unit variance.

    Returns:
        np.ndarray: ``c[k] = sum_j p[j] p[j + k]`` for ``k = 0..deg(p)``
    """
    p = np.asarray(coefficients, dtype=np.float64)
    full = np.correlate(p, p, mode="full")
    return full[len(p) - 1:].copy()


def symmetric_to_full(acgf: np.ndarray) -> np.ndarray:
    """Two-sided sequence ``c[-q..q]`` from the one-sided ``c[0..q]``."""
    return np.concatenate([acgf[:0:-1], acgf])


def spectral_factorization(acgf: np.ndarray,
                           root_tolerance: Optional[float] = None) -> Tuple[np.ndarray, float]:
    """Factorize a symmetric autocovariance sequence into an invertible MA model.

    Finds ``theta`` (unit constant term) and ``var`` such that
    ``var * sum_j theta[j] theta[j + k] = acgf[k]`` with every root of
    ``theta(B)`` on or outside the unit circle.

    Args:
        acgf: One-sided autocovariances ``c[0..q]``
        root_tolerance: Coefficients below this fraction of ``c[0]`` are
            treated as zero (defaults to ``numerical.root_tolerance``)

    Returns:
        Tuple[np.ndarray, float]: MA polynomial and innovation variance

    Raises:
        NumericError: If the sequence is not a valid autocovariance sequence
    """
    if root_tolerance is None:
        root_tolerance = get_config("numerical", "root_tolerance", 1e-8)

    c = np.asarray(acgf, dtype=np.float64)
    if c.size == 0 or c[0] <= 0:
        return np.ones(1), 0.0

    # Trim negligible trailing autocovariances
    q = c.size - 1
    while q > 0 and abs(c[q]) <= root_tolerance * c[0]:
        q -= 1
    c = c[:q + 1]
    if q == 0:
        return np.ones(1), float(c[0])

    # Roots of z^q * g(z) come in reciprocal pairs; the q largest in modulus
    # give the invertible factor
    roots = P.polyroots(symmetric_to_full(c))
    roots = roots[np.argsort(-np.abs(roots))][:q]
    if np.any(np.abs(roots) < 1.0 - 1e-6):
        raise NumericError(
            "Autocovariance sequence has no invertible factorization",
            operation="spectral factorization",
            values=c,
            error_type="non-positive spectrum"
        )

    theta = P.polyfromroots(roots)
    theta = np.real(theta / theta[0])
    var = float(c[0] / np.sum(theta * theta))

    # Roots on the unit circle are not paired when the spectrum changes sign
    if np.max(np.abs(var * polynomial_acgf(theta) - c)) > 1e-6 * c[0]:
        raise NumericError(
            "Autocovariance sequence has no real factorization",
            operation="spectral factorization",
            values=c,
            error_type="non-positive spectrum"
        )
    return theta, var


class ArimaModel:
    """ARIMA model ``phi(B) x_t = theta(B) a_t``.

    Args:
        ar: Autoregressive polynomial (unit roots allowed), ascending powers of B
        ma: Moving average polynomial, ascending powers of B
        var: Innovation variance
    """

    def __init__(self, ar: Polynomial = (1.0,), ma: Polynomial = (1.0,), var: float = 1.0) -> None:
        self._ar = validate_polynomial(ar, "ar")
        self._ma = validate_polynomial(ma, "ma")
        self._var = float(validate_parameter_bounds(var, "var", lower_bound=0.0))

    @classmethod
    def from_acgf(cls, ar: Polynomial, acgf: np.ndarray) -> "ArimaModel":
        """Model whose MA part has the given autocovariances."""
        ma, var = spectral_factorization(acgf)
        return cls(ar, ma, var)

    @classmethod
    def null(cls) -> "ArimaModel":
        return cls((1.0,), (1.0,), 0.0)

    @property
    def ar(self) -> np.ndarray:
        return self._ar.copy()

    @property
    def ma(self) -> np.ndarray:
        return self._ma.copy()

    @property
    def var(self) -> float:
        return self._var

    @property
    def is_null(self) -> bool:
        return self._var == 0.0

    def scaled(self, factor: float) -> "ArimaModel":
        """Same model with the innovation variance divided by factor."""
        return ArimaModel(self._ar, self._ma, self._var / factor)

    def acgf(self) -> np.ndarray:
        """Autocovariances of the MA part, ``var * theta(B) theta(F)``."""
        return self._var * polynomial_acgf(self._ma)

    def spectrum(self, freqs: Union[float, np.ndarray]) -> np.ndarray:
        """(Pseudo-)spectrum ``var |theta(e^-iw)|^2 / |phi(e^-iw)|^2``.

        Frequencies where the AR polynomial vanishes give ``inf``.
        """
        w = np.atleast_1d(np.asarray(freqs, dtype=np.float64))
        z = np.exp(-1j * w)
        num = np.abs(P.polyval(z, self._ma)) ** 2
        den = np.abs(P.polyval(z, self._ar)) ** 2
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.where(den > 0, self._var * num / np.where(den > 0, den, 1.0), np.inf)

    def plus(self, other: "ArimaModel") -> "ArimaModel":
        """Model of the sum of two independent ARIMA processes.

        The AR polynomial is the product of both AR polynomials and the MA part
        is obtained by spectral factorization of the summed autocovariances.
        """
        if other.is_null:
            return self
        if self.is_null:
            return other
        ar = P.polymul(self._ar, other._ar)
        left = self._var * polynomial_acgf(P.polymul(self._ma, other._ar))
        right = other._var * polynomial_acgf(P.polymul(other._ma, self._ar))
        size = max(left.size, right.size)
        total = np.zeros(size)
        total[:left.size] += left
        total[:right.size] += right
        return ArimaModel.from_acgf(ar, total)

    def __add__(self, other: "ArimaModel") -> "ArimaModel":
        return self.plus(other)

    def __repr__(self) -> str:
        return f"ArimaModel(ar={np.round(self._ar, 6).tolist()}, ma={np.round(self._ma, 6).tolist()}, var={self._var:.6g})"
