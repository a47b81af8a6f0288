# sts/models/ucarima/wiener_kolmogorov.py
"""
Wiener-Kolmogorov estimators of the components of a UCARIMA model.

For a component ``phi_i(B) c_t = theta_i(B) b_t`` of a model whose reduced form
is ``phi(B) x_t = theta(B) a_t``, the minimum mean squared error estimator of
the component from a doubly infinite realization is the symmetric filter

    nu_i(B, F) = var_i * theta_i(B) theta_i(F) phi_-i(B) phi_-i(F)
                 / (var * theta(B) theta(F))

where ``phi_-i`` is the product of the AR polynomials of the other components.
"""

import logging
import threading
from typing import Dict, List, Optional, Union

import numpy as np
from numpy.polynomial import polynomial as P
from scipy import signal

from sts.core.config import get_config
from sts.core.exceptions import NumericError, raise_parameter_error
from sts.core.validation import validate_non_negative_integer
from sts.models.ucarima.arima import ArimaModel, polynomial_acgf, symmetric_to_full
from sts.models.ucarima.ucarima import UcarimaModel

logger = logging.getLogger("sts.models.ucarima.wiener_kolmogorov")


class WienerKolmogorovEstimator:
    """Wiener-Kolmogorov filter of one component.

    Args:
        component: The component model
        complement_ar: Product of the AR polynomials of the other components
        reduced: Reduced model of the UCARIMA model
    """

    def __init__(self, component: ArimaModel, complement_ar: np.ndarray, reduced: ArimaModel) -> None:
        self._component = component
        self._complement_ar = np.asarray(complement_ar, dtype=np.float64)
        self._reduced = reduced

    @property
    def component(self) -> ArimaModel:
        return self._component

    @property
    def reduced(self) -> ArimaModel:
        return self._reduced

    def numerator_acgf(self) -> np.ndarray:
        """One-sided autocovariances of ``var_i theta_i phi_-i``."""
        return self._component.var * polynomial_acgf(P.polymul(self._component.ma, self._complement_ar))

    def weights(self, n: Optional[int] = None) -> np.ndarray:
        """Central weights ``w[0..n]`` of the symmetric filter.

        Args:
            n: Number of weights on each side (defaults to
                ``decomposition.wk_weights_length``)

        Raises:
            NumericError: If the reduced MA polynomial is not invertible
        """
        if n is None:
            n = get_config("decomposition", "wk_weights_length", 36)
        n = validate_non_negative_integer(n, "n")
        if self._component.is_null:
            return np.zeros(n + 1)
        if self._reduced.var <= 0:
            raise NumericError(
                "Wiener-Kolmogorov filter undefined for a degenerate reduced model",
                operation="wiener-kolmogorov weights",
                error_type="zero variance"
            )

        num = symmetric_to_full(self.numerator_acgf())
        m = (num.size - 1) // 2

        ma = self._reduced.ma
        root_modulus = np.min(np.abs(P.polyroots(ma))) if ma.size > 1 else np.inf
        if root_modulus <= 1.0 + 1e-9:
            raise NumericError(
                "Reduced moving average polynomial is not invertible",
                operation="wiener-kolmogorov weights",
                values=ma,
                error_type="non-invertible"
            )

        # psi weights of 1 / theta(B), truncated once they fall below 1e-10
        tail = 400 if np.isinf(root_modulus) else int(min(100000, max(400, np.ceil(23.0 / np.log(root_modulus)))))
        lags = n + m
        impulse = np.zeros(lags + tail)
        impulse[0] = 1.0
        psi = signal.lfilter([1.0], ma, impulse)
        acgf = np.array([psi[:psi.size - k] @ psi[k:] for k in range(lags + 1)])
        den = symmetric_to_full(acgf)

        full = np.convolve(num, den) / self._reduced.var
        center = (full.size - 1) // 2
        return full[center:center + n + 1].copy()

    def gain(self, freqs: Union[float, np.ndarray]) -> np.ndarray:
        """Frequency response of the filter (the ratio of spectra)."""
        w = np.atleast_1d(np.asarray(freqs, dtype=np.float64))
        z = np.exp(-1j * w)
        num = self._component.var * np.abs(P.polyval(z, P.polymul(self._component.ma, self._complement_ar))) ** 2
        den = self._reduced.var * np.abs(P.polyval(z, self._reduced.ma)) ** 2
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.where(den > 0, num / np.where(den > 0, den, 1.0), 0.0)

    def component_spectrum(self, freqs: Union[float, np.ndarray]) -> np.ndarray:
        """(Pseudo-)spectrum of the theoretical component."""
        return self._component.spectrum(freqs)

    def estimator_spectrum(self, freqs: Union[float, np.ndarray]) -> np.ndarray:
        """(Pseudo-)spectrum of the final estimator, ``gain^2`` times the series spectrum."""
        return self.gain(freqs) ** 2 * self._reduced.spectrum(freqs)


class WienerKolmogorovEstimators:
    """Wiener-Kolmogorov estimators of every component of a UCARIMA model.

    Estimators are built on first access and cached.

    Args:
        ucm: The UCARIMA model
    """

    def __init__(self, ucm: UcarimaModel) -> None:
        if not isinstance(ucm, UcarimaModel):
            raise TypeError(f"ucm must be a UcarimaModel, got {type(ucm).__name__}")
        self._ucm = ucm
        self._reduced = ucm.reduced_model()
        self._estimators: Dict[int, WienerKolmogorovEstimator] = {}
        self._lock = threading.Lock()

    @property
    def ucarima_model(self) -> UcarimaModel:
        return self._ucm

    @property
    def names(self) -> List[str]:
        return self._ucm.names

    def _complement_ar(self, index: int) -> np.ndarray:
        ar = np.ones(1)
        for j in range(self._ucm.component_count):
            other = self._ucm.component(j)
            if j != index and not other.is_null:
                ar = P.polymul(ar, other.ar)
        return ar

    def estimator(self, index: Union[int, str]) -> WienerKolmogorovEstimator:
        """Estimator of a component given by position or name.

        Raises:
            ParameterError: If the component does not exist
        """
        if isinstance(index, str):
            if index not in self._ucm.names:
                raise_parameter_error(
                    f"Unknown component: {index}",
                    param_name="index",
                    param_value=index,
                    constraint=f"one of {self._ucm.names}"
                )
            index = self._ucm.names.index(index)
        if not 0 <= index < self._ucm.component_count:
            raise_parameter_error(
                f"Component index out of range: {index}",
                param_name="index",
                param_value=index,
                constraint=f"0 <= index < {self._ucm.component_count}"
            )
        with self._lock:
            estimator = self._estimators.get(index)
            if estimator is None:
                estimator = WienerKolmogorovEstimator(
                    self._ucm.component(index), self._complement_ar(index), self._reduced
                )
                self._estimators[index] = estimator
        return estimator

    def weights(self, index: Union[int, str], n: Optional[int] = None) -> np.ndarray:
        return self.estimator(index).weights(n)

    def gain(self, index: Union[int, str], freqs: Union[float, np.ndarray]) -> np.ndarray:
        return self.estimator(index).gain(freqs)
