'''
Tests for ARIMA models, UCARIMA models and Wiener-Kolmogorov estimators.

The local level model (random walk plus noise with signal-to-noise ratio 1)
has a closed-form reduced model: ``(1 - B) x_t = (1 + theta B) a_t`` with
``theta = (sqrt(5) - 3) / 2`` and ``var = -1 / theta``.
'''

import threading

import numpy as np
import pytest

from sts.core.exceptions import ModelWarning, NumericError, ParameterError
from sts.models.ucarima import (
    ArimaModel, UcarimaModel, WienerKolmogorovEstimators, polynomial_acgf, spectral_factorization
)

THETA = (np.sqrt(5.0) - 3.0) / 2.0
VAR = -1.0 / THETA


@pytest.fixture
def local_level() -> UcarimaModel:
    trend = ArimaModel([1.0, -1.0], [1.0], 1.0)
    noise = ArimaModel([1.0], [1.0], 1.0)
    return UcarimaModel([trend, noise], ["trend", "irregular"])


# ---- ARIMA ----

def test_polynomial_acgf():
    np.testing.assert_allclose(polynomial_acgf([1.0, -1.0]), [2.0, -1.0])
    np.testing.assert_allclose(polynomial_acgf([1.0, 0.5, 0.25]), [1.3125, 0.625, 0.25])


def test_spectral_factorization_ma1():
    theta, var = spectral_factorization(np.array([3.0, -1.0]))
    np.testing.assert_allclose(theta, [1.0, THETA], atol=1e-10)
    assert var == pytest.approx(VAR, rel=1e-10)


def test_spectral_factorization_white_noise():
    theta, var = spectral_factorization(np.array([2.5, 1e-12]))
    np.testing.assert_array_equal(theta, [1.0])
    assert var == 2.5


def test_spectral_factorization_rejects_negative_spectrum():
    with pytest.raises(NumericError):
        spectral_factorization(np.array([1.0, 2.0]))


def test_arima_validation():
    with pytest.raises(ParameterError):
        ArimaModel([1.0], [1.0], -1.0)


def test_sum_of_models(local_level):
    reduced = local_level.reduced_model()
    np.testing.assert_allclose(reduced.ar, [1.0, -1.0])
    np.testing.assert_allclose(reduced.ma, [1.0, THETA], atol=1e-10)
    assert reduced.var == pytest.approx(VAR, rel=1e-10)


def test_sum_spectrum_equals_spectra_sum():
    a = ArimaModel([1.0, -0.5], [1.0, 0.3], 0.7)
    b = ArimaModel([1.0, 0.2], [1.0], 1.3)
    total = a + b
    freqs = np.linspace(0.1, np.pi, 7)
    np.testing.assert_allclose(total.spectrum(freqs), a.spectrum(freqs) + b.spectrum(freqs), rtol=1e-8)


def test_null_model_is_neutral():
    a = ArimaModel([1.0, -0.5], [1.0], 2.0)
    assert a.plus(ArimaModel.null()) is a
    assert ArimaModel.null().plus(a) is a
    assert ArimaModel.null().is_null


def test_spectrum_of_unit_root_is_infinite_at_zero():
    rw = ArimaModel([1.0, -1.0], [1.0], 1.0)
    assert np.isinf(rw.spectrum(0.0)[0])
    assert rw.spectrum(np.pi)[0] == pytest.approx(0.25)


# ---- UCARIMA ----

def test_normalize(local_level):
    factor = local_level.normalize()
    assert factor == pytest.approx(VAR, rel=1e-10)
    assert local_level.is_normalized
    assert local_level.component(0).var == pytest.approx(1.0 / VAR, rel=1e-10)
    assert local_level.reduced_model().var == pytest.approx(1.0, rel=1e-8)


def test_normalize_degenerate_model_warns():
    ucm = UcarimaModel([ArimaModel.null()], ["trend"])
    with pytest.warns(ModelWarning):
        assert ucm.normalize() == 0.0
    assert not ucm.is_normalized


def test_component_lookup(local_level):
    assert local_level.names == ["trend", "irregular"]
    assert local_level.component_by_name("irregular").var == 1.0
    assert local_level.component_by_name("cycle") is None


def test_names_must_match_components():
    with pytest.raises(ParameterError):
        UcarimaModel([ArimaModel()], ["a", "b"])


# ---- Wiener-Kolmogorov ----

def test_trend_weights_closed_form(local_level):
    wk = WienerKolmogorovEstimators(local_level)
    weights = wk.weights("trend", 60)
    w0 = 1.0 / np.sqrt(5.0)
    np.testing.assert_allclose(weights[:4], w0 * (-THETA) ** np.arange(4), rtol=1e-8)
    assert weights[0] + 2.0 * weights[1:].sum() == pytest.approx(1.0, abs=1e-8)


def test_irregular_weights_sum_to_zero(local_level):
    wk = WienerKolmogorovEstimators(local_level)
    weights = wk.weights("irregular", 60)
    assert weights[0] + 2.0 * weights[1:].sum() == pytest.approx(0.0, abs=1e-8)


def test_estimators_partition_the_series(local_level):
    """Trend and irregular filters add up to the identity filter."""
    wk = WienerKolmogorovEstimators(local_level)
    total = wk.weights(0, 40) + wk.weights(1, 40)
    np.testing.assert_allclose(total, np.r_[1.0, np.zeros(40)], atol=1e-8)


def test_gain_at_zero_frequency(local_level):
    wk = WienerKolmogorovEstimators(local_level)
    assert wk.gain("trend", 0.0)[0] == pytest.approx(1.0, rel=1e-8)
    assert wk.gain("irregular", 0.0)[0] == pytest.approx(0.0, abs=1e-12)


def test_estimator_spectrum(local_level):
    estimator = WienerKolmogorovEstimators(local_level).estimator("trend")
    freqs = np.array([0.5, 1.0, 2.0])
    expected = estimator.gain(freqs) ** 2 * estimator.reduced.spectrum(freqs)
    np.testing.assert_allclose(estimator.estimator_spectrum(freqs), expected)


def test_estimators_are_cached(local_level):
    wk = WienerKolmogorovEstimators(local_level)
    assert wk.estimator("trend") is wk.estimator(0)
    results = []
    threads = [threading.Thread(target=lambda: results.append(wk.estimator(1))) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert all(r is results[0] for r in results)


def test_unknown_estimator(local_level):
    wk = WienerKolmogorovEstimators(local_level)
    with pytest.raises(ParameterError):
        wk.estimator("seasonal")
    with pytest.raises(ParameterError):
        wk.estimator(5)


def test_non_invertible_reduced_model():
    wk = WienerKolmogorovEstimators(UcarimaModel([ArimaModel([1.0], [1.0, 1.0], 1.0)], ["signal"]))
    with pytest.raises(NumericError):
        wk.weights("signal", 10)
