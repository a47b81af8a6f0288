'''
Tests for basic structural models: state-space form, reduced form, Kalman
smoothing and the concentrated likelihood.
'''

import numpy as np
import pytest
import statsmodels.api as sm

from sts.core.exceptions import ModelSpecificationError, NumericError, ParameterError
from sts.core.types import StructuralComponent
from sts.models.structural import (
    BasicStructuralModel, BsmParameters, ModelSpecification, Smoother, compute_likelihood
)
from sts.timeseries import TsData, TsPeriod

THETA = (np.sqrt(5.0) - 3.0) / 2.0

LOCAL_LEVEL = ModelSpecification(noise=True, cycle=False, level=True, slope=False, seasonal=False)


@pytest.fixture
def quarterly_bsm(bsm_params) -> BasicStructuralModel:
    spec = ModelSpecification(noise=True, cycle=False, level=True, slope=True, seasonal=True)
    return BasicStructuralModel(spec, bsm_params, 4)


@pytest.fixture
def local_level_series(rng) -> TsData:
    values = 5.0 + np.cumsum(rng.standard_normal(60)) * 0.3 + rng.standard_normal(60)
    return TsData(TsPeriod.from_year_position(12, 2015, 0), values)


# ---- Specification ----

def test_specification_components():
    spec = ModelSpecification(noise=True, cycle=True, level=True, slope=False, seasonal=True)
    assert spec.components == (
        StructuralComponent.NOISE, StructuralComponent.CYCLE,
        StructuralComponent.LEVEL, StructuralComponent.SEASONAL
    )
    assert spec.component_count == 4
    assert str(spec) == "BSM(noise, cycle, level, seasonal)"


def test_slope_requires_level():
    with pytest.raises(ModelSpecificationError):
        ModelSpecification(level=False, slope=True)


def test_parameter_validation():
    with pytest.raises(ParameterError):
        BsmParameters(noise_var=-1.0)
    with pytest.raises(ParameterError):
        BsmParameters(cycle_damping=1.0)
    with pytest.raises(ParameterError):
        BsmParameters(cycle_period=2.0)


def test_parameter_transform_round_trip(bsm_params):
    back = BsmParameters.inverse_transform(bsm_params.transform())
    np.testing.assert_allclose(back.to_array(), bsm_params.to_array(), rtol=1e-12)


def test_scaled_parameters(bsm_params):
    scaled = bsm_params.scaled(2.0)
    assert scaled.noise_var == pytest.approx(1.0)
    assert scaled.cycle_damping == bsm_params.cycle_damping


# ---- State-space form ----

def test_layout(quarterly_bsm):
    assert quarterly_bsm.state_dim == 6
    assert quarterly_bsm.cmp_positions() == [0, 1, 2, 3]
    assert quarterly_bsm.block(StructuralComponent.SEASONAL) == (3, 3)
    np.testing.assert_array_equal(quarterly_bsm.design(), [1, 1, 0, 1, 0, 0])
    assert quarterly_bsm.diffuse_dim == 5


def test_transition(quarterly_bsm):
    t = quarterly_bsm.transition()
    assert t[0, 0] == 0.0
    assert t[1, 1] == 1.0 and t[1, 2] == 1.0 and t[2, 2] == 1.0
    np.testing.assert_array_equal(t[3, 3:6], [-1.0, -1.0, -1.0])
    assert t[4, 3] == 1.0 and t[5, 4] == 1.0


def test_state_covariance(quarterly_bsm, bsm_params):
    q = np.diag(quarterly_bsm.state_cov())
    np.testing.assert_allclose(q, [bsm_params.noise_var, bsm_params.level_var, bsm_params.slope_var,
                                   bsm_params.seasonal_var, 0.0, 0.0])


def test_cycle_transition_is_damped_rotation():
    spec = ModelSpecification(noise=True, cycle=True, level=False, slope=False, seasonal=False)
    params = BsmParameters(cycle_damping=0.9, cycle_period=12.0)
    model = BasicStructuralModel(spec, params, 12)
    offset, size = model.block(StructuralComponent.CYCLE)
    block = model.transition()[offset:offset + size, offset:offset + size]
    np.testing.assert_allclose(np.abs(np.linalg.eigvals(block)), [0.9, 0.9])
    a0, p0 = model.initial_state()
    assert p0[offset, offset] == pytest.approx(params.cycle_var / (1.0 - 0.81))


def test_seasonal_requires_sub_annual_frequency(seasonal_spec):
    with pytest.raises(ModelSpecificationError):
        BasicStructuralModel(seasonal_spec, BsmParameters(), 1)


def test_unsupported_frequency(seasonal_spec):
    with pytest.raises(ParameterError):
        BasicStructuralModel(seasonal_spec, BsmParameters(), 5)


# ---- Reduced form ----

def test_reduced_form_of_local_level():
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=1.0, level_var=1.0), 12)
    ucm = model.compute_reduced_model()
    assert ucm.names == ["trend", "irregular"]
    reduced = ucm.reduced_model()
    np.testing.assert_allclose(reduced.ar, [1.0, -1.0])
    np.testing.assert_allclose(reduced.ma, [1.0, THETA], atol=1e-10)


def test_reduced_form_components(quarterly_bsm):
    ucm = quarterly_bsm.compute_reduced_model()
    assert ucm.names == ["trend", "seasonal", "irregular"]
    np.testing.assert_allclose(ucm.component_by_name("trend").ar, [1.0, -2.0, 1.0])
    np.testing.assert_allclose(ucm.component_by_name("seasonal").ar, [1.0, 1.0, 1.0, 1.0])


def test_reduced_form_with_cycle():
    spec = ModelSpecification(noise=True, cycle=True, level=True, slope=False, seasonal=False)
    model = BasicStructuralModel(spec, BsmParameters(cycle_damping=0.7, cycle_period=8.0), 12)
    ucm = model.compute_reduced_model()
    cycle = ucm.component_by_name("cycle")
    rho, lam = 0.7, 2.0 * np.pi / 8.0
    np.testing.assert_allclose(cycle.ar, [1.0, -2.0 * rho * np.cos(lam), rho * rho])
    freqs = np.linspace(0.1, 3.0, 5)
    expected = ucm.component_by_name("trend").spectrum(freqs) + cycle.spectrum(freqs) \
        + ucm.component_by_name("irregular").spectrum(freqs)
    np.testing.assert_allclose(ucm.reduced_model().spectrum(freqs), expected, rtol=1e-8)


# ---- Smoother ----

def test_smoothed_components_add_up_to_observations(monthly_series, seasonal_spec, bsm_params):
    model = BasicStructuralModel(seasonal_spec, bsm_params, 12)
    srslts = Smoother().smooth(monthly_series, model)
    total = sum(srslts.component(p) for p in model.cmp_positions())
    np.testing.assert_allclose(total, monthly_series.values, atol=1e-5)


def test_smoother_forecasts_local_level(local_level_series):
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=1.0, level_var=0.1), 12)
    n = local_level_series.length
    srslts = Smoother().smooth(local_level_series.extend(0, 6), model)
    level = srslts.component(1)
    noise = srslts.component(0)
    np.testing.assert_allclose(level[n:], level[n - 1], rtol=1e-10)
    np.testing.assert_allclose(noise[n:], 0.0, atol=1e-12)
    variances = srslts.component_variance(1)[n - 1:]
    assert np.all(np.diff(variances) > 0)
    assert srslts.filtering.nobs == n


def test_smoother_matches_statsmodels(local_level_series):
    params = BsmParameters(noise_var=1.0, level_var=0.1)
    model = BasicStructuralModel(LOCAL_LEVEL, params, 12)
    srslts = Smoother().smooth(local_level_series, model)

    mod = sm.tsa.UnobservedComponents(local_level_series.to_numpy(), level="llevel")
    res = mod.smooth([params.noise_var, params.level_var])
    np.testing.assert_allclose(srslts.component(1), res.smoothed_state[0], rtol=1e-4, atol=1e-4)


def test_smoother_handles_missing_values(local_level_series):
    values = local_level_series.to_numpy()
    values[[10, 11, 30]] = np.nan
    data = TsData(local_level_series.start, values)
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=1.0, level_var=0.1), 12)
    srslts = Smoother().smooth(data, model)
    assert srslts.filtering.nobs == data.length - 3
    assert np.all(np.isfinite(srslts.states))
    assert srslts.component(0)[10] == pytest.approx(0.0, abs=1e-12)


def test_smoother_rejects_arrays(quarterly_bsm):
    with pytest.raises(TypeError):
        Smoother().smooth(np.zeros(10), quarterly_bsm)


def test_component_position_out_of_range(local_level_series):
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(), 12)
    srslts = Smoother().smooth(local_level_series, model)
    with pytest.raises(ParameterError):
        srslts.component(2)
    assert np.all(srslts.component_stdev(1) >= 0.0)


# ---- Likelihood ----

def test_likelihood_basics(local_level_series):
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=1.0, level_var=0.1), 12)
    likelihood = compute_likelihood(local_level_series, model, nparams=2)
    n = local_level_series.length
    assert likelihood.nobs == n
    assert likelihood.ndiffuse == 1
    assert likelihood.neffective == n - 1
    assert np.isfinite(likelihood.loglikelihood)
    assert likelihood.aic == pytest.approx(-2.0 * likelihood.loglikelihood + 4.0)
    assert likelihood.bic == pytest.approx(-2.0 * likelihood.loglikelihood + 2.0 * np.log(n - 1))
    assert likelihood.ser() == pytest.approx(np.sqrt(likelihood.sigma2))


def test_residuals_skip_diffuse_part(local_level_series):
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=1.0, level_var=0.1), 12)
    residuals = compute_likelihood(local_level_series, model).residuals
    assert residuals.length == local_level_series.length - 1
    assert residuals.start == local_level_series.start + 1
    # Standardized residuals have unit variance once scaled by sigma2
    likelihood = compute_likelihood(local_level_series, model)
    assert np.mean(residuals.values ** 2) == pytest.approx(likelihood.sigma2, rel=1e-10)


def test_likelihood_concentrates_the_scale(local_level_series):
    params = BsmParameters(noise_var=1.0, level_var=0.1)
    model = BasicStructuralModel(LOCAL_LEVEL, params, 12)
    base = compute_likelihood(local_level_series, model)
    scaled = compute_likelihood(local_level_series, model.with_params(params.scaled(3.0)))
    assert scaled.loglikelihood == pytest.approx(base.loglikelihood, abs=1e-4)
    assert scaled.sigma2 == pytest.approx(base.sigma2 / 3.0, rel=1e-5)


def test_likelihood_prefers_the_true_ratio(rng):
    values = np.cumsum(rng.standard_normal(200)) + 3.0 * rng.standard_normal(200)
    y = TsData(TsPeriod.from_year_position(12, 2000, 0), values)
    good = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=9.0, level_var=1.0), 12)
    bad = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(noise_var=0.01, level_var=1.0), 12)
    assert compute_likelihood(y, good).loglikelihood > compute_likelihood(y, bad).loglikelihood


def test_likelihood_requires_observations():
    y = TsData(TsPeriod.from_year_position(12, 2020, 0), [1.0])
    model = BasicStructuralModel(LOCAL_LEVEL, BsmParameters(), 12)
    with pytest.raises(NumericError):
        compute_likelihood(y, model)
