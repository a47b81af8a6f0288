'''
Pytest configuration and fixtures for the STS Toolbox test suite.

This module provides common fixtures used across the test suite: a seeded
random generator, simulated structural series, fitted models with known
hyper-parameters and decomposition results built from them.
'''

from typing import Optional

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from hypothesis import strategies as st

from sts.core.config import reset_config
from sts.models.structural import (
    BasicStructuralModel, BsmMonitor, BsmParameters, ModelSpecification, StsResults
)
from sts.timeseries import TsData, TsPeriod


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


def simulate_bsm(rng: np.random.Generator,
                 n: int,
                 frequency: int,
                 level_var: float = 0.1,
                 seasonal_var: float = 0.05,
                 noise_var: float = 0.5,
                 slope_var: Optional[float] = None,
                 start_level: float = 10.0) -> np.ndarray:
    """Simulate level + (slope) + dummy seasonal + noise."""
    level = start_level
    slope = 0.0
    seasonal = list(rng.standard_normal(frequency - 1)) if frequency > 1 else []
    y = np.empty(n)
    for t in range(n):
        s = seasonal[0] if seasonal else 0.0
        y[t] = level + s + np.sqrt(noise_var) * rng.standard_normal()
        if slope_var is not None:
            level += slope
            slope += np.sqrt(slope_var) * rng.standard_normal()
        level += np.sqrt(level_var) * rng.standard_normal()
        if seasonal:
            new = -sum(seasonal) + np.sqrt(seasonal_var) * rng.standard_normal()
            seasonal = [new] + seasonal[:-1]
    return y


@pytest.fixture
def monthly_series(rng: np.random.Generator) -> TsData:
    """Simulated monthly series of length 48 starting in January 2020."""
    values = simulate_bsm(rng, 48, 12)
    return TsData(TsPeriod.from_year_position(12, 2020, 0), values)


@pytest.fixture
def quarterly_series(rng: np.random.Generator) -> TsData:
    """Simulated quarterly series of length 40 with a stochastic slope."""
    values = simulate_bsm(rng, 40, 4, level_var=0.05, slope_var=0.01)
    return TsData(TsPeriod.from_year_position(4, 2010, 0), values)


@pytest.fixture
def positive_series(rng: np.random.Generator) -> TsData:
    """Strictly positive monthly series of length 24."""
    values = np.exp(simulate_bsm(rng, 24, 12, level_var=0.001, seasonal_var=0.001,
                                 noise_var=0.002, start_level=4.0) * 0.25)
    return TsData(TsPeriod.from_year_position(12, 2018, 0), values)


# ---- Model Fixtures ----

@pytest.fixture
def seasonal_spec() -> ModelSpecification:
    """Level, seasonal and noise (no slope, no cycle)."""
    return ModelSpecification(noise=True, cycle=False, level=True, slope=False, seasonal=True)


@pytest.fixture
def bsm_params() -> BsmParameters:
    return BsmParameters(noise_var=0.5, level_var=0.1, slope_var=0.01, seasonal_var=0.05)


def make_results(y: TsData,
                 spec: ModelSpecification,
                 params: Optional[BsmParameters] = None,
                 **kwargs) -> StsResults:
    """Decomposition of y by a model with known hyper-parameters."""
    model = BasicStructuralModel(spec, params or BsmParameters(), y.frequency)
    return StsResults(y, BsmMonitor.from_model(model, y), **kwargs)


@pytest.fixture
def monthly_results(monthly_series: TsData, seasonal_spec: ModelSpecification,
                    bsm_params: BsmParameters) -> StsResults:
    return make_results(monthly_series, seasonal_spec, bsm_params)


@pytest.fixture(autouse=True)
def clean_config():
    """Restore the default configuration after every test."""
    yield
    reset_config()


# ---- Hypothesis strategies ----

spec_strategy = st.builds(
    lambda noise, cycle, level, slope, seasonal: ModelSpecification(
        noise=noise, cycle=cycle, level=level, slope=slope and level, seasonal=seasonal
    ),
    st.booleans(), st.booleans(), st.booleans(), st.booleans(), st.booleans()
).filter(lambda spec: spec.component_count > 0)
