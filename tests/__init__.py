"""
STS Toolbox Test Suite

This package contains tests for the STS Toolbox: time series utilities, the
metadata container and the named quantity registry, ARIMA/UCARIMA models,
structural models with their smoother and estimation, and the decomposition
results.
"""

import os

# Version information for the test package
__version__ = "1.0.0"


def is_ci_environment() -> bool:
    """Check if tests are running in a CI environment."""
    return os.environ.get("CI", "false").lower() == "true"


# Test configuration based on environment
SKIP_SLOW_TESTS = os.environ.get("SKIP_SLOW_TESTS", "false").lower() == "true"
