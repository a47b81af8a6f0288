# sts/__init__.py
"""
STS Toolbox - Structural Time Series Decomposition for Python

Decomposition of equally spaced time series into unobserved structural
components (trend, cycle, seasonal, irregular) with basic structural models.

The toolbox provides:
- Immutable, frequency-tagged time series (``sts.timeseries``)
- Basic structural models in state-space form, Kalman smoothing and
  maximum likelihood estimation through statsmodels
- Decomposition results with forecasts, additive or multiplicative, whose
  series are addressable by name
- Reduced (UCARIMA) forms and Wiener-Kolmogorov estimators of the components

This module serves as the main entry point for the STS Toolbox package.
"""

import os
import logging
import importlib
import warnings
from typing import Union

from .version import __version__, __author__, __license__, __dependencies__

# Set up package-wide logger
logger = logging.getLogger("sts")
logger.setLevel(logging.INFO)
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(_handler)

# Package metadata
__title__ = "STS Toolbox"
__description__ = "Structural Time Series Decomposition for Python"

# Import subpackages to make them available in the sts namespace
try:
    from . import core
    from . import timeseries
    from . import models
except ImportError as e:
    logger.error(f"Error importing STS Toolbox components: {e}")
    raise ImportError(
        "Failed to import STS Toolbox components. Please ensure the package "
        "is correctly installed. You can install it using: "
        "pip install sts-toolbox"
    ) from e


def _check_dependencies() -> None:
    """
    Check for required dependencies and their versions.

    Warns if dependencies are outdated.
    """
    outdated_packages = []
    for package, requirement in __dependencies__.items():
        min_version = requirement.lstrip(">=")
        imported = importlib.import_module(package)
        pkg_version = getattr(imported, "__version__", None)
        if pkg_version is None:
            logger.warning(f"Cannot determine version for {package}")
            continue
        try:
            current = tuple(int(p) for p in pkg_version.split(".")[:2])
            required = tuple(int(p) for p in min_version.split(".")[:2])
        except ValueError:
            continue
        if current < required:
            outdated_packages.append((package, pkg_version, min_version))

    for package, current, required in outdated_packages:
        warnings.warn(
            f"{package} version {current} is older than the recommended "
            f"version {required}. This may cause compatibility issues.",
            UserWarning
        )


def _initialize_logging() -> None:
    """Apply the ``STS_LOG_LEVEL`` environment variable."""
    log_level = os.environ.get("STS_LOG_LEVEL")
    if log_level:
        level = getattr(logging, log_level.upper(), None)
        if isinstance(level, int):
            logger.setLevel(level)
        else:
            logger.warning(f"Ignoring invalid STS_LOG_LEVEL value: {log_level}")


# Public API functions

def get_version() -> str:
    """
    Return the version of the STS Toolbox.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for the STS Toolbox.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


# Initialize the package
_check_dependencies()
_initialize_logging()

# Define what's available when using "from sts import *"
__all__ = [
    # Subpackages
    'core',
    'timeseries',
    'models',

    # Public functions
    'get_version',
    'set_log_level',

    # Version info
    '__version__',
    '__author__',
    '__license__'
]

logger.debug(f"STS Toolbox v{__version__} initialized successfully")
