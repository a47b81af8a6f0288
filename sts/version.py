# sts/version.py
"""
STS Toolbox Version Information

This module contains version information and package metadata for the STS
Toolbox. It is accessible programmatically via ``sts.__version__``.

The STS Toolbox follows semantic versioning (MAJOR.MINOR.PATCH).
"""

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "STS Toolbox"
__description__ = "Structural Time Series Decomposition for Python"
__author__ = "STS Toolbox Developers"
__license__ = "MIT"

# Package dependencies
__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
    "statsmodels": ">=0.14.0",
    "matplotlib": ">=3.8.0",
}
