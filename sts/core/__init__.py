"""
STS Toolbox Core Module

This module provides the foundation shared by the rest of the toolbox: the
exception hierarchy, the layered configuration, type definitions, input
validation, parameter containers, the hierarchical metadata container, the
named quantity registry and the result containers.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("sts.core")

from .exceptions import (
    STSError,
    ParameterError,
    DimensionError,
    NumericError,
    DataError,
    ModelSpecificationError,
    EstimationError,
    ConfigurationError,
    DomainMismatchError,
    NameNotFoundError,
    TypeMismatchError,
    STSWarning,
    NumericWarning,
    ModelWarning
)

from .config import (
    get_config,
    set_config,
    reset_config,
    get_config_manager
)

from .types import (
    ComponentInformation,
    ComponentType,
    DecompositionMode,
    StructuralComponent
)

from .information import InformationSet
from .mapper import InformationMapper, Mapper
from .base import ProcessingResults, SaResults
from .results import ModelResult, SeriesDecomposition

__all__ = [
    # Exceptions
    "STSError",
    "ParameterError",
    "DimensionError",
    "NumericError",
    "DataError",
    "ModelSpecificationError",
    "EstimationError",
    "ConfigurationError",
    "DomainMismatchError",
    "NameNotFoundError",
    "TypeMismatchError",
    "STSWarning",
    "NumericWarning",
    "ModelWarning",

    # Configuration
    "get_config",
    "set_config",
    "reset_config",
    "get_config_manager",

    # Types
    "ComponentInformation",
    "ComponentType",
    "DecompositionMode",
    "StructuralComponent",

    # Containers and results
    "InformationSet",
    "InformationMapper",
    "Mapper",
    "ProcessingResults",
    "SaResults",
    "ModelResult",
    "SeriesDecomposition",
]
