# sts/core/validation.py

"""
Validation utilities for the STS Toolbox.

This module provides the validation functions used to enforce constraints on
time series values, lag polynomials and model parameters.
Failures raise the toolbox exceptions (``DimensionError``, ``DataError``,
``ParameterError``) with informative context.
"""

from typing import Any, Optional, Sequence, Union

import numpy as np
import pandas as pd

from sts.core.exceptions import (
    raise_data_error, raise_dimension_error, raise_parameter_error
)

# Frequencies supported by time series (periods per year)
SUPPORTED_FREQUENCIES = (1, 2, 3, 4, 6, 12)


def validate_vector(
    vector: Any,
    expected_length: Optional[int] = None,
    vector_name: str = "vector",
    allow_nan: bool = True,
    allow_inf: bool = False
) -> np.ndarray:
    """Validate and convert an input to a 1-dimensional float vector.

    Column and row vectors are flattened. Sequences and pandas Series are
    converted to NumPy arrays.

    Args:
        vector: Values to validate
        expected_length: Expected length, or None for any
        vector_name: Name of the vector for error messages
        allow_nan: Whether NaN values (missing observations) are accepted
        allow_inf: Whether infinite values are accepted

    Returns:
        np.ndarray: The validated vector as a float64 copy

    Raises:
        TypeError: If the input is None or not numeric
        DimensionError: If the input is not 1-dimensional or has the wrong length
        DataError: If the input contains disallowed values
    """
    if vector is None:
        raise TypeError(f"{vector_name} cannot be None")

    if isinstance(vector, pd.Series):
        vector = vector.to_numpy()

    try:
        array = np.array(vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{vector_name} must be numeric: {e}") from e

    if array.ndim == 0:
        array = array.reshape(1)
    elif array.ndim == 2:
        if array.shape[0] == 1 or array.shape[1] == 1:
            array = array.ravel()
        else:
            raise_dimension_error(
                f"{vector_name} must be 1-dimensional or a column/row vector, got shape {array.shape}",
                array_name=vector_name,
                expected_shape="1D vector",
                actual_shape=array.shape
            )
    elif array.ndim != 1:
        raise_dimension_error(
            f"{vector_name} must be 1-dimensional, got {array.ndim} dimensions",
            array_name=vector_name,
            expected_shape="1D vector",
            actual_shape=array.shape
        )

    if expected_length is not None and len(array) != expected_length:
        raise_dimension_error(
            f"{vector_name} has length {len(array)}, expected {expected_length}",
            array_name=vector_name,
            expected_shape=f"vector of length {expected_length}",
            actual_shape=array.shape
        )

    return validate_numeric_array(array, vector_name, allow_nan=allow_nan, allow_inf=allow_inf)


def validate_numeric_array(
    array: np.ndarray,
    array_name: str = "array",
    allow_nan: bool = False,
    allow_inf: bool = False
) -> np.ndarray:
    """Validate that an array contains valid numeric values.

    Args:
        array: Array to validate
        array_name: Name of the array for error messages
        allow_nan: Whether to allow NaN values
        allow_inf: Whether to allow infinite values

    Returns:
        np.ndarray: The validated array

    Raises:
        TypeError: If array is not a NumPy array
        DataError: If array contains invalid values
    """
    if not isinstance(array, np.ndarray):
        raise TypeError(f"{array_name} must be a NumPy array, got {type(array).__name__}")

    if not allow_nan and np.isnan(array).any():
        raise_data_error(
            f"{array_name} contains NaN values",
            data_name=array_name,
            issue="contains NaN values",
            index=int(np.flatnonzero(np.isnan(array))[0])
        )

    if not allow_inf and np.isinf(array).any():
        raise_data_error(
            f"{array_name} contains infinite values",
            data_name=array_name,
            issue="contains infinite values",
            index=int(np.flatnonzero(np.isinf(array))[0])
        )

    return array


def validate_polynomial(
    coefficients: Union[Sequence[float], np.ndarray],
    polynomial_name: str = "polynomial"
) -> np.ndarray:
    """Validate a lag polynomial given in ascending powers of B.

    The constant coefficient must be 1.

    Args:
        coefficients: Polynomial coefficients
        polynomial_name: Name of the polynomial for error messages

    Returns:
        np.ndarray: The validated coefficients

    Raises:
        ParameterError: If the constant coefficient is not 1
    """
    coefs = validate_vector(coefficients, vector_name=polynomial_name, allow_nan=False)
    if coefs.size == 0 or abs(coefs[0] - 1.0) > 1e-12:
        raise_parameter_error(
            f"{polynomial_name} must start with a unit constant coefficient",
            param_name=polynomial_name,
            param_value=coefs[:1].tolist(),
            constraint="coefficient of B^0 == 1"
        )
    return coefs


def validate_parameter_bounds(
    value: float,
    param_name: str,
    lower_bound: Optional[float] = None,
    upper_bound: Optional[float] = None,
    lower_inclusive: bool = True,
    upper_inclusive: bool = True
) -> float:
    """Validate that a parameter value is within specified bounds.

    Args:
        value: Parameter value to validate
        param_name: Name of the parameter for error messages
        lower_bound: Lower bound, or None for no lower bound
        upper_bound: Upper bound, or None for no upper bound
        lower_inclusive: Whether the lower bound is inclusive
        upper_inclusive: Whether the upper bound is inclusive

    Returns:
        float: The validated parameter value

    Raises:
        ParameterError: If the parameter value is outside the specified bounds
    """
    if not np.isfinite(value):
        raise_parameter_error(
            f"Parameter {param_name} must be finite, got {value}",
            param_name=param_name,
            param_value=value,
            constraint="finite"
        )

    if lower_bound is not None:
        if lower_inclusive and value < lower_bound:
            raise_parameter_error(
                f"Parameter {param_name} must be >= {lower_bound}, got {value}",
                param_name=param_name,
                param_value=value,
                constraint=f">= {lower_bound}"
            )
        if not lower_inclusive and value <= lower_bound:
            raise_parameter_error(
                f"Parameter {param_name} must be > {lower_bound}, got {value}",
                param_name=param_name,
                param_value=value,
                constraint=f"> {lower_bound}"
            )

    if upper_bound is not None:
        if upper_inclusive and value > upper_bound:
            raise_parameter_error(
                f"Parameter {param_name} must be <= {upper_bound}, got {value}",
                param_name=param_name,
                param_value=value,
                constraint=f"<= {upper_bound}"
            )
        if not upper_inclusive and value >= upper_bound:
            raise_parameter_error(
                f"Parameter {param_name} must be < {upper_bound}, got {value}",
                param_name=param_name,
                param_value=value,
                constraint=f"< {upper_bound}"
            )

    return value


def validate_frequency(frequency: int, param_name: str = "frequency") -> int:
    """Validate a time series frequency (number of periods per year).

    Raises:
        ParameterError: If the frequency is not supported
    """
    if isinstance(frequency, bool) or not isinstance(frequency, (int, np.integer)) \
            or int(frequency) not in SUPPORTED_FREQUENCIES:
        raise_parameter_error(
            f"Unsupported {param_name}: {frequency}",
            param_name=param_name,
            param_value=frequency,
            constraint=f"one of {SUPPORTED_FREQUENCIES}"
        )
    return int(frequency)


def validate_non_negative_integer(value: int, param_name: str) -> int:
    """Validate a count argument.

    Raises:
        ParameterError: If the value is not an integer >= 0
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 0:
        raise_parameter_error(
            f"Parameter {param_name} must be a non-negative integer, got {value!r}",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 0"
        )
    return int(value)
