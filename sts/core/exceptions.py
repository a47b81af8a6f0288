'''
Custom exception classes for the STS Toolbox.

This module defines the exception hierarchy used throughout the STS Toolbox.
Every error carries a primary message, optional details and a context dictionary
so that failures in the decomposition pipeline can be diagnosed without
re-running the computation.

Two families of errors are distinguished:

- construction-time errors (``ConfigurationError``, ``ModelSpecificationError``,
  ``ParameterError``) abort the creation of a result object; no partially built
  object is ever returned;
- lookup-time errors (``DomainMismatchError``, ``NameNotFoundError``,
  ``TypeMismatchError``) are raised per call and leave the result usable.
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np


class STSError(Exception):
    """Base exception class for all STS Toolbox errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the STSError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        # Add caller information for better debugging
        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame  # Avoid reference cycles

        super().__init__(full_message)


class ParameterError(STSError):
    """Exception raised for errors related to model parameters.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class DimensionError(STSError):
    """Exception raised for errors related to array dimensions.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class NumericError(STSError):
    """Exception raised for numerical computation errors.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error (e.g., "overflow", "singular")
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                # Truncate large arrays for readability
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type

        super().__init__(message, details, context_dict)


class DataError(STSError):
    """Exception raised for errors related to input data.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class ModelSpecificationError(STSError):
    """Exception raised for errors in model specification.

    Used when a structural model is declared with an impossible combination of
    components, such as a slope without a level.

    Attributes:
        model_type: The type of model being specified
        parameter: The component or option that is incorrectly specified
        valid_options: List of valid options for the parameter
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 parameter: Optional[str] = None,
                 valid_options: Optional[List[Any]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.parameter = parameter
        self.valid_options = valid_options

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if parameter:
            context_dict["Parameter"] = parameter
        if valid_options:
            context_dict["Valid Options"] = valid_options

        super().__init__(message, details, context_dict)


class EstimationError(STSError):
    """Exception raised for errors during model estimation.

    Attributes:
        model_type: The type of model being estimated
        estimation_method: The estimation method being used
        issue: Description of the issue that occurred during estimation
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 estimation_method: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.estimation_method = estimation_method
        self.issue = issue

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if estimation_method:
            context_dict["Estimation Method"] = estimation_method
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class ConfigurationError(STSError):
    """Exception raised for errors in configuration.

    This covers both the toolbox settings (unknown sections or options, invalid
    values) and inconsistent model configurations detected when a result is
    built, such as a state-position list that does not match the declared
    components. The latter is fatal: the result is never constructed.

    Attributes:
        config_file: The configuration file path
        setting: The setting that caused the error
        value: The invalid setting value
        issue: Description of the issue with the configuration
    """

    def __init__(self,
                 message: str,
                 config_file: Optional[Union[str, Path]] = None,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.config_file = config_file
        self.setting = setting
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if config_file:
            context_dict["Config File"] = str(config_file)
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class DomainMismatchError(STSError):
    """Exception raised when a series cannot be represented on a requested domain.

    Attributes:
        source_domain: Domain of the series being fitted
        requested_domain: Domain that was requested
        issue: Description of the mismatch
    """

    def __init__(self,
                 message: str,
                 source_domain: Optional[Any] = None,
                 requested_domain: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.source_domain = source_domain
        self.requested_domain = requested_domain
        self.issue = issue

        context_dict = context or {}
        if source_domain is not None:
            context_dict["Source Domain"] = str(source_domain)
        if requested_domain is not None:
            context_dict["Requested Domain"] = str(requested_domain)
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class NameNotFoundError(STSError, KeyError):
    """Exception raised when a named quantity cannot be resolved.

    Raised by ``get_data`` when neither the registry nor the metadata container
    knows the requested name.

    Attributes:
        name: The name that was requested
        searched: Where the name was looked up
    """

    def __init__(self,
                 message: str,
                 name: Optional[str] = None,
                 searched: Optional[List[str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.name = name
        self.searched = searched

        context_dict = context or {}
        if name:
            context_dict["Name"] = name
        if searched:
            context_dict["Searched"] = ", ".join(searched)

        super().__init__(message, details, context_dict)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the formatted message readable
        return Exception.__str__(self)


class TypeMismatchError(STSError, TypeError):
    """Exception raised when a resolved value is not of the expected type.

    Attributes:
        name: The name that was resolved
        expected_type: The type requested by the caller
        actual_type: The type of the resolved value
    """

    def __init__(self,
                 message: str,
                 name: Optional[str] = None,
                 expected_type: Optional[type] = None,
                 actual_type: Optional[type] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.name = name
        self.expected_type = expected_type
        self.actual_type = actual_type

        context_dict = context or {}
        if name:
            context_dict["Name"] = name
        if expected_type is not None:
            context_dict["Expected Type"] = expected_type.__name__
        if actual_type is not None:
            context_dict["Actual Type"] = actual_type.__name__

        super().__init__(message, details, context_dict)


class STSWarning(Warning):
    """Base warning class for all STS Toolbox warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class NumericWarning(STSWarning):
    """Warning for potential numerical issues.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


class ModelWarning(STSWarning):
    """Warning for potential model issues.

    Attributes:
        model_type: The type of model
        issue: Description of the model issue
        parameter: The parameter that may cause issues
        value: The parameter value that may cause issues
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 issue: Optional[str] = None,
                 parameter: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.issue = issue
        self.parameter = parameter
        self.value = value

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if issue:
            context_dict["Issue"] = issue
        if parameter:
            context_dict["Parameter"] = parameter
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_parameter_error(message: str,
                          param_name: Optional[str] = None,
                          param_value: Optional[Any] = None,
                          constraint: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ParameterError with consistent formatting.

    Raises:
        ParameterError: The formatted parameter error
    """
    raise ParameterError(message, param_name, param_value, constraint, details, context)


def raise_dimension_error(message: str,
                          array_name: Optional[str] = None,
                          expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                          actual_shape: Optional[Tuple[int, ...]] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionError with consistent formatting.

    Raises:
        DimensionError: The formatted dimension error
    """
    raise DimensionError(message, array_name, expected_shape, actual_shape, details, context)


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     index: Optional[Union[int, Tuple[int, ...], str]] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError with consistent formatting.

    Raises:
        DataError: The formatted data error
    """
    raise DataError(message, data_name, issue, index, details, context)


def raise_domain_mismatch_error(message: str,
                                source_domain: Optional[Any] = None,
                                requested_domain: Optional[Any] = None,
                                issue: Optional[str] = None,
                                details: Optional[str] = None,
                                context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DomainMismatchError with consistent formatting.

    Raises:
        DomainMismatchError: The formatted domain mismatch error
    """
    raise DomainMismatchError(message, source_domain, requested_domain, issue, details, context)


# Helper functions for issuing warnings with consistent formatting

def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting."""
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context)
    )


def warn_model(message: str,
               model_type: Optional[str] = None,
               issue: Optional[str] = None,
               parameter: Optional[str] = None,
               value: Optional[Any] = None,
               details: Optional[str] = None,
               context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a ModelWarning with consistent formatting."""
    warnings.warn(
        ModelWarning(message, model_type, issue, parameter, value, details, context)
    )
