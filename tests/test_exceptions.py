'''
Tests for the exception and warning hierarchy.
'''

import pytest

from sts.core.exceptions import (
    ConfigurationError, DomainMismatchError, ModelWarning, NameNotFoundError, NumericWarning,
    ParameterError, STSError, STSWarning, TypeMismatchError, raise_domain_mismatch_error,
    raise_parameter_error, warn_model, warn_numeric
)


def test_message_includes_details_and_context():
    error = STSError("Something failed", details="more", context={"Key": "value"})
    text = str(error)
    assert text.startswith("Something failed")
    assert "Details: more" in text
    assert "Key: value" in text
    assert "Location: test_exceptions.py" in text


def test_parameter_error_context():
    with pytest.raises(ParameterError) as info:
        raise_parameter_error("Bad value", param_name="var", param_value=-1.0, constraint="var >= 0")
    assert info.value.context == {"Parameter": "var", "Value": -1.0, "Constraint": "var >= 0"}
    assert isinstance(info.value, STSError)


def test_domain_mismatch_error():
    with pytest.raises(DomainMismatchError) as info:
        raise_domain_mismatch_error("Cannot fit", source_domain="2020-01:12", issue="frequency mismatch")
    assert info.value.issue == "frequency mismatch"
    assert info.value.context["Source Domain"] == "2020-01:12"


def test_lookup_errors_keep_builtin_semantics():
    missing = NameNotFoundError("Unknown quantity 'x'", name="x", searched=["registry", "metadata"])
    assert isinstance(missing, KeyError)
    assert str(missing).startswith("Unknown quantity 'x'")
    assert "registry, metadata" in str(missing)

    mismatch = TypeMismatchError("Wrong type", name="x", expected_type=int, actual_type=str)
    assert isinstance(mismatch, TypeError)
    assert mismatch.context["Expected Type"] == "int"
    assert mismatch.context["Actual Type"] == "str"


def test_configuration_error():
    error = ConfigurationError("Bad setting", setting="numerical.max_iterations", value=0, issue="must be positive")
    assert error.context == {"Setting": "numerical.max_iterations", "Value": 0, "Issue": "must be positive"}


def test_warnings():
    with pytest.warns(ModelWarning) as record:
        warn_model("Did not converge", model_type="BSM", issue="non-convergence")
    assert record[0].message.context["Model Type"] == "BSM"
    with pytest.warns(NumericWarning):
        warn_numeric("Tiny variance", operation="normalize", value=0.0)
    assert issubclass(NumericWarning, STSWarning)
