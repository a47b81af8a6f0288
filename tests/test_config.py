'''
Tests for the configuration system.
'''

import json
import logging

import pytest

import sts
from sts.core import config as config_module
from sts.core.config import (
    ConfigManager, get_config, get_config_manager, get_decomposition_config,
    get_numerical_config, reset_config, set_config
)
from sts.core.exceptions import ConfigurationError
from tests.conftest import make_results


@pytest.fixture
def package_logger():
    """The package logger, with its level and handlers restored afterwards."""
    package = logging.getLogger("sts")
    level, handlers = package.level, package.handlers[:]
    yield package
    for handler in package.handlers[:]:
        package.removeHandler(handler)
    for handler in handlers:
        package.addHandler(handler)
    package.setLevel(level)


def test_defaults():
    assert get_config("numerical", "diffuse_variance") == 1e7
    assert get_config("numerical", "optimization_method") == "lbfgs"
    assert get_config("decomposition", "forecast_horizon") is None
    assert get_config("decomposition", "unknown", "fallback") == "fallback"
    assert get_config("unknown", "option") is None


def test_set_and_reset():
    set_config("numerical", "max_iterations", "250")
    assert get_config("numerical", "max_iterations") == 250
    assert get_config_manager().is_modified("numerical", "max_iterations")
    reset_config("numerical", "max_iterations")
    assert get_config("numerical", "max_iterations") == 500
    assert not get_config_manager().is_modified("numerical", "max_iterations")


def test_optional_option():
    set_config("decomposition", "forecast_horizon", 6)
    assert get_decomposition_config().forecast_horizon == 6
    set_config("decomposition", "forecast_horizon", None)
    assert get_config("decomposition", "forecast_horizon") is None


def test_reset_section():
    set_config("numerical", "root_tolerance", 1e-6)
    set_config("decomposition", "wk_weights_length", 12)
    reset_config("numerical")
    assert get_numerical_config().root_tolerance == 1e-8
    assert get_config("decomposition", "wk_weights_length") == 12
    reset_config()
    assert get_config("decomposition", "wk_weights_length") == 36


def test_invalid_settings():
    with pytest.raises(ConfigurationError):
        set_config("unknown", "option", 1)
    with pytest.raises(ConfigurationError):
        set_config("numerical", "unknown", 1)
    with pytest.raises(ConfigurationError):
        set_config("numerical", "max_iterations", "many")
    with pytest.raises(ConfigurationError):
        reset_config("unknown")


def test_sections_and_options():
    manager = get_config_manager()
    assert manager.get_sections() == ["core", "numerical", "decomposition", "logging"]
    assert "forecast_horizon" in manager.get_options("decomposition")
    assert manager.get_options("core") == ["version", "user_config_dir"]
    assert manager.get_options("decomposition") == ["forecast_horizon", "wk_weights_length"]
    with pytest.raises(ConfigurationError):
        manager.get_options("unknown")


def test_environment_overrides(monkeypatch, tmp_path, package_logger):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("STS_NUMERICAL_MAX_ITERATIONS", "42")
    monkeypatch.setenv("STS_DECOMPOSITION_FORECAST_HORIZON", "3")
    monkeypatch.setenv("STS_LOGGING_CONSOLE_LOGGING", "no")
    manager = ConfigManager()
    manager.initialize()
    assert manager.get("numerical", "max_iterations") == 42
    assert manager.get("decomposition", "forecast_horizon") == 3
    assert manager.get("logging", "console_logging") is False
    assert manager.get_config_file().parent == tmp_path


def test_invalid_values_are_replaced(monkeypatch, tmp_path):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("STS_NUMERICAL_OPTIMIZATION_METHOD", "simplex")
    monkeypatch.setenv("STS_DECOMPOSITION_FORECAST_HORIZON", "-2")
    manager = ConfigManager()
    manager.initialize()
    assert manager.get("numerical", "optimization_method") == "lbfgs"
    assert manager.get("decomposition", "forecast_horizon") is None


def test_user_config_file_round_trip(monkeypatch, tmp_path, package_logger):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    manager = ConfigManager()
    manager.initialize()
    manager.set("decomposition", "wk_weights_length", 20)
    manager.save_user_config()
    saved = json.loads((tmp_path / "sts_config.json").read_text())
    assert saved["decomposition"]["wk_weights_length"] == 20

    reloaded = ConfigManager()
    reloaded.initialize()
    assert reloaded.get("decomposition", "wk_weights_length") == 20


def test_initialization_keeps_runtime_log_level(monkeypatch, tmp_path, package_logger):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    sts.set_log_level("DEBUG")
    handlers = package_logger.handlers[:]
    ConfigManager().initialize()
    assert package_logger.level == logging.DEBUG
    assert package_logger.handlers == handlers


def test_first_decomposition_keeps_runtime_log_level(monkeypatch, tmp_path, package_logger,
                                                     monthly_series, seasonal_spec, bsm_params):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(config_module._config_manager, "_initialized", False)
    sts.set_log_level("DEBUG")
    make_results(monthly_series, seasonal_spec, bsm_params)
    assert config_module._config_manager._initialized
    assert package_logger.level == logging.DEBUG


def test_configured_log_level_is_applied(monkeypatch, tmp_path, package_logger):
    monkeypatch.setenv("STS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("STS_LOGGING_LOG_LEVEL", "WARNING")
    sts.set_log_level("DEBUG")
    manager = ConfigManager()
    manager.initialize()
    assert manager.get("logging", "log_level") == "WARNING"
    assert package_logger.level == logging.WARNING
