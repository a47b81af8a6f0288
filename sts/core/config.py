'''
Configuration management system for the STS Toolbox.

This module provides the configuration system for the STS Toolbox, allowing
users to customize numerical tolerances, the decomposition forecast horizon and
logging through a hierarchical configuration structure. It supports
configuration via environment variables, user-specific configuration files, and
runtime modifications.

The configuration system follows a layered approach:
1. Default configurations built into the package
2. User-specific configuration files
3. Environment variables (``STS_<SECTION>_<OPTION>``)
4. Runtime modifications

Key features:
- Type-safe configuration with validation
- Environment variable integration
- User-specific configuration files
- Runtime configuration modification and reset
'''

import os
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, get_type_hints

from .exceptions import ConfigurationError
from .types import LogLevel

# Set up module-level logger
logger = logging.getLogger("sts.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "STS_"
DEFAULT_CONFIG_FILENAME = "sts_config.json"
USER_CONFIG_DIR_ENV = "STS_CONFIG_DIR"


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    CORE = "core"
    NUMERICAL = "numerical"
    DECOMPOSITION = "decomposition"
    LOGGING = "logging"


@dataclass
class CoreConfig:
    """
    Core configuration settings for the STS Toolbox.

    Attributes:
        version: The version of the configuration format
        user_config_dir: Directory for user-specific configuration files
    """
    version: str = "1.0.0"
    user_config_dir: Path = field(default_factory=lambda: Path.home() / ".sts")


@dataclass
class NumericalConfig:
    """
    Numerical configuration settings for the STS Toolbox.

    Attributes:
        diffuse_variance: Initial variance given to non-stationary states by the
            Kalman filter (approximate diffuse initialization)
        variance_tolerance: Innovation variances below this value are treated
            as zero and the corresponding update is skipped
        root_tolerance: Tolerance used to discard unit-circle roots in the
            spectral factorization
        optimization_method: Optimizer passed to statsmodels when estimating
            structural models
        max_iterations: Maximum number of optimizer iterations
    """
    diffuse_variance: float = 1e7
    variance_tolerance: float = 1e-12
    root_tolerance: float = 1e-8
    optimization_method: str = "lbfgs"
    max_iterations: int = 500


@dataclass
class DecompositionConfig:
    """
    Decomposition configuration settings for the STS Toolbox.

    Attributes:
        forecast_horizon: Number of periods appended as missing values before
            smoothing (None means one full seasonal cycle, i.e. the frequency)
        wk_weights_length: Default half-length of Wiener-Kolmogorov filters
    """
    forecast_horizon: Optional[int] = None
    wk_weights_length: int = 36


@dataclass
class LoggingConfig:
    """
    Logging configuration settings for the STS Toolbox.

    Attributes:
        log_level: Default logging level
        log_file: Path to log file (None for no file logging)
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to console
        file_logging: Whether to log to file
    """
    log_level: LogLevel = "INFO"
    log_file: Optional[Path] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    file_logging: bool = False


@dataclass
class STSConfig:
    """
    Complete configuration for the STS Toolbox.

    Attributes:
        core: Core configuration settings
        numerical: Numerical configuration settings
        decomposition: Decomposition configuration settings
        logging: Logging configuration settings
    """
    core: CoreConfig = field(default_factory=CoreConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    decomposition: DecompositionConfig = field(default_factory=DecompositionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """
    Configuration manager for the STS Toolbox.

    This class manages the configuration settings for the STS Toolbox,
    providing methods to get, set, and reset configuration options.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the configuration manager has been initialized
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = STSConfig()
        self._initialized = False
        self._config_file = None
        self._modified_keys = set()
        self._configured_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        This method:
        1. Locates the user configuration directory
        2. Loads user configuration from file if available
        3. Applies environment variable overrides
        4. Sets up logging based on configuration
        5. Validates the configuration
        """
        if self._initialized:
            return

        self._locate_user_config()
        self._load_user_config()
        self._apply_env_overrides()
        self._setup_logging()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _locate_user_config(self) -> None:
        """
        Resolve the user configuration directory and file.

        The directory is only created when the configuration is saved.
        """
        env_config_dir = os.environ.get(USER_CONFIG_DIR_ENV)
        if env_config_dir:
            user_config_dir = Path(env_config_dir)
        else:
            user_config_dir = self._config.core.user_config_dir

        self._config.core.user_config_dir = user_config_dir
        self._config_file = user_config_dir / DEFAULT_CONFIG_FILENAME

    def _load_user_config(self) -> None:
        """
        Load user configuration from file.

        This method:
        1. Checks if the user configuration file exists
        2. Loads and parses the configuration file
        3. Updates the configuration with user settings
        """
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)

            self._update_from_dict(user_config)
            logger.debug(f"Loaded user configuration from {self._config_file}")
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load user configuration: {e}")

    def _apply_env_overrides(self) -> None:
        """
        Apply environment variable overrides to the configuration.

        Variables are named ``STS_<SECTION>_<OPTION>``; unknown sections and
        options are ignored.
        """
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX):
                continue

            # Remove prefix and split into section and option
            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)

            if len(parts) != 2:
                continue

            section, option = parts

            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section, None)
            if section_obj is None or not hasattr(section_obj, option):
                continue

            try:
                typed_value = self._convert(getattr(section_obj, option), value)
                setattr(section_obj, option, typed_value)
                self._configured_keys.add(f"{section}.{option}")
                logger.debug(f"Applied environment override: {env_var}={value}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to apply environment override {env_var}: {e}")

    @staticmethod
    def _convert(current_value: Any, value: Any) -> Any:
        """
        Convert a raw value to the type of the current option value.

        Args:
            current_value: The value currently held by the option
            value: The raw value (string from the environment or runtime value)

        Returns:
            The converted value
        """
        value_type = type(current_value)
        if current_value is None:
            # Optional options without a default take integers or None
            if value is None or (isinstance(value, str) and value.lower() in ("", "none")):
                return None
            if isinstance(value, str) and value.lstrip("-").isdigit():
                return int(value)
            return value
        if value_type is bool and isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'y')
        if value_type is Path and isinstance(value, str):
            return Path(value)
        if value_type is not type(value):
            return value_type(value)
        return value

    def _setup_logging(self) -> None:
        """
        Set up logging based on the configuration.

        This method configures the package logger with console and file
        handlers as specified. The logger is only touched when a logging
        option comes from the user configuration file or the environment, so
        a level set earlier through ``STS_LOG_LEVEL`` or ``sts.set_log_level``
        survives lazy initialization.
        """
        if not any(key.startswith("logging.") for key in self._configured_keys):
            return

        root_logger = logging.getLogger("sts")

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        if "logging.log_level" in self._configured_keys:
            log_level = getattr(logging, str(self._config.logging.log_level).upper(), None)
            if isinstance(log_level, int):
                root_logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt=self._config.logging.log_format,
            datefmt=self._config.logging.log_date_format
        )

        if self._config.logging.console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

        if self._config.logging.file_logging and self._config.logging.log_file:
            try:
                log_dir = Path(self._config.logging.log_file).parent
                log_dir.mkdir(parents=True, exist_ok=True)

                file_handler = logging.FileHandler(self._config.logging.log_file)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"Failed to set up file logging: {e}")

    def _validate_config(self) -> None:
        """Validate every configuration section."""
        for section in ConfigSection:
            self._validate_section(getattr(self._config, section.value), section.value)

    def _validate_section(self, section: Any, section_name: str) -> None:
        """
        Validate a configuration section.

        Args:
            section: The configuration section to validate
            section_name: The name of the section
        """
        hints = get_type_hints(type(section))

        for attr_name, attr_type in hints.items():
            value = getattr(section, attr_name)

            if value is None and "Optional" in str(attr_type):
                continue

            try:
                if attr_type == Path and isinstance(value, str):
                    setattr(section, attr_name, Path(value))
                elif attr_name == "log_level" and isinstance(value, str):
                    if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
                        logger.warning(f"Invalid log level: {value}, using INFO")
                        setattr(section, attr_name, "INFO")
                elif not isinstance(value, attr_type):
                    logger.warning(
                        f"Invalid type for {section_name}.{attr_name}: "
                        f"expected {attr_type}, got {type(value)}"
                    )
            except TypeError:
                # Complex types like Union, Optional, etc.
                pass

            self._validate_constraint(section, attr_name, value, section_name)

    def _validate_constraint(self, section: Any, attr_name: str, value: Any, section_name: str) -> None:
        """
        Validate a specific constraint on a configuration value.

        Args:
            section: The configuration section
            attr_name: The attribute name
            value: The attribute value
            section_name: The name of the section
        """
        if attr_name == "diffuse_variance" and value <= 0:
            logger.warning(f"Invalid diffuse_variance: {value}, must be positive")
            setattr(section, attr_name, 1e7)

        elif attr_name == "variance_tolerance" and (value <= 0 or value >= 1):
            logger.warning(f"Invalid variance_tolerance: {value}, must be between 0 and 1")
            setattr(section, attr_name, 1e-12)

        elif attr_name == "root_tolerance" and (value <= 0 or value >= 1):
            logger.warning(f"Invalid root_tolerance: {value}, must be between 0 and 1")
            setattr(section, attr_name, 1e-8)

        elif attr_name == "max_iterations" and value <= 0:
            logger.warning(f"Invalid max_iterations: {value}, must be positive")
            setattr(section, attr_name, 500)

        elif attr_name == "forecast_horizon" and value is not None and value < 0:
            logger.warning(f"Invalid forecast_horizon: {value}, using the series frequency")
            setattr(section, attr_name, None)

        elif attr_name == "wk_weights_length" and value <= 0:
            logger.warning(f"Invalid wk_weights_length: {value}, must be positive")
            setattr(section, attr_name, 36)

        elif attr_name == "optimization_method" and value not in (
            "lbfgs", "bfgs", "newton", "nm", "powell", "cg"
        ):
            logger.warning(f"Invalid optimization_method: {value}, using lbfgs")
            setattr(section, attr_name, "lbfgs")

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Update the configuration from a dictionary.

        Args:
            config_dict: Dictionary containing configuration values
        """
        for section_name, section_dict in config_dict.items():
            if not hasattr(self._config, section_name):
                logger.warning(f"Unknown configuration section: {section_name}")
                continue

            section = getattr(self._config, section_name)

            for option_name, option_value in section_dict.items():
                if not hasattr(section, option_name):
                    logger.warning(f"Unknown configuration option: {section_name}.{option_name}")
                    continue

                if isinstance(getattr(section, option_name), Path) and isinstance(option_value, str):
                    option_value = Path(option_value)

                setattr(section, option_name, option_value)
                self._configured_keys.add(f"{section_name}.{option_name}")

    def save_user_config(self) -> None:
        """
        Save the current configuration to the user configuration file.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        if not self._config_file:
            logger.warning("No user configuration file path available")
            return

        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.debug(f"Saved user configuration to {self._config_file}")
        except OSError as e:
            raise ConfigurationError(
                "Failed to save user configuration",
                config_file=self._config_file,
                issue=str(e)
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary representation of the configuration
        """
        result = {}

        for section in ConfigSection:
            section_obj = getattr(self._config, section.value)
            section_dict = {}
            for field_name in section_obj.__dataclass_fields__:
                value = getattr(section_obj, field_name)
                if isinstance(value, Path):
                    value = str(value)
                section_dict[field_name] = value
            result[section.value] = section_dict

        return result

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        if not self.has_option(section, option):
            return default
        return getattr(getattr(self._config, section), option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigurationError: If the section or option is not found, or the
                value cannot be converted to the option's type
        """
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        default_value = getattr(getattr(STSConfig(), section), option)
        current_value = getattr(section_obj, option)
        template = default_value if default_value is None else current_value

        try:
            typed_value = self._convert(template, value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")

        if section == "logging" and option == "log_level":
            logging.getLogger("sts").setLevel(getattr(logging, str(typed_value).upper()))

        logger.debug(f"Set configuration option: {section}.{option}={value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The configuration section to reset, or None to reset all
            option: The configuration option to reset, or None to reset the entire section

        Raises:
            ConfigurationError: If the section or option is not found
        """
        if section is None:
            self._config = STSConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            return

        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        default_config = STSConfig()

        if option is None:
            setattr(self._config, section, getattr(default_config, section))
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section: {section}")
            return

        section_obj = getattr(self._config, section)

        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )

        setattr(section_obj, option, getattr(getattr(default_config, section), option))
        self._modified_keys.discard(f"{section}.{option}")
        logger.debug(f"Reset configuration option: {section}.{option}")

    def get_modified_options(self) -> Dict[str, Any]:
        """
        Get a dictionary of modified configuration options.

        Returns:
            Dictionary of modified options with their current values
        """
        result: Dict[str, Dict[str, Any]] = {}

        for key in self._modified_keys:
            section, option = key.split(".", 1)
            result.setdefault(section, {})[option] = self.get(section, option)

        return result

    def is_modified(self, section: str, option: str) -> bool:
        """Check if a configuration option has been modified at runtime."""
        return f"{section}.{option}" in self._modified_keys

    def has_section(self, section: str) -> bool:
        """Check if a configuration section exists."""
        return section in {s.value for s in ConfigSection}

    def has_option(self, section: str, option: str) -> bool:
        """Check if a configuration option exists."""
        if not self.has_section(section):
            return False
        return option in getattr(self._config, section).__dataclass_fields__

    def get_sections(self) -> List[str]:
        """Get the list of configuration sections."""
        return [s.value for s in ConfigSection]

    def get_options(self, section: str) -> List[str]:
        """
        Get the list of options in a configuration section.

        Raises:
            ConfigurationError: If the section is not found
        """
        if not self.has_section(section):
            raise ConfigurationError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return list(getattr(self._config, section).__dataclass_fields__)

    def get_config_file(self) -> Optional[Path]:
        """Get the path to the user configuration file."""
        return self._config_file

    def get_full_config(self) -> STSConfig:
        """Get the complete configuration object."""
        return self._config


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """
    Initialize the configuration system.

    This function initializes the configuration manager, loading user
    configuration and applying environment variable overrides.
    """
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        value: The value to set

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """
    Reset configuration to default values.

    Args:
        section: The configuration section to reset, or None to reset all
        option: The configuration option to reset, or None to reset the entire section

    Raises:
        ConfigurationError: If the section or option is not found
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    """
    Get the configuration manager instance.

    Returns:
        The configuration manager instance
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager


def get_numerical_config() -> NumericalConfig:
    """Get the numerical configuration section."""
    return get_config_manager().get_full_config().numerical


def get_decomposition_config() -> DecompositionConfig:
    """Get the decomposition configuration section."""
    return get_config_manager().get_full_config().decomposition


def get_logging_config() -> LoggingConfig:
    """Get the logging configuration section."""
    return get_config_manager().get_full_config().logging


def to_dict() -> Dict[str, Any]:
    """Convert the current configuration to a dictionary."""
    return get_config_manager().to_dict()
