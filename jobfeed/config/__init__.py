"""Configuration management module for the Job Feed Ingestor."""

from .duration import DurationParseError, parse_duration, parse_timedelta
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AdvancedConfig,
    AppConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    ScheduleConfig,
    SourceConfig,
    StoreConfig,
)

__all__ = [
    # Main loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Duration helpers
    "parse_duration",
    "parse_timedelta",
    "DurationParseError",
    # Configuration models
    "AppConfig",
    "SourceConfig",
    "StoreConfig",
    "ScheduleConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
