"""
Statement Engine - Configuration Management

Configuration for the MT940 decoder and its ambient services (logging,
metrics). Values come from defaults, a YAML file or environment variables.
"""

import os
import yaml
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from pathlib import Path
from enum import Enum
import logging

from .exceptions import ConfigurationException

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Environment types for configuration."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Output format of the package log handler."""

    STRUCTURED = "structured"  # JSON lines
    SIMPLE = "simple"


@dataclass
class Config:
    """Main configuration class."""

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.STRUCTURED
    log_file: Optional[str] = None
    service_name: str = "statement-engine"

    # Prometheus counters for parsed statements/fields/errors
    metrics_enabled: bool = True

    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationException(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(f"Invalid YAML in configuration file: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationException(
                f"Configuration file must contain a mapping: {config_path}"
            )

        return cls._from_dict(config_data)

    @classmethod
    def load_from_env(cls, prefix: str = "STATEMENT_ENGINE_") -> "Config":
        """Load configuration from environment variables."""
        config = cls()

        try:
            config.environment = Environment(
                os.getenv(f"{prefix}ENVIRONMENT", config.environment.value)
            )
            config.log_level = LogLevel(
                os.getenv(f"{prefix}LOG_LEVEL", config.log_level.value).upper()
            )
            config.log_format = LogFormat(
                os.getenv(f"{prefix}LOG_FORMAT", config.log_format.value).lower()
            )
        except ValueError as e:
            raise ConfigurationException(f"Invalid environment configuration: {e}")

        config.debug = os.getenv(f"{prefix}DEBUG", str(config.debug)).lower() == "true"
        config.log_file = os.getenv(f"{prefix}LOG_FILE", config.log_file)
        config.metrics_enabled = (
            os.getenv(f"{prefix}METRICS_ENABLED", str(config.metrics_enabled)).lower()
            == "true"
        )

        return config

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        config = cls()

        try:
            if "environment" in data:
                config.environment = Environment(data["environment"])
            if "log_level" in data:
                config.log_level = LogLevel(str(data["log_level"]).upper())
            if "log_format" in data:
                config.log_format = LogFormat(str(data["log_format"]).lower())
        except ValueError as e:
            raise ConfigurationException(f"Invalid configuration value: {e}")

        for key in ["debug", "log_file", "service_name", "metrics_enabled"]:
            if key in data:
                setattr(config, key, data[key])

        unknown = sorted(set(data) - set(config.to_dict()))
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "log_level": self.log_level.value,
            "log_format": self.log_format.value,
            "log_file": self.log_file,
            "service_name": self.service_name,
            "metrics_enabled": self.metrics_enabled,
        }

    def validate(self) -> None:
        """Validate configuration settings."""
        errors = []

        if not isinstance(self.debug, bool):
            errors.append("debug must be a boolean")
        if not isinstance(self.metrics_enabled, bool):
            errors.append("metrics_enabled must be a boolean")
        if not self.service_name:
            errors.append("service_name must not be empty")
        if self.log_file is not None:
            log_dir = Path(self.log_file).parent
            if not log_dir.exists():
                errors.append(f"Log file directory does not exist: {log_dir}")

        if errors:
            raise ConfigurationException(
                f"Configuration validation failed: {'; '.join(errors)}"
            )

    @property
    def effective_log_level(self) -> int:
        """Numeric logging level, forced to DEBUG when debug is on."""
        if self.debug:
            return logging.DEBUG
        return getattr(logging, self.log_level.value)


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the process-wide configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = Config.load_from_env()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Replace the process-wide configuration (``None`` resets to the environment)."""
    global _config
    _config = config
