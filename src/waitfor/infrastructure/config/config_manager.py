"""Configuration manager for loading and validating .waitfor.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from waitfor.domain.config import AppConfig, ProbeConfig, RetryConfig
from waitfor.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".waitfor.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "WAITFOR_ATTEMPTS": ("retry", "max_attempts"),
    "WAITFOR_TIMEOUT": ("retry", "timeout"),
    "WAITFOR_DELAY": ("retry", "initial_delay"),
    "WAITFOR_VERBOSE": ("retry", "verbose"),
    "WAITFOR_DEBUG": ("retry", "debug"),
}


def _parse_env_value(name: str, raw: str) -> Any:
    """Parse an env override into the type its field expects"""
    if name == "WAITFOR_ATTEMPTS":
        # Left as-is when not an integer so that validation rejects it
        try:
            return int(raw)
        except ValueError:
            return raw
    if name in ("WAITFOR_TIMEOUT", "WAITFOR_DELAY"):
        if raw.strip().lower() in ("", "none", "null"):
            return None
        try:
            return float(raw)
        except ValueError:
            return raw
    return raw.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Manages configuration from .waitfor.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .waitfor.yml file (searched from current directory upwards)
    3. Environment variables (WAITFOR_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "retry": {
            "max_attempts": 5,
            "timeout": 15.0,
            "initial_delay": 1.0,
            "retry_on": [],
            "retry_all": False,
            "verbose": True,
            "debug": False,
        },
        "probes": {
            "connect_timeout": 1.0,
            "request_timeout": 5.0,
            "http_method": "GET",
            "expected_status": [],
        },
    }

    # File keys accepted as spellings of the canonical field names
    ALIASES = {
        "attempts": "max_attempts",
        "delay": "initial_delay",
        "rescue": "retry_on",
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .waitfor.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors)) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .waitfor.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Returns:
            Validated AppConfig instance

        Raises:
            ValidationError: If configuration is invalid
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top level must be a mapping")
                config_dict = self._merge_config(config_dict, self._canonicalize(file_config))
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)

        return AppConfig(**config_dict)

    def _canonicalize(self, file_config: Dict[str, Any]) -> Dict[str, Any]:
        """Rename alias keys in the retry section to their field names"""
        retry = file_config.get("retry")
        if isinstance(retry, dict):
            file_config = dict(file_config)
            file_config["retry"] = {self.ALIASES.get(k, k): v for k, v in retry.items()}
        return file_config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply WAITFOR_* environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        for name, (section, key) in ENV_OVERRIDES.items():
            raw = os.getenv(name)
            if raw is not None:
                config[section][key] = _parse_env_value(name, raw)
        return config

    def get_retry_config(self, **overrides: Any) -> RetryConfig:
        """Get retry configuration

        Args:
            **overrides: Field values replacing the loaded ones (None is ignored)

        Returns:
            Retry configuration model

        Raises:
            ConfigurationError: If the overrides are invalid
        """
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if not overrides:
            return self.config.retry
        merged = {**self.config.retry.model_dump(), **overrides}
        try:
            return RetryConfig(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid retry options: {e}") from e

    def get_probe_config(self) -> ProbeConfig:
        """Get probe configuration

        Returns:
            Probe configuration model
        """
        return self.config.probes
