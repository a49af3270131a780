"""Configuration loading.

Settings come from the workflow environment. A YAML file may provide a base
layer, with ``${VAR}`` / ``${VAR:default}`` substitution in its string
values; environment variables override file values.

The loading hierarchy is:
1. Default values from the pydantic model
2. Configuration file (YAML), when given
3. Environment variables
"""

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationFileError,
    ConfigurationMissingError,
    ConfigurationValidationError,
)
from .models import UpdaterConfig

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def substitute_env_vars(value: Any, env: Mapping[str, str]) -> Any:
    """Substitute ``${VAR}`` and ``${VAR:default}`` references in string values.

    Args:
        value: Raw value (strings, lists and dicts are walked recursively)
        env: Environment to resolve variables from

    Returns:
        Value with references substituted

    Raises:
        ConfigurationMissingError: If a referenced variable without default is unset
    """
    if isinstance(value, str):

        def replacer(match: re.Match[str]) -> str:
            var_name, default_value = match.group(1), match.group(2)
            env_value = env.get(var_name)
            if env_value is not None:
                return env_value
            if default_value is not None:
                return default_value
            raise ConfigurationMissingError(
                f"Required environment variable '{var_name}' not found",
                missing_fields=[var_name],
            )

        return _ENV_PATTERN.sub(replacer, value)
    if isinstance(value, dict):
        return {k: substitute_env_vars(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item, env) for item in value]
    return value


class ConfigurationLoader:
    """Builds ``UpdaterConfig`` instances from the supported sources."""

    def load_from_env(self, env: Mapping[str, str] | None = None) -> UpdaterConfig:
        """Load configuration from environment variables.

        Args:
            env: Variables to read; ``os.environ`` when omitted

        Returns:
            Validated configuration
        """
        source = os.environ if env is None else env
        return self.load_from_dict(dict(source))

    def load_from_dict(self, config_data: Mapping[str, Any]) -> UpdaterConfig:
        """Load configuration from a mapping.

        Keys may be the environment variable names or the field names.

        Raises:
            ConfigurationMissingError: If a required setting is missing
            ConfigurationValidationError: If a setting has an invalid value
        """
        try:
            return UpdaterConfig.model_validate(dict(config_data))
        except ValidationError as e:
            errors = e.errors()
            missing = [
                ".".join(str(part) for part in error["loc"])
                for error in errors
                if error["type"] == "missing"
            ]
            if missing:
                raise ConfigurationMissingError(
                    f"Missing required configuration: {', '.join(missing)}",
                    missing_fields=missing,
                ) from e
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}", validation_errors=errors
            ) from e

    def load_from_file(
        self, config_path: str | Path, env: Mapping[str, str] | None = None
    ) -> UpdaterConfig:
        """Load configuration from a YAML file, overridden by the environment.

        Args:
            config_path: Path to the YAML configuration file
            env: Variables used for substitution and overrides; ``os.environ``
                when omitted

        Returns:
            Validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = Path(config_path)
        source = os.environ if env is None else env

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Configuration file not found: {config_path}",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                file_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}", file_path=str(config_path)
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}", file_path=str(config_path)
            ) from e

        if file_data is None:
            file_data = {}
        if not isinstance(file_data, dict):
            raise ConfigurationFileError(
                "Configuration file must contain a mapping",
                file_path=str(config_path),
            )

        merged = substitute_env_vars(file_data, source)
        merged = self._normalize_keys(merged)
        for key, value in source.items():
            if key in _ENV_KEYS and value is not None and value.strip():
                merged[_ENV_KEYS[key]] = value

        return self.load_from_dict(merged)

    @staticmethod
    def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
        """Map environment-style keys onto field names so both spellings merge."""
        return {_ENV_KEYS.get(key, key): value for key, value in data.items()}


# Environment variable name -> field name
_ENV_KEYS: dict[str, str] = {
    field.alias: name
    for name, field in UpdaterConfig.model_fields.items()
    if field.alias is not None
}


def load_config(
    config_path: str | Path | None = None, env: Mapping[str, str] | None = None
) -> UpdaterConfig:
    """Load configuration from ``config_path`` if given, else from the environment."""
    loader = ConfigurationLoader()
    if config_path:
        return loader.load_from_file(config_path, env)
    return loader.load_from_env(env)
