"""Configuration for the pull request updater.

Example usage:
    from autoupdate.config import load_config

    config = load_config()
    if config.dry_run:
        ...
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationMissingError,
    ConfigurationValidationError,
)
from .loader import ConfigurationLoader, load_config, substitute_env_vars
from .models import (
    ConflictAction,
    PullRequestFilter,
    ReadyState,
    UpdaterConfig,
    parse_list,
)

__all__ = [
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationMissingError",
    "ConfigurationValidationError",
    "ConflictAction",
    "PullRequestFilter",
    "ReadyState",
    "UpdaterConfig",
    "load_config",
    "parse_list",
    "substitute_env_vars",
]
