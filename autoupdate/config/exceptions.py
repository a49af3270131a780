"""Errors raised while building the updater configuration."""

from typing import Any


class ConfigurationError(Exception):
    """A setting could not be loaded; the action cannot start."""


class ConfigurationFileError(ConfigurationError):
    """The YAML settings file is missing, unreadable or not a mapping."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(message)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """A setting has a value the updater cannot use.

    ``validation_errors`` holds pydantic's error dictionaries, one per bad
    setting, so callers can report every problem at once.
    """

    def __init__(self, message: str, validation_errors: list[Any] | None = None):
        super().__init__(message)
        self.validation_errors = validation_errors or []


class ConfigurationMissingError(ConfigurationValidationError):
    """A required setting (usually ``GITHUB_TOKEN``) was not provided."""

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []
