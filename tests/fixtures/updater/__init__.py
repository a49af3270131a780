"""
Test fixtures for the pull request updater.

Factories for configuration and pull request payloads, plus in-memory
collaborators standing in for GitHub.
"""

from .factories import BASE_ENV, make_config, make_pull, make_pull_data
from .fakes import FakeGateway, RecordingOutputs

__all__ = [
    "BASE_ENV",
    "FakeGateway",
    "RecordingOutputs",
    "make_config",
    "make_pull",
    "make_pull_data",
]
