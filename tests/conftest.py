"""
Test configuration and fixtures for the pull request updater.

Provides pytest fixtures shared by unit and integration tests. Builders and
fakes live in ``tests.fixtures.updater``.
"""

import io
from pathlib import Path

import pytest

from autoupdate.config import UpdaterConfig
from autoupdate.output import ActionOutput
from tests.fixtures.updater import FakeGateway, RecordingOutputs, make_config


@pytest.fixture
def config() -> UpdaterConfig:
    """Default configuration (filter ``all``, no retry sleep)."""
    return make_config()


@pytest.fixture
def gateway() -> FakeGateway:
    """Gateway reporting every pull request one commit behind."""
    return FakeGateway()


@pytest.fixture
def recorded_outputs() -> RecordingOutputs:
    return RecordingOutputs()


@pytest.fixture
def output_file(tmp_path: Path) -> Path:
    return tmp_path / "github_output"


@pytest.fixture
def outputs(output_file: Path) -> ActionOutput:
    """Action outputs written to a temporary file, commands to a buffer."""
    return ActionOutput(output_path=output_file, stream=io.StringIO())
