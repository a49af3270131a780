"""Action outputs and the process-level failure channel.

Outputs are appended to the file named by ``GITHUB_OUTPUT`` so later
workflow steps can read them. Failures are emitted as ``::error::``
workflow commands and make the process exit non-zero.
"""

import logging
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, TextIO

logger = logging.getLogger(__name__)


class Output(str, Enum):
    """Names of the outputs the action sets."""

    CONFLICTED = "conflicted"
    UPDATED = "updated"

    def __str__(self) -> str:
        return self.value


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_output_value(value: Any) -> str:
    """Render an output value the way workflow expressions expect it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ActionOutput:
    """Collects outputs and failure reports for one invocation."""

    def __init__(
        self,
        output_path: str | Path | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize the output sink.

        Args:
            output_path: File outputs are appended to; ``GITHUB_OUTPUT`` when omitted
            stream: Where workflow commands are written; stdout when omitted
        """
        if output_path is None:
            output_path = os.environ.get("GITHUB_OUTPUT") or None
        self.output_path = Path(output_path) if output_path else None
        self.stream = stream
        self.values: dict[str, Any] = {}
        self.failures: list[str] = []

    @property
    def failed(self) -> bool:
        return bool(self.failures)

    def set_output(self, name: str | Output, value: Any) -> None:
        """Record an output and append it to the outputs file."""
        key = str(name)
        self.values[key] = value
        rendered = format_output_value(value)
        logger.debug(f"Setting output {key}={rendered}")

        if self.output_path is None:
            return
        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(f"{key}={rendered}\n")

    def set_failed(self, message: str) -> None:
        """Report a failure; the process will exit with status 1."""
        self.failures.append(message)
        logger.error(message)
        stream = self.stream or sys.stdout
        stream.write(f"::error::{_escape_command_data(message)}\n")
        stream.flush()
