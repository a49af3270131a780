"""Interfaces between the updater core and the forge API.

The core only talks to GitHub through ``ForgeGateway``, which lets the
eligibility engine, merge executor and sweeper be tested with in-memory fakes.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import Any

from .models import (
    BranchInfo,
    ComparisonResult,
    MergeResult,
    PullRequestSnapshot,
)

# Receives action outputs, e.g. ("conflicted", True)
OutputSetter = Callable[[str, Any], None]


class ForgeGateway(ABC):
    """Capabilities the updater needs from the code forge."""

    @abstractmethod
    async def compare_refs(
        self, owner: str, repo: str, base: str, head: str
    ) -> ComparisonResult:
        """Compare ``base...head`` in ``owner/repo``."""

    @abstractmethod
    async def get_branch(self, owner: str, repo: str, branch: str) -> BranchInfo:
        """Fetch branch metadata, including protection status."""

    @abstractmethod
    async def merge_branch(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        commit_message: str | None = None,
    ) -> MergeResult:
        """Merge ``head`` into ``base``.

        Raises:
            GitHubError: With ``status_code`` 403 when forbidden, 409 on a
                merge conflict, anything else for transient failures
        """

    @abstractmethod
    def list_open_pull_requests(
        self, owner: str, repo: str, base: str
    ) -> AsyncIterator[list[PullRequestSnapshot]]:
        """Stream pages of open pull requests targeting ``base``, least
        recently updated first."""

    @abstractmethod
    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        """Comment on a pull request."""
