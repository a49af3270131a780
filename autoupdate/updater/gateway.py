"""ForgeGateway implementation backed by the GitHub REST client."""

import logging
from collections.abc import AsyncIterator

from ..github.client import GitHubClient
from .interfaces import ForgeGateway
from .models import BranchInfo, ComparisonResult, MergeResult, PullRequestSnapshot

logger = logging.getLogger(__name__)


class GitHubGateway(ForgeGateway):
    """Translates GitHub JSON payloads into updater models."""

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def compare_refs(
        self, owner: str, repo: str, base: str, head: str
    ) -> ComparisonResult:
        data = await self.client.compare_commits(owner, repo, f"{base}...{head}")
        return ComparisonResult(behind_by=int(data.get("behind_by", 0)))

    async def get_branch(self, owner: str, repo: str, branch: str) -> BranchInfo:
        data = await self.client.get_branch(owner, repo, branch)
        return BranchInfo(
            name=data.get("name", branch), protected=bool(data.get("protected"))
        )

    async def merge_branch(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        commit_message: str | None = None,
    ) -> MergeResult:
        response = await self.client.merge(owner, repo, base, head, commit_message)
        data = response.data if isinstance(response.data, dict) else {}
        return MergeResult(status=response.status, sha=data.get("sha"))

    async def list_open_pull_requests(
        self, owner: str, repo: str, base: str
    ) -> AsyncIterator[list[PullRequestSnapshot]]:
        paginator = self.client.list_pulls(
            owner,
            repo,
            state="open",
            base=base,
            sort="updated",
            direction="asc",
        )
        async for page in paginator.pages():
            logger.debug(f"Fetched page of {len(page)} pull requests for {base}")
            yield [PullRequestSnapshot.from_api(item) for item in page]

    async def create_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> None:
        await self.client.create_issue_comment(owner, repo, number, body)
