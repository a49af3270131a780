"""Walk every open pull request against a base branch and update each one."""

import logging

from .interfaces import ForgeGateway
from .orchestrator import UpdateOrchestrator

logger = logging.getLogger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def branch_from_ref(ref: str | None) -> str | None:
    """Return the branch name of ``refs/heads/<branch>``, None for other refs."""
    if not ref or not ref.startswith(BRANCH_REF_PREFIX):
        return None
    return ref[len(BRANCH_REF_PREFIX) :] or None


class PullRequestSweeper:
    """Pagination driver over the open pull requests of one base branch.

    Pull requests are processed strictly in listing order (least recently
    updated first), one at a time.
    """

    def __init__(
        self, gateway: ForgeGateway, orchestrator: UpdateOrchestrator
    ) -> None:
        self.gateway = gateway
        self.orchestrator = orchestrator

    async def pulls(self, ref: str | None, repo_name: str, owner: str) -> int:
        """Update the open pull requests based on ``ref``.

        Args:
            ref: Base branch as ``refs/heads/<branch>``
            repo_name: Repository name
            owner: Repository owner login

        Returns:
            Number of pull requests updated; 0 when the inputs are invalid
        """
        branch = branch_from_ref(ref)
        if branch is None:
            logger.info(f"Ref '{ref}' is not a branch, skipping update.")
            return 0
        if not repo_name:
            logger.error(f"Invalid repository name '{repo_name}', skipping update.")
            return 0
        if not owner:
            logger.error(f"Invalid repository owner '{owner}', skipping update.")
            return 0

        logger.info(
            f"Fetching open pull requests based on '{branch}' in {owner}/{repo_name}"
        )

        updated = 0
        seen = 0
        async for page in self.gateway.list_open_pull_requests(owner, repo_name, branch):
            for pull in page:
                seen += 1
                logger.info(f"Checking pull request #{pull.number}")
                if await self.orchestrator.update(owner, pull):
                    updated += 1

        logger.info(
            f"Updated {updated} of {seen} pull request(s) based on '{branch}'."
        )
        return updated
