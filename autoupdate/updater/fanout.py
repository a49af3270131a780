"""Resolve the base branches an event covers and sweep each of them."""

import logging
from typing import TYPE_CHECKING

from ..config.models import UpdaterConfig
from .orchestrator import UpdateOrchestrator
from .sweeper import BRANCH_REF_PREFIX, PullRequestSweeper

if TYPE_CHECKING:
    from ..events import (
        PullRequestEvent,
        PushEvent,
        ScheduleEvent,
        WorkflowDispatchEvent,
        WorkflowRunEvent,
    )

logger = logging.getLogger(__name__)

SUPPORTED_WORKFLOW_RUN_TRIGGERS = ("push", "workflow_dispatch")


class BranchFanOut:
    """One handler per event kind.

    Branch handlers return the number of pull requests updated; branches are
    swept one after the other, in configuration order.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        sweeper: PullRequestSweeper,
        orchestrator: UpdateOrchestrator,
    ) -> None:
        self.config = config
        self.sweeper = sweeper
        self.orchestrator = orchestrator

    async def handle_push(self, event: "PushEvent") -> int:
        logger.info(f"Handling push event on ref '{event.ref}'")
        return await self.sweeper.pulls(event.ref, event.repo, event.owner)

    async def handle_workflow_dispatch(self, event: "WorkflowDispatchEvent") -> int:
        logger.info(f"Handling workflow_dispatch event on ref '{event.ref}'")
        return await self.sweeper.pulls(event.ref, event.repo, event.owner)

    async def handle_workflow_run(self, event: "WorkflowRunEvent") -> int:
        if event.trigger not in SUPPORTED_WORKFLOW_RUN_TRIGGERS:
            logger.error(
                f"workflow_run event triggered by '{event.trigger}' is not "
                f"supported, expected one of {list(SUPPORTED_WORKFLOW_RUN_TRIGGERS)}."
            )
            return 0
        if not event.head_branch:
            logger.error("workflow_run event has no head branch, skipping update.")
            return 0

        ref = f"{BRANCH_REF_PREFIX}{event.head_branch}"
        logger.info(
            f"Handling workflow_run event (triggered by {event.trigger}) on ref '{ref}'"
        )
        return await self.sweeper.pulls(ref, event.repo, event.owner)

    async def handle_schedule(self, event: "ScheduleEvent") -> int:
        """Sweep the configured schedule branches, or the triggering ref."""
        parts = self.config.repository_parts()
        if parts is None:
            logger.error(
                f"Could not parse repository '{self.config.github_repository}', "
                "expected owner/repo."
            )
            return 0
        owner, repo = parts

        branches = self.config.schedule_branches
        if not branches:
            logger.info(f"Handling schedule event on ref '{self.config.github_ref}'")
            return await self.sweeper.pulls(self.config.github_ref, repo, owner)

        logger.info(f"Handling schedule event for branches {list(branches)}")
        total = 0
        for branch in branches:
            total += await self.sweeper.pulls(
                f"{BRANCH_REF_PREFIX}{branch}", repo, owner
            )
        return total

    async def handle_pull_request(self, event: "PullRequestEvent") -> bool:
        """Update the single pull request carried by the event."""
        pull = event.pull
        head_repo = pull.head.repo
        if head_repo is None:
            logger.info(
                f"Pull request #{pull.number} has no head repository, skipping."
            )
            return False

        owner = event.owner or head_repo.owner
        logger.info(
            f"Handling pull_request event ({event.action}) for pull request "
            f"#{pull.number}"
        )
        updated = await self.orchestrator.update(owner, pull)
        if updated:
            logger.info(f"Pull request #{pull.number} updated successfully")
        return updated
