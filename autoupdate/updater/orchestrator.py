"""Update a single pull request: decide, then merge (or pretend to)."""

import logging
from typing import Any

from ..config.models import UpdaterConfig
from ..output import ActionOutput, Output
from .eligibility import EligibilityEngine
from .interfaces import ForgeGateway
from .merge import MergeExecutor
from .models import MergeParams, PullRequestSnapshot, RepositoryRef

logger = logging.getLogger(__name__)


class UpdateOrchestrator:
    """Runs eligibility and the merge for one pull request.

    Merge failures never escape :meth:`update`; they are reported through
    the action's failure channel and turned into ``False``.
    """

    def __init__(
        self,
        gateway: ForgeGateway,
        config: UpdaterConfig,
        outputs: ActionOutput,
        eligibility: EligibilityEngine | None = None,
        executor: MergeExecutor | None = None,
    ) -> None:
        self.gateway = gateway
        self.config = config
        self.outputs = outputs
        self.eligibility = eligibility or EligibilityEngine(gateway, config)
        self.executor = executor or MergeExecutor(gateway, config)

    async def update(self, source_owner: str, pull: PullRequestSnapshot) -> bool:
        """Bring ``pull`` up to date with its base branch if it qualifies.

        Args:
            source_owner: Owner of the repository the action acts for
            pull: Pull request to update

        Returns:
            True if the pull request was updated (or would be, in dry-run)
        """
        if not await self.eligibility.needs_update(pull):
            return False

        # The fork may have been deleted since the pull request was listed
        head_repo = pull.head.repo
        if head_repo is None:
            logger.info(
                f"Skipping pull request #{pull.number}, head repository is gone."
            )
            return False

        if self.config.dry_run:
            logger.warning(
                f"Would have merged {pull.base.ref} into {pull.head.ref} for "
                f"pull request #{pull.number} (DRY_RUN enabled)."
            )
            return True

        params = MergeParams(
            owner=head_repo.owner,
            repo=head_repo.name,
            base=pull.head.ref,
            head=pull.base.ref,
            commit_message=self.config.merge_msg,
        )

        conflicted = False

        def set_output(name: str, value: Any) -> None:
            nonlocal conflicted
            if name == Output.CONFLICTED:
                conflicted = bool(value)
            self.outputs.set_output(name, value)

        try:
            return await self.executor.merge(
                source_owner, pull.number, params, set_output
            )
        except Exception as e:
            self.outputs.set_failed(
                f"Caught error running merge for pull request #{pull.number}, "
                f"skipping and continuing: {e}"
            )
            return False
        finally:
            if conflicted:
                await self._comment_on_conflict(pull, head_repo)

    async def _comment_on_conflict(
        self, pull: PullRequestSnapshot, head_repo: RepositoryRef
    ) -> None:
        message = self.config.conflict_msg
        if not message:
            return

        target = pull.base.repo or head_repo
        try:
            await self.gateway.create_comment(
                target.owner, target.name, pull.number, message
            )
            logger.info(f"Posted merge conflict comment on pull request #{pull.number}")
        except Exception as e:
            logger.warning(
                f"Could not comment on pull request #{pull.number} "
                f"about its merge conflict: {e}"
            )
