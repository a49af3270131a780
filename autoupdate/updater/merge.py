"""Merge the base branch into a pull request's head with bounded retries."""

import asyncio
import logging

from ..config.models import ConflictAction, UpdaterConfig
from ..github.exceptions import GitHubError, GitHubRateLimitError
from ..output import Output
from .interfaces import ForgeGateway, OutputSetter
from .models import MergeOutcome, MergeParams

logger = logging.getLogger(__name__)

MERGE_CONFLICT_MESSAGE = "Merge conflict"


def is_forbidden(error: Exception) -> bool:
    """Check for a 403 that is not a rate limit."""
    if isinstance(error, GitHubRateLimitError):
        return False
    return getattr(error, "status_code", None) == 403


def is_conflict(error: Exception) -> bool:
    """Check for a merge conflict (409, or GitHub's conflict message)."""
    if isinstance(error, GitHubError) and error.status_code == 409:
        return True
    return str(error) == MERGE_CONFLICT_MESSAGE


class MergeExecutor:
    """Calls the merge endpoint and classifies what happened.

    * merged or nothing to merge: ``True``
    * 403 forbidden: ``False``, typically a fork the token has no rights on
    * conflict: ``False`` when MERGE_CONFLICT_ACTION is ``ignore``, else raised
    * anything else: retried ``retry_count`` times, ``retry_sleep`` ms apart,
      then raised

    The ``conflicted`` output is set exactly once per call, on every path.
    """

    def __init__(self, gateway: ForgeGateway, config: UpdaterConfig) -> None:
        self.gateway = gateway
        self.config = config

    async def merge(
        self,
        source_owner: str,
        pull_number: int,
        params: MergeParams,
        set_output: OutputSetter,
    ) -> bool:
        """Merge ``params.head`` into ``params.base``.

        Args:
            source_owner: Owner of the repository the action acts for
            pull_number: Pull request being updated, for logging
            params: Merge target and branches
            set_output: Receives the ``conflicted`` output

        Returns:
            True if the branch is now up to date, False if it was skipped

        Raises:
            Exception: The conflict error when conflicts are fatal, or the
                last transient error once retries are exhausted
        """
        retries = 0
        retry_count = self.config.retry_count

        while True:
            try:
                logger.info(
                    f"Merging {params.head} into {params.base} "
                    f"for pull request #{pull_number}"
                )
                result = await self.gateway.merge_branch(
                    params.owner,
                    params.repo,
                    params.base,
                    params.head,
                    params.commit_message,
                )
            except Exception as e:
                if is_conflict(e):
                    set_output(Output.CONFLICTED, True)
                    if self.config.merge_conflict_action == ConflictAction.IGNORE:
                        logger.info(
                            f"Merge conflict on pull request #{pull_number}, "
                            "skipping (MERGE_CONFLICT_ACTION=ignore)."
                        )
                        return False
                    logger.error(
                        f"Merge conflict on pull request #{pull_number}: {e}"
                    )
                    raise

                if is_forbidden(e):
                    set_output(Output.CONFLICTED, False)
                    if source_owner != params.owner:
                        logger.error(
                            f"Could not update pull request #{pull_number} "
                            f"because the token cannot write to "
                            f"{params.owner}/{params.repo} (forked repository)."
                        )
                    else:
                        logger.error(
                            f"Could not update pull request #{pull_number}, "
                            f"merge was forbidden: {e}"
                        )
                    return False

                if retries >= retry_count:
                    set_output(Output.CONFLICTED, False)
                    logger.error(
                        f"Merge for pull request #{pull_number} failed after "
                        f"{retries + 1} attempt(s): {e}"
                    )
                    raise

                retries += 1
                logger.warning(
                    f"Merge for pull request #{pull_number} failed: {e}. "
                    f"Retrying in {self.config.retry_sleep}ms "
                    f"({retries}/{retry_count})."
                )
                await asyncio.sleep(self.config.retry_sleep / 1000)
                continue

            set_output(Output.CONFLICTED, False)
            if result.outcome == MergeOutcome.ALREADY_UP_TO_DATE:
                logger.info(
                    f"Pull request #{pull_number} was already up to date "
                    f"(status {result.status})."
                )
            else:
                logger.info(
                    f"Branch update successful for pull request #{pull_number}, "
                    f"new merge commit: {result.sha}."
                )
            return True
