"""Decides whether a pull request should be brought up to date.

Checks run cheapest first and stop at the first failing one:

1. the pull request is open and not merged
2. its head repository still exists
3. its head is behind its base (one comparison call)
4. it carries none of the excluded labels
5. its draft flag matches the ready-state filter
6. it passes the primary filter (all, labelled, protected, auto_merge)

Comparison and branch lookups are best effort: a failed lookup makes the
pull request ineligible instead of raising.
"""

import logging

from ..config.models import PullRequestFilter, ReadyState, UpdaterConfig
from .interfaces import ForgeGateway
from .models import PullRequestSnapshot, RepositoryRef

logger = logging.getLogger(__name__)


class EligibilityEngine:
    """Filter pipeline deciding which pull requests need updating."""

    def __init__(self, gateway: ForgeGateway, config: UpdaterConfig) -> None:
        self.gateway = gateway
        self.config = config

    async def needs_update(self, pull: PullRequestSnapshot) -> bool:
        """Return True when ``pull`` is behind its base and passes every filter."""
        if pull.merged:
            logger.info(f"Skipping pull request #{pull.number}, already merged.")
            return False
        if not pull.is_open:
            logger.info(
                f"Skipping pull request #{pull.number}, state is '{pull.state}'."
            )
            return False
        head_repo = pull.head.repo
        if head_repo is None:
            logger.info(
                f"Skipping pull request #{pull.number}, its head repository "
                "has been deleted."
            )
            return False

        if not await self._is_behind(pull, head_repo):
            return False

        excluded = set(self.config.excluded_labels)
        if excluded and pull.has_any_label(excluded):
            logger.info(
                f"Skipping pull request #{pull.number}, it has an excluded label "
                f"({', '.join(sorted(pull.label_names() & excluded))})."
            )
            return False

        if not self._matches_ready_state(pull):
            return False

        return await self._passes_filter(pull, head_repo)

    async def _is_behind(
        self, pull: PullRequestSnapshot, head_repo: RepositoryRef
    ) -> bool:
        try:
            # head...base so behind_by counts base commits missing from head
            comparison = await self.gateway.compare_refs(
                head_repo.owner, head_repo.name, pull.head.label, pull.base.label
            )
        except Exception as e:
            logger.warning(
                f"Skipping pull request #{pull.number}, comparing "
                f"{pull.head.label}...{pull.base.label} failed: {e}"
            )
            return False

        if comparison.behind_by == 0:
            logger.info(
                f"Skipping pull request #{pull.number}, up-to-date with base branch."
            )
            return False

        logger.debug(
            f"Pull request #{pull.number} is {comparison.behind_by} commit(s) behind."
        )
        return True

    def _matches_ready_state(self, pull: PullRequestSnapshot) -> bool:
        ready_state = self.config.pr_ready_state
        if ready_state == ReadyState.DRAFT and not pull.draft:
            logger.info(
                f"Skipping pull request #{pull.number}, it is not a draft "
                "(PR_READY_STATE=draft)."
            )
            return False
        if ready_state == ReadyState.READY_FOR_REVIEW and pull.draft:
            logger.info(
                f"Skipping pull request #{pull.number}, it is a draft "
                "(PR_READY_STATE=ready_for_review)."
            )
            return False
        return True

    async def _passes_filter(
        self, pull: PullRequestSnapshot, head_repo: RepositoryRef
    ) -> bool:
        pr_filter = self.config.pr_filter

        if pr_filter == PullRequestFilter.LABELLED:
            wanted = set(self.config.pr_labels)
            if not wanted:
                logger.warning(
                    "PR_FILTER is 'labelled' but no PR_LABELS are configured, "
                    f"skipping pull request #{pull.number}."
                )
                return False
            if not pull.has_any_label(wanted):
                logger.info(
                    f"Skipping pull request #{pull.number}, it has none of the "
                    f"labels {sorted(wanted)}."
                )
                return False
            return True

        if pr_filter == PullRequestFilter.PROTECTED:
            try:
                branch = await self.gateway.get_branch(
                    head_repo.owner, head_repo.name, pull.base.ref
                )
            except Exception as e:
                logger.warning(
                    f"Skipping pull request #{pull.number}, looking up branch "
                    f"'{pull.base.ref}' failed: {e}"
                )
                return False
            if not branch.protected:
                logger.info(
                    f"Skipping pull request #{pull.number}, base branch "
                    f"'{pull.base.ref}' is not protected."
                )
                return False
            return True

        if pr_filter == PullRequestFilter.AUTO_MERGE:
            if pull.auto_merge is None:
                logger.info(
                    f"Skipping pull request #{pull.number}, auto-merge is not enabled."
                )
                return False
            logger.debug(
                f"Pull request #{pull.number} has auto-merge enabled by "
                f"{pull.auto_merge.enabled_by}."
            )
            return True

        return True
