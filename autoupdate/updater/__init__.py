"""Pull request updater core.

Eligibility, merging, orchestration, pagination and branch fan-out, all
talking to GitHub through a ``ForgeGateway``.
"""

from .eligibility import EligibilityEngine
from .fanout import SUPPORTED_WORKFLOW_RUN_TRIGGERS, BranchFanOut
from .gateway import GitHubGateway
from .interfaces import ForgeGateway, OutputSetter
from .merge import MERGE_CONFLICT_MESSAGE, MergeExecutor, is_conflict, is_forbidden
from .models import (
    AutoMerge,
    BranchInfo,
    BranchRef,
    ComparisonResult,
    Label,
    MergeOutcome,
    MergeParams,
    MergeResult,
    PullRequestSnapshot,
    RepositoryRef,
)
from .orchestrator import UpdateOrchestrator
from .sweeper import BRANCH_REF_PREFIX, PullRequestSweeper, branch_from_ref

__all__ = [
    "BRANCH_REF_PREFIX",
    "MERGE_CONFLICT_MESSAGE",
    "SUPPORTED_WORKFLOW_RUN_TRIGGERS",
    "AutoMerge",
    "BranchFanOut",
    "BranchInfo",
    "BranchRef",
    "ComparisonResult",
    "EligibilityEngine",
    "ForgeGateway",
    "GitHubGateway",
    "Label",
    "MergeExecutor",
    "MergeOutcome",
    "MergeParams",
    "MergeResult",
    "OutputSetter",
    "PullRequestSnapshot",
    "PullRequestSweeper",
    "RepositoryRef",
    "UpdateOrchestrator",
    "branch_from_ref",
    "is_conflict",
    "is_forbidden",
]
