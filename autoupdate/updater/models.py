"""Data models for the pull request updater.

Snapshots are immutable views of GitHub payloads taken at decision time.
The updater never mutates them and never caches lookups between calls:
comparison and branch protection results are fetched fresh per decision.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class MergeOutcome(str, Enum):
    """Result of a successful call to the merge endpoint."""

    UPDATED = "updated"
    ALREADY_UP_TO_DATE = "already_up_to_date"


@dataclass(frozen=True)
class RepositoryRef:
    """Owner login and name of a repository."""

    owner: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "RepositoryRef | None":
        if not data:
            return None
        owner = data.get("owner") or {}
        return cls(owner=owner.get("login", ""), name=data.get("name", ""))


@dataclass(frozen=True)
class BranchRef:
    """One side of a pull request.

    ``repo`` is None when the repository has been deleted, which happens
    for pull requests from a fork that no longer exists.
    """

    ref: str
    label: str
    repo: RepositoryRef | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "BranchRef":
        data = data or {}
        return cls(
            ref=data.get("ref", ""),
            label=data.get("label", ""),
            repo=RepositoryRef.from_api(data.get("repo")),
        )


@dataclass(frozen=True)
class Label:
    """Pull request label; GitHub payloads may omit the name."""

    name: str | None = None


@dataclass(frozen=True)
class AutoMerge:
    """Auto-merge marker of a pull request."""

    enabled_by: str | None = None
    merge_method: str | None = None


@dataclass(frozen=True)
class PullRequestSnapshot:
    """Immutable view of one pull request at decision time."""

    number: int
    state: str
    head: BranchRef
    base: BranchRef
    merged: bool = False
    draft: bool = False
    labels: tuple[Label, ...] = ()
    auto_merge: AutoMerge | None = None

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    def label_names(self) -> set[str]:
        """Names of the labels on the pull request, skipping unnamed labels."""
        return {label.name for label in self.labels if label.name}

    def has_any_label(self, names: set[str] | frozenset[str] | tuple[str, ...]) -> bool:
        """Check whether any named label on the pull request is in ``names``."""
        wanted = set(names)
        return any(
            label.name is not None and label.name in wanted for label in self.labels
        )

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "PullRequestSnapshot":
        """Build a snapshot from a GitHub pull request payload."""
        auto_merge_data = data.get("auto_merge")
        auto_merge = None
        if auto_merge_data:
            enabled_by = auto_merge_data.get("enabled_by") or {}
            auto_merge = AutoMerge(
                enabled_by=enabled_by.get("login"),
                merge_method=auto_merge_data.get("merge_method"),
            )

        return cls(
            number=int(data.get("number") or 0),
            state=data.get("state", ""),
            merged=bool(data.get("merged", False)),
            draft=bool(data.get("draft", False)),
            head=BranchRef.from_api(data.get("head")),
            base=BranchRef.from_api(data.get("base")),
            labels=tuple(
                Label(name=label.get("name"))
                for label in data.get("labels") or []
                if isinstance(label, dict)
            ),
            auto_merge=auto_merge,
        )


@dataclass(frozen=True)
class ComparisonResult:
    """How far a pull request's head lags its base."""

    behind_by: int


@dataclass(frozen=True)
class BranchInfo:
    """Branch metadata relevant to eligibility."""

    name: str
    protected: bool = False


@dataclass(frozen=True)
class MergeParams:
    """Arguments of one merge-base-into-head call.

    ``base`` is the branch receiving the merge, i.e. the pull request's head
    branch, and ``head`` is the pull request's base branch.
    """

    owner: str
    repo: str
    base: str
    head: str
    commit_message: str | None = None


@dataclass(frozen=True)
class MergeResult:
    """Response of the merge endpoint."""

    status: int
    sha: str | None = None

    @property
    def outcome(self) -> MergeOutcome:
        if self.status == 204:
            return MergeOutcome.ALREADY_UP_TO_DATE
        return MergeOutcome.UPDATED
