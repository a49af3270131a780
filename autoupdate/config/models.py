"""Pydantic configuration model for the pull request updater.

The configuration is resolved once per invocation, from the workflow
environment or a YAML file, and is immutable afterwards. Every component
receives the same ``UpdaterConfig`` instance.

Values are keyed by the environment variable names the action documents
(``PR_FILTER``, ``RETRY_COUNT``, ...); field names are accepted too.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PullRequestFilter(str, Enum):
    """Primary filter deciding which behind pull requests are updated."""

    ALL = "all"
    LABELLED = "labelled"
    PROTECTED = "protected"
    AUTO_MERGE = "auto_merge"


class ReadyState(str, Enum):
    """Filter on the draft flag of a pull request."""

    ALL = "all"
    DRAFT = "draft"
    READY_FOR_REVIEW = "ready_for_review"


class ConflictAction(str, Enum):
    """What to do when GitHub reports a merge conflict."""

    FAIL = "fail"
    IGNORE = "ignore"


def parse_list(value: Any) -> list[str]:
    """Parse a comma-separated setting, trimming items and dropping empties."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [str(item) for item in value]
    return [item.strip() for item in items if item and item.strip()]


class UpdaterConfig(BaseModel):
    """Resolved, read-only settings for one updater invocation."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    github_token: str = Field(
        alias="GITHUB_TOKEN", min_length=1, description="Token used for API calls"
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        alias="GITHUB_API_URL",
        description="Base URL of the GitHub REST API",
    )
    github_ref: str | None = Field(
        default=None,
        alias="GITHUB_REF",
        description="Ref that triggered the workflow, e.g. refs/heads/main",
    )
    github_repository: str | None = Field(
        default=None,
        alias="GITHUB_REPOSITORY",
        description="Repository the workflow runs in, as owner/repo",
    )

    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Report which pull requests would be updated without merging",
    )
    pr_filter: PullRequestFilter = Field(
        default=PullRequestFilter.ALL, alias="PR_FILTER"
    )
    pr_labels: tuple[str, ...] = Field(
        default_factory=tuple,
        alias="PR_LABELS",
        description="Labels selecting pull requests when PR_FILTER=labelled",
    )
    excluded_labels: tuple[str, ...] = Field(
        default_factory=tuple,
        alias="EXCLUDED_LABELS",
        description="Labels that exclude a pull request regardless of PR_FILTER",
    )
    pr_ready_state: ReadyState = Field(default=ReadyState.ALL, alias="PR_READY_STATE")

    merge_msg: str | None = Field(
        default=None, alias="MERGE_MSG", description="Custom merge commit message"
    )
    conflict_msg: str | None = Field(
        default=None,
        alias="CONFLICT_MSG",
        description="Comment posted on a pull request that has a merge conflict",
    )
    merge_conflict_action: ConflictAction = Field(
        default=ConflictAction.FAIL, alias="MERGE_CONFLICT_ACTION"
    )

    retry_count: int = Field(
        default=5,
        ge=0,
        alias="RETRY_COUNT",
        description="Retries after a transient merge failure",
    )
    retry_sleep: int = Field(
        default=300,
        ge=0,
        alias="RETRY_SLEEP",
        description="Milliseconds to wait between merge retries",
    )

    schedule_branches: tuple[str, ...] = Field(
        default_factory=tuple,
        alias="SCHEDULE_BRANCHES",
        description="Base branches swept on schedule events",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, values: Any) -> Any:
        """Treat empty or whitespace-only settings as unset."""
        if not isinstance(values, dict):
            values = dict(values)
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

    @field_validator("dry_run", mode="before")
    @classmethod
    def parse_dry_run(cls, value: Any) -> bool:
        """Only the literal ``true`` enables dry-run."""
        if isinstance(value, bool):
            return value
        return str(value).strip() == "true"

    @field_validator(
        "pr_labels", "excluded_labels", "schedule_branches", mode="before"
    )
    @classmethod
    def parse_label_lists(cls, value: Any) -> list[str]:
        return parse_list(value)

    @field_validator(
        "pr_filter",
        "pr_ready_state",
        "merge_conflict_action",
        "github_ref",
        "github_repository",
        "github_token",
        "merge_msg",
        "conflict_msg",
        mode="before",
    )
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    def repository_parts(self) -> tuple[str, str] | None:
        """Split ``github_repository`` into owner and name.

        Returns:
            ``(owner, repo)``, or None when the value is missing or not of
            the form ``owner/repo``
        """
        if not self.github_repository:
            return None
        parts = self.github_repository.split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return parts[0], parts[1]
