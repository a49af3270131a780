"""Workflow events the updater reacts to.

Each variant carries only what the branch fan-out needs, so the raw webhook
payload never travels past :func:`parse_event`.
"""

from dataclasses import dataclass
from typing import Any

from .updater.models import PullRequestSnapshot


class UnknownEventError(ValueError):
    """Raised for event names the updater does not handle."""

    def __init__(self, event_name: str | None) -> None:
        super().__init__(f"Unknown event type '{event_name}'")
        self.event_name = event_name


@dataclass(frozen=True)
class PushEvent:
    ref: str | None
    owner: str
    repo: str


@dataclass(frozen=True)
class WorkflowDispatchEvent:
    ref: str | None
    owner: str
    repo: str


@dataclass(frozen=True)
class WorkflowRunEvent:
    """A ``workflow_run`` event; ``trigger`` is the event that started the run."""

    trigger: str | None
    head_branch: str | None
    owner: str
    repo: str


@dataclass(frozen=True)
class ScheduleEvent:
    """Scheduled run; repository and branches come from configuration."""


@dataclass(frozen=True)
class PullRequestEvent:
    """A ``pull_request`` event.

    ``owner`` is the owner of the repository the workflow runs in, or None
    when the payload does not name one.
    """

    action: str | None
    pull: PullRequestSnapshot
    owner: str | None = None


Event = PushEvent | WorkflowDispatchEvent | WorkflowRunEvent | ScheduleEvent | PullRequestEvent


def _repository(payload: dict[str, Any]) -> tuple[str, str]:
    repository = payload.get("repository") or {}
    owner = repository.get("owner") or {}
    return owner.get("login") or owner.get("name") or "", repository.get("name") or ""


def parse_event(event_name: str | None, payload: dict[str, Any] | None) -> Event:
    """Build the event variant for ``event_name`` from a webhook payload.

    Args:
        event_name: Value of ``GITHUB_EVENT_NAME``
        payload: Decoded contents of ``GITHUB_EVENT_PATH``

    Returns:
        The matching event variant

    Raises:
        UnknownEventError: If the event is not one the updater handles
    """
    payload = payload or {}

    if event_name == "push":
        owner, repo = _repository(payload)
        return PushEvent(ref=payload.get("ref"), owner=owner, repo=repo)

    if event_name == "workflow_dispatch":
        owner, repo = _repository(payload)
        return WorkflowDispatchEvent(ref=payload.get("ref"), owner=owner, repo=repo)

    if event_name == "workflow_run":
        owner, repo = _repository(payload)
        run = payload.get("workflow_run") or {}
        return WorkflowRunEvent(
            trigger=run.get("event"),
            head_branch=run.get("head_branch"),
            owner=owner,
            repo=repo,
        )

    if event_name == "schedule":
        return ScheduleEvent()

    if event_name == "pull_request":
        owner, _ = _repository(payload)
        return PullRequestEvent(
            action=payload.get("action"),
            pull=PullRequestSnapshot.from_api(payload.get("pull_request") or {}),
            owner=owner or None,
        )

    raise UnknownEventError(event_name)
