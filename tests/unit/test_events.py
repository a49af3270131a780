"""
Unit tests for event parsing.

Why: The webhook payload is the only input describing what happened; each
     event kind must carry exactly the fields the fan-out relies on.

What: Tests parse_event for every supported event and for unknown ones.

How: Feeds trimmed-down webhook payloads to parse_event.
"""

import pytest

from autoupdate.events import (
    PullRequestEvent,
    PushEvent,
    ScheduleEvent,
    UnknownEventError,
    WorkflowDispatchEvent,
    WorkflowRunEvent,
    parse_event,
)
from tests.fixtures.updater import make_pull_data

REPOSITORY = {"name": "r", "owner": {"login": "o", "name": "o"}}


class TestParseEvent:
    """Test parse_event."""

    def test_push(self) -> None:
        """Test push events carry ref, owner and repository name."""
        event = parse_event("push", {"ref": "refs/heads/main", "repository": REPOSITORY})

        assert event == PushEvent(ref="refs/heads/main", owner="o", repo="r")

    def test_workflow_dispatch(self) -> None:
        """Test workflow_dispatch events carry the dispatched ref."""
        event = parse_event(
            "workflow_dispatch", {"ref": "refs/heads/feat", "repository": REPOSITORY}
        )

        assert event == WorkflowDispatchEvent(ref="refs/heads/feat", owner="o", repo="r")

    def test_workflow_run(self) -> None:
        """Test workflow_run events carry the triggering event and head branch."""
        event = parse_event(
            "workflow_run",
            {
                "workflow_run": {"event": "push", "head_branch": "main"},
                "repository": REPOSITORY,
            },
        )

        assert event == WorkflowRunEvent(
            trigger="push", head_branch="main", owner="o", repo="r"
        )

    def test_workflow_run_without_run_details(self) -> None:
        """Test a truncated workflow_run payload parses with empty fields."""
        event = parse_event("workflow_run", {"repository": REPOSITORY})

        assert isinstance(event, WorkflowRunEvent)
        assert event.trigger is None
        assert event.head_branch is None

    def test_owner_falls_back_to_owner_name(self) -> None:
        """Test the owner name is used when the login is missing."""
        event = parse_event(
            "push", {"ref": "refs/heads/main", "repository": {"name": "r", "owner": {"name": "n"}}}
        )

        assert isinstance(event, PushEvent)
        assert event.owner == "n"

    @pytest.mark.parametrize("payload", [{}, None, {"schedule": "0 * * * *"}])
    def test_schedule(self, payload: dict | None) -> None:
        """Test schedule events need nothing from the payload."""
        assert parse_event("schedule", payload) == ScheduleEvent()

    def test_pull_request(self) -> None:
        """Test pull_request events carry the action, pull request and owner."""
        event = parse_event(
            "pull_request",
            {
                "action": "synchronize",
                "pull_request": make_pull_data(9),
                "repository": REPOSITORY,
            },
        )

        assert isinstance(event, PullRequestEvent)
        assert event.action == "synchronize"
        assert event.pull.number == 9
        assert event.owner == "o"

    def test_pull_request_without_repository(self) -> None:
        """Test the owner is None when the payload has no repository."""
        event = parse_event(
            "pull_request",
            {"action": "opened", "pull_request": {"head": {"repo": None}}},
        )

        assert isinstance(event, PullRequestEvent)
        assert event.owner is None
        assert event.pull.head.repo is None

    @pytest.mark.parametrize("event_name", ["bogus", "issues", "", None])
    def test_unknown_event_raises(self, event_name: str | None) -> None:
        """Test unsupported event names raise UnknownEventError."""
        with pytest.raises(UnknownEventError, match="Unknown event type"):
            parse_event(event_name, {})
