"""Dispatch a workflow event to the matching fan-out handler."""

import logging
from dataclasses import dataclass

from .events import (
    Event,
    PullRequestEvent,
    PushEvent,
    ScheduleEvent,
    UnknownEventError,
    WorkflowDispatchEvent,
    WorkflowRunEvent,
)
from .updater.fanout import BranchFanOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    """Outcome of one routed event.

    ``updated`` is the number of updated pull requests, or a bool for
    ``pull_request`` events which cover a single pull request.
    """

    event_name: str
    updated: int | bool

    @property
    def updated_count(self) -> int:
        return int(self.updated)


class Router:
    """Maps each event variant to its fan-out handler."""

    def __init__(self, fan_out: BranchFanOut) -> None:
        self.fan_out = fan_out

    async def route(self, event: Event) -> RouteResult:
        if isinstance(event, PushEvent):
            return RouteResult("push", await self.fan_out.handle_push(event))
        if isinstance(event, WorkflowDispatchEvent):
            return RouteResult(
                "workflow_dispatch", await self.fan_out.handle_workflow_dispatch(event)
            )
        if isinstance(event, WorkflowRunEvent):
            return RouteResult(
                "workflow_run", await self.fan_out.handle_workflow_run(event)
            )
        if isinstance(event, ScheduleEvent):
            return RouteResult("schedule", await self.fan_out.handle_schedule(event))
        if isinstance(event, PullRequestEvent):
            return RouteResult(
                "pull_request", await self.fan_out.handle_pull_request(event)
            )

        raise UnknownEventError(type(event).__name__)
