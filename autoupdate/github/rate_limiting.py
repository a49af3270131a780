"""Bookkeeping for GitHub's per-resource request budget."""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import GitHubRateLimitError

logger = logging.getLogger(__name__)

_HEADER = "X-RateLimit-{}"


@dataclass(frozen=True)
class RateLimitInfo:
    """Budget reported with the last response for one resource."""

    limit: int
    remaining: int
    reset: int
    used: int = 0
    resource: str = "core"

    @property
    def seconds_until_reset(self) -> float:
        return max(0.0, self.reset - time.time())

    @property
    def is_exceeded(self) -> bool:
        return self.remaining <= 0

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitInfo | None":
        """Parse ``X-RateLimit-*`` headers; None if absent or malformed."""
        if _HEADER.format("Limit") not in headers:
            return None

        def number(name: str, default: int) -> int:
            return int(headers.get(_HEADER.format(name), default))

        try:
            return cls(
                limit=number("Limit", 5000),
                remaining=number("Remaining", 0),
                reset=number("Reset", 0),
                used=number("Used", 0),
                resource=headers.get(_HEADER.format("Resource"), "core"),
            )
        except (TypeError, ValueError):
            return None


@dataclass
class RateLimitManager:
    """Tracks the latest budget per resource.

    A request is refused only while the budget is spent and its reset lies
    in the future; waiting out the reset is the caller's decision. Budgets
    at or below ``buffer`` are logged as a warning.
    """

    buffer: int = 0
    _rate_limits: dict[str, RateLimitInfo] = field(default_factory=dict)

    def get_rate_limit(self, resource: str = "core") -> RateLimitInfo | None:
        return self._rate_limits.get(resource)

    def update_rate_limit(self, headers: Mapping[str, str]) -> None:
        info = RateLimitInfo.from_headers(headers)
        if info is None:
            return

        self._rate_limits[info.resource] = info
        if info.remaining <= self.buffer:
            logger.warning(
                f"GitHub rate limit for '{info.resource}' is low: "
                f"{info.remaining}/{info.limit} left, "
                f"reset in {info.seconds_until_reset:.0f}s"
            )

    def check_rate_limit(self, resource: str = "core") -> None:
        """Raise GitHubRateLimitError if ``resource`` has no budget left."""
        info = self.get_rate_limit(resource)
        if info is None or not info.is_exceeded:
            return

        wait = info.seconds_until_reset
        if wait > 0:
            raise GitHubRateLimitError(
                f"Rate limit exceeded for {resource}, resets in {wait:.0f}s",
                reset_time=info.reset,
                remaining=info.remaining,
                limit=info.limit,
            )
