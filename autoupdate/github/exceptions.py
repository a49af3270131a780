"""Errors raised by the GitHub REST client.

Every non-2xx response is mapped to one of these by status code, so callers
classify failures with ``isinstance`` instead of inspecting status numbers.
"""

from typing import Any


class GitHubError(Exception):
    """A GitHub request failed.

    ``status_code`` is None when no response was received at all.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class GitHubAuthenticationError(GitHubError):
    """401: the token is missing, expired or revoked."""


class GitHubPermissionError(GitHubAuthenticationError):
    """403: the token is valid but may not touch this resource.

    Typical for merges into forks the workflow token cannot write to.
    """


class GitHubRateLimitError(GitHubError):
    """The request budget is spent until ``reset_time`` (epoch seconds).

    GitHub reports this as 403 or 429; it is transient, unlike a plain 403.
    """

    def __init__(
        self,
        message: str,
        reset_time: int | None = None,
        remaining: int = 0,
        limit: int = 0,
        status_code: int | None = None,
    ):
        super().__init__(message, status_code)
        self.reset_time = reset_time
        self.remaining = remaining
        self.limit = limit


class GitHubNotFoundError(GitHubError):
    """404: unknown repository, branch or ref."""


class GitHubConflictError(GitHubError):
    """409: the merge cannot be done automatically."""


class GitHubValidationError(GitHubError):
    """422: GitHub rejected the request body."""


class GitHubServerError(GitHubError):
    """5xx from GitHub."""


class GitHubConnectionError(GitHubError):
    """No response: DNS, TCP or TLS failure."""


class GitHubTimeoutError(GitHubError):
    """No response within the configured timeout."""
