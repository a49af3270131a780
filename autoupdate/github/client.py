"""Async client for the handful of GitHub REST endpoints the updater calls."""

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import aiohttp

from .auth import TokenAuth
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConflictError,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubPermissionError,
    GitHubRateLimitError,
    GitHubServerError,
    GitHubTimeoutError,
    GitHubValidationError,
)
from .pagination import AsyncPaginator, PaginatedResponse
from .rate_limiting import RateLimitManager

logger = logging.getLogger(__name__)


@dataclass
class GitHubClientConfig:
    """Connection and retry settings for GitHubClient."""

    base_url: str = "https://api.github.com"
    timeout: int = 30
    max_retries: int = 2
    retry_backoff_factor: float = 2.0
    rate_limit_buffer: int = 10
    user_agent: str = "pr-autoupdate/1.0"


@dataclass
class GitHubResponse:
    """Status, decoded body and headers of a completed request."""

    status: int
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)


class GitHubClient:
    """Async GitHub REST client covering the endpoints the updater needs."""

    def __init__(
        self,
        auth: TokenAuth,
        config: GitHubClientConfig | None = None,
    ) -> None:
        self.auth = auth
        self.config = config or GitHubClientConfig()
        self.rate_limiter = RateLimitManager(buffer=self.config.rate_limit_buffer)

        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "GitHubClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "application/vnd.github+json",
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session; the client reopens one on next use."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _generate_correlation_id(self) -> str:
        return uuid.uuid4().hex[:8]

    async def _make_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> GitHubResponse:
        """Send one API request, retrying failures that may be transient.

        Only GET requests are retried, on transport failures and 5xx
        responses. Other methods raise on the first failure so the caller's
        retry policy alone bounds how often a write is attempted. Any other
        error status raises immediately.

        Args:
            method: HTTP method
            url: Request URL
            params: Query parameters
            data: Request body data

        Returns:
            Completed response with decoded JSON body

        Raises:
            GitHubError: Subclass matching the failure
        """
        correlation_id = self._generate_correlation_id()

        self.rate_limiter.check_rate_limit()

        auth_token = await self.auth.get_token()
        request_kwargs: dict[str, Any] = {
            "params": params,
            "headers": auth_token.to_header(),
        }
        if data is not None:
            request_kwargs["json"] = data

        session = await self._ensure_session()

        last_exception: GitHubError | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                start_time = time.time()
                logger.debug(f"[{correlation_id}] {method} {url} attempt {attempt + 1}")

                async with session.request(method, url, **request_kwargs) as response:
                    headers = response.headers.copy()
                    self.rate_limiter.update_rate_limit(response.headers)

                    logger.debug(
                        f"[{correlation_id}] {response.status} in "
                        f"{time.time() - start_time:.2f}s"
                    )

                    if 200 <= response.status < 300:
                        body = None
                        if response.status != 204:
                            body = await self._read_body(response)
                        return GitHubResponse(response.status, body, headers)

                    await self._handle_error_response(response, correlation_id)

            except GitHubServerError as e:
                if method != "GET":
                    raise
                last_exception = e

            except TimeoutError as e:
                last_exception = GitHubTimeoutError(f"Timed out: {method} {url}")
                if method != "GET":
                    raise last_exception from e

            except aiohttp.ClientError as e:
                last_exception = GitHubConnectionError(
                    f"Could not reach GitHub for {method} {url}: {e}"
                )
                if method != "GET":
                    raise last_exception from e

            if attempt < self.config.max_retries:
                backoff_time = self.config.retry_backoff_factor**attempt
                logger.warning(
                    f"[{correlation_id}] {method} {url} failed: {last_exception}; "
                    f"retry {attempt + 1}/{self.config.max_retries} "
                    f"in {backoff_time:.1f}s"
                )
                await asyncio.sleep(backoff_time)

        if last_exception:
            raise last_exception
        raise GitHubError(f"{method} {url} failed after {attempt + 1} attempts")

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        try:
            return await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError):
            return await response.text()

    async def _handle_error_response(
        self, response: aiohttp.ClientResponse, correlation_id: str
    ) -> None:
        """Raise the GitHubError subclass matching the response status.

        Rate limiting is recognised before the generic 403 mapping so it
        stays distinguishable from a permission failure.
        """
        try:
            error_data = await response.json(content_type=None)
        except (json.JSONDecodeError, aiohttp.ContentTypeError):
            error_data = {"message": await response.text()}
        if not isinstance(error_data, dict):
            error_data = {"message": str(error_data)}

        status = response.status
        error_message = error_data.get("message") or f"HTTP {status}"

        logger.warning(
            f"GitHub API error [{correlation_id}] {status}: {error_message}"
        )

        if status in (403, 429) and (
            "rate limit" in error_message.lower()
            or response.headers.get("X-RateLimit-Remaining") == "0"
        ):
            reset_time = response.headers.get("X-RateLimit-Reset")
            raise GitHubRateLimitError(
                error_message,
                reset_time=int(reset_time) if reset_time else None,
                remaining=int(response.headers.get("X-RateLimit-Remaining", "0")),
                limit=int(response.headers.get("X-RateLimit-Limit", "0")),
                status_code=status,
            )
        if status == 401:
            raise GitHubAuthenticationError(error_message, status, error_data)
        if status == 403:
            raise GitHubPermissionError(error_message, status, error_data)
        if status == 404:
            raise GitHubNotFoundError(error_message, status, error_data)
        if status == 409:
            raise GitHubConflictError(error_message, status, error_data)
        if status == 422:
            raise GitHubValidationError(error_message, status, error_data)
        if 500 <= status < 600:
            raise GitHubServerError(error_message, status, error_data)
        raise GitHubError(error_message, status, error_data)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make GET request to GitHub API and return the JSON body."""
        response = await self._make_request("GET", self._url(path), params)
        return response.data

    async def post(
        self,
        path: str,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> GitHubResponse:
        """POST ``data`` as JSON and return the whole response.

        The whole response is returned since callers such as :meth:`merge`
        need the status code as well as the body.
        """
        return await self._make_request("POST", self._url(path), params, data)

    async def _fetch_paginated(
        self, url: str, params: dict[str, Any] | None = None
    ) -> PaginatedResponse:
        """Fetch one page (used by AsyncPaginator)."""
        response = await self._make_request("GET", url, params)
        return PaginatedResponse(response.data or [], response.headers, url)

    def paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        per_page: int = 100,
    ) -> AsyncPaginator:
        """Lazily page through the list endpoint at ``path``."""
        return AsyncPaginator(
            client=self,
            initial_url=self._url(path),
            params=params,
            per_page=per_page,
        )

    # Endpoints used by the updater

    async def compare_commits(
        self, owner: str, repo: str, basehead: str
    ) -> dict[str, Any]:
        """Compare two commits.

        Args:
            owner: Repository owner
            repo: Repository name
            basehead: ``BASE...HEAD`` where each side is a ref or ``owner:ref`` label

        Returns:
            Comparison data, including ``behind_by``
        """
        return await self.get(
            f"/repos/{owner}/{repo}/compare/{quote(basehead, safe='/:.')}"
        )

    async def get_branch(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        """Get branch metadata, including its ``protected`` flag."""
        return await self.get(
            f"/repos/{owner}/{repo}/branches/{quote(branch, safe='/')}"
        )

    async def merge(
        self,
        owner: str,
        repo: str,
        base: str,
        head: str,
        commit_message: str | None = None,
    ) -> GitHubResponse:
        """Merge ``head`` into the branch ``base``.

        GitHub answers 201 with the merge commit when content changed and
        204 when ``base`` already contains ``head``.

        Args:
            owner: Repository owner
            repo: Repository name
            base: Branch receiving the merge
            head: Branch or SHA being merged in
            commit_message: Optional merge commit message

        Returns:
            Response with the status code and merge commit (if any)
        """
        body: dict[str, Any] = {"base": base, "head": head}
        if commit_message:
            body["commit_message"] = commit_message
        return await self.post(f"/repos/{owner}/{repo}/merges", data=body)

    def list_pulls(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        base: str | None = None,
        sort: str | None = None,
        direction: str | None = None,
        per_page: int = 100,
    ) -> AsyncPaginator:
        """Page through the pull requests of ``owner/repo``.

        Unset filters are left out of the query so GitHub applies its own
        defaults; ``base`` restricts the listing to one target branch.
        """
        params: dict[str, Any] = {"state": state}
        if base:
            params["base"] = base
        if sort:
            params["sort"] = sort
        if direction:
            params["direction"] = direction
        return self.paginate(
            f"/repos/{owner}/{repo}/pulls", params=params, per_page=per_page
        )

    async def create_issue_comment(
        self, owner: str, repo: str, number: int, body: str
    ) -> dict[str, Any]:
        """Comment on an issue or pull request."""
        response = await self.post(
            f"/repos/{owner}/{repo}/issues/{number}/comments", data={"body": body}
        )
        return response.data
