"""
Unit tests for GitHub API client.

Why: Ensure the GitHub client maps HTTP responses onto the error classes
     the updater classifies merges by, and only retries what is safe to
     retry.

What: Tests GitHubClient for request handling, error mapping, retry policy,
      rate limit tracking and the endpoints used by the updater.

How: Uses aioresponses to serve canned GitHub responses without making
     real API calls; asyncio.sleep is patched so backoff does not wait.
"""

import asyncio
import re
from collections.abc import AsyncIterator, Iterator
from typing import Any
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from autoupdate.github.auth import TokenAuth
from autoupdate.github.client import GitHubClient, GitHubClientConfig
from autoupdate.github.exceptions import (
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

API = "https://api.github.com"


def recorded_requests(m: aioresponses) -> list[Any]:
    return [call for calls in m.requests.values() for call in calls]


class TestGitHubClientConfig:
    """Test GitHubClientConfig data class."""

    def test_github_client_config_defaults(self) -> None:
        """Test GitHubClientConfig with default values."""
        config = GitHubClientConfig()

        assert config.base_url == "https://api.github.com"
        assert config.timeout == 30
        assert config.max_retries == 2
        assert config.retry_backoff_factor == 2.0
        assert config.rate_limit_buffer == 10
        assert config.user_agent == "pr-autoupdate/1.0"


class TestGitHubClient:
    """Test GitHubClient class."""

    @pytest_asyncio.fixture
    async def github_client(self) -> AsyncIterator[GitHubClient]:
        """Create GitHubClient instance with token auth."""
        client = GitHubClient(
            auth=TokenAuth("test_token"),
            config=GitHubClientConfig(base_url=API),
        )
        yield client
        await client.close()

    @pytest.fixture
    def mock_sleep(self) -> Iterator[AsyncMock]:
        """Patch the retry backoff sleep."""
        with patch(
            "autoupdate.github.client.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            yield sleep

    @pytest.mark.asyncio
    async def test_context_manager(self, github_client: GitHubClient) -> None:
        """Test GitHubClient as async context manager."""
        async with github_client as client:
            assert client._session is not None
            assert not client._session.closed

        assert github_client._session is None

    @pytest.mark.asyncio
    async def test_get_request_success(self, github_client: GitHubClient) -> None:
        """Test successful GET request sends the token and returns the body."""
        with aioresponses() as m:
            m.get(f"{API}/user", payload={"login": "testuser", "id": 12345})

            result = await github_client.get("/user")

            assert result == {"login": "testuser", "id": 12345}
            request = recorded_requests(m)[0]
            assert request.kwargs["headers"]["Authorization"] == "token test_token"

    @pytest.mark.asyncio
    async def test_post_no_content(self, github_client: GitHubClient) -> None:
        """Test a 204 response carries no body."""
        with aioresponses() as m:
            m.post(f"{API}/repos/owner/repo/merges", status=204)

            response = await github_client.post(
                "/repos/owner/repo/merges", data={"base": "a", "head": "b"}
            )

        assert response.status == 204
        assert response.data is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "message", "error_class"),
        [
            (401, "Bad credentials", GitHubAuthenticationError),
            (403, "Resource not accessible by integration", GitHubPermissionError),
            (404, "Not Found", GitHubNotFoundError),
            (409, "Merge conflict", GitHubConflictError),
            (422, "Validation Failed", GitHubValidationError),
            (418, "I'm a teapot", GitHubError),
        ],
    )
    async def test_error_status_mapping(
        self,
        github_client: GitHubClient,
        status: int,
        message: str,
        error_class: type[GitHubError],
    ) -> None:
        """Test error statuses raise their error class without retrying."""
        with aioresponses() as m:
            m.post(
                f"{API}/repos/owner/repo/merges",
                status=status,
                payload={"message": message},
            )

            with pytest.raises(error_class) as exc_info:
                await github_client.post("/repos/owner/repo/merges", data={})

        assert type(exc_info.value) is error_class
        assert exc_info.value.status_code == status
        assert str(exc_info.value) == message
        assert exc_info.value.response_data == {"message": message}

    @pytest.mark.asyncio
    async def test_rate_limit_error(self, github_client: GitHubClient) -> None:
        """Test a 403 with an exhausted budget is a rate limit error."""
        with aioresponses() as m:
            m.get(
                f"{API}/user",
                status=403,
                payload={"message": "API rate limit exceeded for installation"},
                headers={
                    "X-RateLimit-Limit": "5000",
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": "1234567890",
                },
            )

            with pytest.raises(GitHubRateLimitError) as exc_info:
                await github_client.get("/user")

        assert exc_info.value.status_code == 403
        assert exc_info.value.remaining == 0
        assert exc_info.value.reset_time == 1234567890

    @pytest.mark.asyncio
    async def test_server_error_retried_for_get(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test 5xx on GET is retried with exponential backoff."""
        with aioresponses() as m:
            m.get(f"{API}/user", status=502, payload={"message": "Bad Gateway"})
            m.get(f"{API}/user", status=502, payload={"message": "Bad Gateway"})
            m.get(f"{API}/user", payload={"login": "testuser"})

            result = await github_client.get("/user")

        assert result == {"login": "testuser"}
        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test the last server error is raised once retries run out."""
        with aioresponses() as m:
            for _ in range(3):
                m.get(f"{API}/user", status=500, payload={"message": "Server Error"})

            with pytest.raises(GitHubServerError):
                await github_client.get("/user")

        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_server_error_not_retried_for_post(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test 5xx on POST raises at once and leaves retries to the caller."""
        with aioresponses() as m:
            m.post(f"{API}/repos/o/r/merges", status=500, payload={"message": "oops"})

            with pytest.raises(GitHubServerError):
                await github_client.post("/repos/o/r/merges", data={})

        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_error_retried_for_get(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test transport failures on GET are retried."""
        with aioresponses() as m:
            m.get(
                f"{API}/user",
                exception=aiohttp.ClientConnectionError("Connection reset"),
            )
            m.get(f"{API}/user", payload={"login": "testuser"})

            result = await github_client.get("/user")

        assert result == {"login": "testuser"}
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("exception", "error_class"),
        [
            (aiohttp.ClientConnectionError("Connection reset"), GitHubConnectionError),
            (asyncio.TimeoutError(), GitHubTimeoutError),
        ],
    )
    async def test_transport_error_not_retried_for_post(
        self,
        github_client: GitHubClient,
        mock_sleep: AsyncMock,
        exception: Exception,
        error_class: type[GitHubError],
    ) -> None:
        """
        Why: A merge POST must be attempted only as often as the merge
             executor decides; hidden client retries multiply attempts.
        What: Tests a transport failure on POST raises after one request.
        How: Queues two failures and checks only one request was sent.
        """
        with aioresponses() as m:
            for _ in range(2):
                m.post(f"{API}/repos/o/r/merges", exception=exception)

            with pytest.raises(error_class):
                await github_client.post("/repos/o/r/merges", data={})

            assert len(recorded_requests(m)) == 1

        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_error_exhausts_retries(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test persistent transport failures raise GitHubConnectionError."""
        with aioresponses() as m:
            for _ in range(3):
                m.get(
                    f"{API}/user",
                    exception=aiohttp.ClientConnectionError("Connection failed"),
                )

            with pytest.raises(GitHubConnectionError, match="Connection failed"):
                await github_client.get("/user")

    @pytest.mark.asyncio
    async def test_timeout_error(
        self, github_client: GitHubClient, mock_sleep: AsyncMock
    ) -> None:
        """Test timeouts raise GitHubTimeoutError after retries."""
        with aioresponses() as m:
            for _ in range(3):
                m.get(f"{API}/user", exception=asyncio.TimeoutError())

            with pytest.raises(GitHubTimeoutError):
                await github_client.get("/user")

    @pytest.mark.asyncio
    async def test_rate_limit_update(self, github_client: GitHubClient) -> None:
        """Test rate limit info is recorded from response headers."""
        with aioresponses() as m:
            m.get(
                f"{API}/user",
                payload={"login": "testuser"},
                headers={
                    "X-RateLimit-Limit": "5000",
                    "X-RateLimit-Remaining": "4500",
                    "X-RateLimit-Reset": "1234567890",
                    "X-RateLimit-Used": "500",
                    "X-RateLimit-Resource": "core",
                },
            )

            await github_client.get("/user")

        rate_limit = github_client.rate_limiter.get_rate_limit("core")
        assert rate_limit is not None
        assert rate_limit.remaining == 4500
        assert rate_limit.used == 500


class TestGitHubClientEndpoints:
    """Test the endpoints used by the updater."""

    @pytest_asyncio.fixture
    async def github_client(self) -> AsyncIterator[GitHubClient]:
        client = GitHubClient(auth=TokenAuth("test_token"))
        yield client
        await client.close()

    @pytest.mark.asyncio
    async def test_compare_commits(self, github_client: GitHubClient) -> None:
        """Test the basehead is placed in the compare URL."""
        with aioresponses() as m:
            m.get(
                f"{API}/repos/owner/repo/compare/owner:feature...owner:main",
                payload={"behind_by": 3, "ahead_by": 1},
            )

            result = await github_client.compare_commits(
                "owner", "repo", "owner:feature...owner:main"
            )

        assert result["behind_by"] == 3

    @pytest.mark.asyncio
    async def test_get_branch(self, github_client: GitHubClient) -> None:
        """Test branch names with slashes are kept in the path."""
        with aioresponses() as m:
            m.get(
                f"{API}/repos/owner/repo/branches/release/1.x",
                payload={"name": "release/1.x", "protected": True},
            )

            result = await github_client.get_branch("owner", "repo", "release/1.x")

        assert result["protected"] is True

    @pytest.mark.asyncio
    async def test_merge_with_message(self, github_client: GitHubClient) -> None:
        """Test the merge body carries base, head and commit message."""
        with aioresponses() as m:
            m.post(
                f"{API}/repos/owner/repo/merges",
                status=201,
                payload={"sha": "abc123"},
            )

            response = await github_client.merge(
                "owner", "repo", "feature", "main", "Merge main"
            )

            request = recorded_requests(m)[0]

        assert response.status == 201
        assert response.data == {"sha": "abc123"}
        assert request.kwargs["json"] == {
            "base": "feature",
            "head": "main",
            "commit_message": "Merge main",
        }

    @pytest.mark.asyncio
    async def test_merge_without_message(self, github_client: GitHubClient) -> None:
        """Test no commit_message key is sent when none is configured."""
        with aioresponses() as m:
            m.post(f"{API}/repos/owner/repo/merges", status=204)

            await github_client.merge("owner", "repo", "feature", "main")

            request = recorded_requests(m)[0]

        assert request.kwargs["json"] == {"base": "feature", "head": "main"}

    @pytest.mark.asyncio
    async def test_list_pulls_follows_link_header(
        self, github_client: GitHubClient
    ) -> None:
        """Test open pull requests are listed across pages."""
        next_url = f"{API}/repositories/1/pulls?page=2"
        with aioresponses() as m:
            m.get(
                re.compile(rf"^{re.escape(API)}/repos/owner/repo/pulls\?.*$"),
                payload=[{"number": 1}, {"number": 2}],
                headers={"Link": f'<{next_url}>; rel="next"'},
            )
            m.get(next_url, payload=[{"number": 3}])

            paginator = github_client.list_pulls(
                "owner", "repo", base="main", sort="updated", direction="asc"
            )
            pages = [page async for page in paginator.pages()]

        assert pages == [[{"number": 1}, {"number": 2}], [{"number": 3}]]
        assert paginator.params == {
            "state": "open",
            "base": "main",
            "sort": "updated",
            "direction": "asc",
            "per_page": 100,
        }

    @pytest.mark.asyncio
    async def test_create_issue_comment(self, github_client: GitHubClient) -> None:
        """Test comments are posted to the issue comments endpoint."""
        with aioresponses() as m:
            m.post(
                f"{API}/repos/owner/repo/issues/7/comments",
                status=201,
                payload={"id": 1, "body": "hello"},
            )

            result = await github_client.create_issue_comment(
                "owner", "repo", 7, "hello"
            )

        assert result == {"id": 1, "body": "hello"}
