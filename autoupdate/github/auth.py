"""GitHub token authentication."""

from dataclasses import dataclass

from .exceptions import GitHubAuthenticationError


@dataclass(frozen=True)
class AuthToken:
    """Authentication token and the scheme it is sent with."""

    token: str
    token_type: str = "token"

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header."""
        return {"Authorization": f"{self.token_type} {self.token}"}


class TokenAuth:
    """Authentication with a workflow or personal access token.

    Workflow tokens are minted per job and never refreshed, so the provider
    only hands the same token back.
    """

    DEFAULT_TOKEN_TYPE = "token"  # nosec B105

    def __init__(self, token: str, token_type: str | None = None):
        """Initialize token authentication.

        Args:
            token: GitHub token (``GITHUB_TOKEN`` or a personal access token)
            token_type: Authorization scheme, ``token`` by default

        Raises:
            GitHubAuthenticationError: If the token is empty
        """
        if not token or not token.strip():
            raise GitHubAuthenticationError("GitHub token is required")
        self._token = AuthToken(
            token=token.strip(), token_type=token_type or self.DEFAULT_TOKEN_TYPE
        )

    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        return self._token
