"""Page-by-page iteration over GitHub list endpoints.

GitHub paginates with RFC 8288 ``Link`` headers; the ``next`` relation is
followed until it disappears.
"""

import re
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any

GITHUB_MAX_PER_PAGE = 100

_LINK_PATTERN = re.compile(r'<([^>]+)>;\s*rel="([^"]+)"')


class LinkHeader:
    """Relations of a ``Link`` header, e.g. ``<url>; rel="next"``."""

    def __init__(self, link_header: str | None = None):
        self.links: dict[str, str] = {
            rel: url for url, rel in _LINK_PATTERN.findall(link_header or "")
        }

    @property
    def next_url(self) -> str | None:
        return self.links.get("next")

    @property
    def has_next(self) -> bool:
        return self.next_url is not None


@dataclass
class PaginatedResponse:
    """Items of one page together with where the next page lives."""

    data: list[dict[str, Any]]
    headers: Mapping[str, str]
    url: str

    @cached_property
    def link_header(self) -> LinkHeader:
        return LinkHeader(self.headers.get("Link"))

    @property
    def has_next_page(self) -> bool:
        return self.link_header.has_next

    @property
    def next_page_url(self) -> str | None:
        return self.link_header.next_url

    @property
    def items(self) -> list[dict[str, Any]]:
        return self.data or []


class AsyncPaginator:
    """Lazily walks a paginated list endpoint.

    Each page is requested once, in order, and only when the consumer asks
    for it, so a consumer that stops early never fetches the remaining
    pages. Query parameters go out with the first request only; GitHub's
    ``next`` links already encode them.

    ``client`` is anything with an awaitable ``_fetch_paginated(url, params)``
    returning a :class:`PaginatedResponse`.
    """

    def __init__(
        self,
        client: Any,
        initial_url: str,
        params: dict[str, Any] | None = None,
        per_page: int = GITHUB_MAX_PER_PAGE,
    ):
        self.client = client
        self.initial_url = initial_url
        self.per_page = min(per_page, GITHUB_MAX_PER_PAGE)
        self.params = {**(params or {}), "per_page": self.per_page}

    async def pages(self) -> AsyncIterator[list[dict[str, Any]]]:
        """Yield one list of items per page."""
        url: str | None = self.initial_url
        params: dict[str, Any] | None = self.params

        while url is not None:
            response: PaginatedResponse = await self.client._fetch_paginated(
                url, params
            )
            params = None
            url = response.next_page_url
            yield response.items

