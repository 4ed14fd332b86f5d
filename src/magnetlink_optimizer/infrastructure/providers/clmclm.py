"""clmclm.com provider (structured markup, fetched first by the search core)."""

from __future__ import annotations

from magnetlink_optimizer.domain.entities import FAST_PROVIDER_NAME, SearchResult
from magnetlink_optimizer.infrastructure.normalizer import (
    origin_of,
    parse_structured_results,
)

from .constants import CLMCLM_BASE_URL
from .httpx_base import HttpxProviderBase


class ClmclmProvider(HttpxProviderBase):
    """Searches clmclm.com and parses its ``div.ssbox`` result cards."""

    name = FAST_PROVIDER_NAME

    def __init__(
        self,
        base_url: str = CLMCLM_BASE_URL,
        *,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.base_url = base_url.rstrip("/")

    @classmethod
    def with_base_url(cls, base_url: str) -> ClmclmProvider:
        """Point the provider at a mirror or a local test server."""
        return cls(base_url)

    def build_url(self, query: str, page: int) -> str:
        return f"{self.base_url}/search-{query}-1-1-{page}.html"

    async def search(self, query: str, page: int) -> list[SearchResult]:
        url = self.build_url(query, page)
        html = await self._fetch_page(url)
        results = parse_structured_results(html, origin_of(self.base_url))
        self._log.info(
            "provider_page_parsed",
            page=page,
            result_count=len(results),
        )
        return results
