"""Provider for operator-configured search engines.

The engine is described by a URL template with ``{keyword}`` and either
``{page}`` (1-based) or ``{page-1}`` (0-based) placeholders. Pages are
parsed by the extraction model when one is configured, with the generic
table/regex parser as fallback.
"""

from __future__ import annotations

from magnetlink_optimizer.domain.entities import LlmConfig, SearchResult
from magnetlink_optimizer.domain.ports import ExtractionPort
from magnetlink_optimizer.infrastructure.normalizer import (
    clean_html_text,
    generate_file_list_from_title,
    is_magnet_link,
    origin_of,
    parse_generic_results,
    resolve_source_url,
)

from .constants import BROWSER_HEADERS
from .httpx_base import HttpxProviderBase


def build_search_url(url_template: str, query: str, page: int) -> str:
    """Fill a URL template for *query* and 1-based *page*."""
    url = url_template.replace("{keyword}", query)
    if "{page-1}" in url:
        return url.replace("{page-1}", str(max(page - 1, 0)))
    return url.replace("{page}", str(page))


def partition_priority(
    results: list[SearchResult], keywords: list[str]
) -> tuple[list[SearchResult], list[SearchResult]]:
    """Split results into (title matches any keyword, the rest); case-insensitive."""
    lowered = [kw.lower() for kw in keywords if kw.strip()]
    if not lowered:
        return [], list(results)

    priority: list[SearchResult] = []
    regular: list[SearchResult] = []
    for result in results:
        title = result.title.lower()
        if any(kw in title for kw in lowered):
            priority.append(result)
        else:
            regular.append(result)
    return priority, regular


class TemplatedProvider(HttpxProviderBase):
    """Search engine defined only by a name and a URL template."""

    _extra_headers = BROWSER_HEADERS

    def __init__(
        self,
        name: str,
        url_template: str,
        *,
        extractor: ExtractionPort | None = None,
        extraction_config: LlmConfig | None = None,
        priority_keywords: list[str] | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        self.name = name
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.url_template = url_template
        self._extractor = extractor
        self._extraction_config = extraction_config
        self._priority_keywords = list(priority_keywords or [])
        self._origin = origin_of(url_template)

    @property
    def uses_ai_extraction(self) -> bool:
        return self._extractor is not None and self._extraction_config is not None

    def build_url(self, query: str, page: int) -> str:
        return build_search_url(self.url_template, query, page)

    async def search(self, query: str, page: int) -> list[SearchResult]:
        url = self.build_url(query, page)
        html = await self._fetch_page(url)
        if not self._usable_html(url, html):
            return []

        if self._extractor is not None and self._extraction_config is not None:
            results = await self._extract_with_ai(
                html, self._extractor, self._extraction_config
            )
        else:
            results = parse_generic_results(html, self._origin)

        self._log.info(
            "provider_page_parsed",
            page=page,
            result_count=len(results),
        )
        return results

    # ------------------------------------------------------------------
    # AI extraction
    # ------------------------------------------------------------------

    async def _extract_with_ai(
        self, html: str, extractor: ExtractionPort, config: LlmConfig
    ) -> list[SearchResult]:
        """Model extraction with priority ordering; generic parsing on failure."""
        try:
            extracted = await extractor.extract_basic_info(html, config)
        except Exception as exc:  # noqa: BLE001
            self._log.warning(
                "ai_extraction_failed",
                error=str(exc),
                html_chars=len(html),
            )
            return parse_generic_results(html, self._origin)

        results: list[SearchResult] = []
        for info in extracted:
            if not is_magnet_link(info.magnet_link):
                self._log.debug("ai_invalid_magnet_skipped", magnet=info.magnet_link)
                continue
            title = clean_html_text(info.title)
            results.append(
                SearchResult(
                    title=title,
                    magnet_link=info.magnet_link,
                    file_size=info.file_size,
                    file_list=generate_file_list_from_title(title),
                    source_url=(
                        resolve_source_url(info.source_url, self._origin)
                        if info.source_url
                        else None
                    ),
                )
            )

        if not results:
            self._log.warning("ai_extraction_empty")
            return parse_generic_results(html, self._origin)

        priority, regular = partition_priority(results, self._priority_keywords)
        self._log.info(
            "ai_extraction_completed",
            priority_count=len(priority),
            regular_count=len(regular),
        )
        return priority + regular
