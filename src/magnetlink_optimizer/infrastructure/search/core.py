"""Multi-provider, multi-page search orchestration.

The fast provider (clmclm.com) is searched page by page first so its
results lead the output; every other (provider, page) pair then runs
concurrently and is merged in completion order. A failing pair is logged
and dropped without affecting the others.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from types import TracebackType

import structlog

from magnetlink_optimizer.domain.entities import (
    FAST_PROVIDER_NAME,
    LlmConfig,
    ProviderDefinition,
    SearchResult,
)
from magnetlink_optimizer.domain.exceptions import NoProvidersError
from magnetlink_optimizer.domain.ports import ExtractionPort
from magnetlink_optimizer.domain.providers import SearchProviderProtocol
from magnetlink_optimizer.infrastructure.providers import (
    ClmclmProvider,
    TemplatedProvider,
)

log = structlog.get_logger(__name__)


class SearchCore:
    """Runs one search across a fixed set of providers.

    Built per search invocation; ``aclose()`` (or ``async with``) releases
    every provider's HTTP client.
    """

    def __init__(self, providers: Sequence[SearchProviderProtocol]) -> None:
        self._providers = list(providers)

    @property
    def providers(self) -> list[SearchProviderProtocol]:
        return list(self._providers)

    async def __aenter__(self) -> SearchCore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        for provider in self._providers:
            try:
                await provider.cleanup()
            except Exception:  # noqa: BLE001
                log.warning(
                    "provider_cleanup_failed",
                    provider=provider.name,
                    exc_info=True,
                )

    async def _search_page(
        self, provider: SearchProviderProtocol, query: str, page: int
    ) -> list[SearchResult] | None:
        """Search one page; None means the page failed (already logged)."""
        try:
            return await provider.search(query, page)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "provider_page_failed",
                provider=provider.name,
                page=page,
                error=str(exc),
            )
            return None

    async def search_multi_page(
        self, query: str, max_pages: int
    ) -> list[SearchResult]:
        """Search pages ``1..max_pages`` of every provider.

        Raises ``NoProvidersError`` when the core has no providers.
        """
        if not self._providers:
            raise NoProvidersError()

        fast = [p for p in self._providers if p.name == FAST_PROVIDER_NAME]
        others = [p for p in self._providers if p.name != FAST_PROVIDER_NAME]
        pages = range(1, max(max_pages, 1) + 1)

        log.info(
            "search_started",
            query=query,
            max_pages=max_pages,
            fast_providers=len(fast),
            other_providers=len(others),
        )

        results: list[SearchResult] = []
        failed = 0

        for provider in fast:
            for page in pages:
                page_results = await self._search_page(provider, query, page)
                if page_results is None:
                    failed += 1
                    continue
                results.extend(page_results)

        if others:
            tasks = [
                asyncio.create_task(self._search_page(provider, query, page))
                for provider in others
                for page in pages
            ]
            for next_done in asyncio.as_completed(tasks):
                page_results = await next_done
                if page_results is None:
                    failed += 1
                    continue
                results.extend(page_results)

        log.info(
            "search_completed",
            query=query,
            result_count=len(results),
            failed_pages=failed,
        )
        return results

    async def search(self, query: str) -> list[SearchResult]:
        """Single-page search across all providers."""
        return await self.search_multi_page(query, 1)


def build_search_core(
    *,
    engines: Sequence[ProviderDefinition] = (),
    include_fast: bool = True,
    include_others: bool = True,
    extractor: ExtractionPort | None = None,
    extraction_config: LlmConfig | None = None,
    analysis_config: LlmConfig | None = None,
    priority_keywords: Sequence[str] = (),
    timeout: float | None = None,
    user_agent: str | None = None,
) -> SearchCore:
    """Assemble a ``SearchCore`` from enabled engine definitions.

    The fast provider is added only when *include_fast* is set; disabled
    definitions and the fast provider's own definition are skipped when
    building templated providers. Templated engines receive AI extraction
    when an extractor and a configured LLM endpoint exist; the extraction
    config falls back to the analysis one.
    """
    providers: list[SearchProviderProtocol] = []

    if include_fast:
        providers.append(ClmclmProvider(timeout=timeout, user_agent=user_agent))

    ai_config: LlmConfig | None = None
    for candidate in (extraction_config, analysis_config):
        if candidate is not None and candidate.is_configured:
            ai_config = candidate
            break

    if include_others:
        for engine in engines:
            if engine.is_fast_provider or not engine.enabled:
                continue
            use_ai = extractor is not None and ai_config is not None
            providers.append(
                TemplatedProvider(
                    engine.name,
                    engine.url_template,
                    extractor=extractor if use_ai else None,
                    extraction_config=ai_config if use_ai else None,
                    priority_keywords=list(priority_keywords) if use_ai else None,
                    timeout=timeout,
                    user_agent=user_agent,
                )
            )

    log.debug(
        "search_core_built",
        providers=[p.name for p in providers],
        ai_extraction=ai_config is not None and extractor is not None,
    )
    return SearchCore(providers)
