"""Search use case: settings-driven provider search plus post-processing."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from magnetlink_optimizer.application.filtering import ResultFilterFactory
from magnetlink_optimizer.domain.entities import (
    LlmConfig,
    ProviderDefinition,
    SearchResult,
    SearchSettings,
)
from magnetlink_optimizer.domain.entities.settings import SORT_BY_SCORE, SORT_BY_SIZE
from magnetlink_optimizer.domain.exceptions import NoProvidersError, SettingsError
from magnetlink_optimizer.domain.ports import SearchCoreFactory, SettingsStorePort

log = structlog.get_logger(__name__)

SizeParser = Callable[[str], int]


def sort_results(
    results: list[SearchResult], sort_by: str, size_parser: SizeParser
) -> list[SearchResult]:
    """Stable sort, best first; unscored or sizeless results go last."""
    if sort_by == SORT_BY_SCORE:
        if all(r.score is None for r in results):
            return results
        return sorted(
            results,
            key=lambda r: (r.score is None, -(r.score or 0)),
        )
    if sort_by == SORT_BY_SIZE:
        return sorted(
            results,
            key=lambda r: -size_parser(r.file_size) if r.file_size else 0,
        )
    return results


def filter_by_keyword(results: list[SearchResult], keyword: str) -> list[SearchResult]:
    """Keep results whose title contains every whitespace-separated term."""
    terms = [t.lower() for t in keyword.split() if t]
    if not terms:
        return results
    return [r for r in results if all(t in r.title.lower() for t in terms)]


class SearchUseCase:
    """Builds a fresh search core from the stored settings for every call.

    Flow:
        1. Read enabled engines, priority keywords and LLM configs
        2. Run the search core (fast provider first, then the rest)
        3. Optional title-keyword filter
        4. Optional smart filter (priority track, then LLM track)
        5. Sort
    """

    def __init__(
        self,
        settings: SettingsStorePort,
        core_factory: SearchCoreFactory,
        filter_factory: ResultFilterFactory,
        size_parser: SizeParser,
    ) -> None:
        self._settings = settings
        self._core_factory = core_factory
        self._filter_factory = filter_factory
        self._size_parser = size_parser

    def _engines(self) -> list[ProviderDefinition]:
        return [
            e.to_definition() for e in self._settings.list_engines() if e.is_enabled
        ]

    def _priority_keywords(self) -> list[str]:
        return [k.keyword for k in self._settings.list_priority_keywords()]

    @staticmethod
    def _configured(config: LlmConfig) -> LlmConfig | None:
        return config if config.is_configured else None

    def _analysis_config(self) -> LlmConfig | None:
        return self._configured(self._settings.get_llm_config().analysis)

    async def _run(
        self,
        keyword: str,
        max_pages: int,
        *,
        include_fast: bool,
        include_others: bool,
    ) -> list[SearchResult]:
        engines = self._engines()
        fast_enabled = any(e.is_fast_provider for e in engines)
        others = [e for e in engines if not e.is_fast_provider]

        use_fast = include_fast and fast_enabled
        use_others = include_others and bool(others)
        if not use_fast and not use_others:
            raise NoProvidersError(
                "No search engines available for this operation."
            )

        llm = self._settings.get_llm_config()
        core = self._core_factory(
            engines=others,
            include_fast=use_fast,
            include_others=use_others,
            extraction_config=self._configured(llm.extraction),
            analysis_config=self._configured(llm.analysis),
            priority_keywords=self._priority_keywords(),
        )
        try:
            return await core.search_multi_page(keyword, max_pages)
        finally:
            await core.aclose()

    async def _post_process(
        self,
        keyword: str,
        results: list[SearchResult],
        settings: SearchSettings,
        smart_filter: bool | None,
    ) -> list[SearchResult]:
        if settings.title_must_contain_keyword:
            before = len(results)
            results = filter_by_keyword(results, keyword)
            log.debug(
                "search_keyword_filter",
                before=before,
                after=len(results),
            )

        use_smart = settings.use_smart_filter if smart_filter is None else smart_filter
        if use_smart:
            analysis = self._analysis_config()
            result_filter = self._filter_factory(analysis, self._priority_keywords())
            results = await result_filter.filter(results)

        return sort_results(results, settings.sort_by, self._size_parser)

    async def search_multi_page(
        self,
        keyword: str,
        max_pages: int | None = None,
        *,
        smart_filter: bool | None = None,
    ) -> list[SearchResult]:
        """Search every enabled engine.

        Raises ``NoProvidersError`` when no engine is enabled and
        ``SettingsError`` when the smart filter is explicitly requested
        without an analysis API key.
        """
        if smart_filter and self._analysis_config() is None:
            raise SettingsError(
                "Smart filter requested but no analysis API key is configured"
            )

        settings = self._settings.get_search_settings()
        pages = max_pages or settings.max_pages
        results = await self._run(
            keyword, pages, include_fast=True, include_others=True
        )
        return await self._post_process(keyword, results, settings, smart_filter)

    async def search_fast_provider_first(
        self, keyword: str, max_pages: int | None = None
    ) -> list[SearchResult]:
        """Fast provider only; empty when it is disabled."""
        pages = max_pages or self._settings.get_search_settings().max_pages
        try:
            return await self._run(
                keyword, pages, include_fast=True, include_others=False
            )
        except NoProvidersError:
            return []

    async def search_other_engines(
        self, keyword: str, max_pages: int | None = None
    ) -> list[SearchResult]:
        """All enabled engines except the fast provider; empty when none."""
        pages = max_pages or self._settings.get_search_settings().max_pages
        try:
            return await self._run(
                keyword, pages, include_fast=False, include_others=True
            )
        except NoProvidersError:
            return []
