"""Tests for the multi-provider search core and its factory."""

from __future__ import annotations

import asyncio

import pytest

from magnetlink_optimizer.domain.entities import (
    FAST_PROVIDER_NAME,
    LlmConfig,
    ProviderDefinition,
    SearchResult,
)
from magnetlink_optimizer.domain.exceptions import FetchError, NoProvidersError
from magnetlink_optimizer.infrastructure.providers import (
    ClmclmProvider,
    TemplatedProvider,
)
from magnetlink_optimizer.infrastructure.search import SearchCore, build_search_core

# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class _FakeProvider:
    def __init__(
        self,
        name: str,
        *,
        delay: float = 0.0,
        fail_pages: tuple[int, ...] = (),
    ) -> None:
        self.name = name
        self._delay = delay
        self._fail_pages = fail_pages
        self.calls: list[tuple[str, int]] = []
        self.cleaned_up = False

    async def search(self, query: str, page: int) -> list[SearchResult]:
        self.calls.append((query, page))
        if self._delay:
            await asyncio.sleep(self._delay)
        if page in self._fail_pages:
            raise FetchError(f"https://{self.name}/{page}", "HTTP 500")
        return [
            SearchResult(
                title=f"{self.name} p{page}",
                magnet_link=f"magnet:?xt=urn:btih:{self.name}-{page}",
                file_list=["a.mkv"],
            )
        ]

    async def cleanup(self) -> None:
        self.cleaned_up = True


class _BrokenCleanupProvider(_FakeProvider):
    async def cleanup(self) -> None:
        raise RuntimeError("close failed")


def _titles(results: list[SearchResult]) -> list[str]:
    return [r.title for r in results]


# ---------------------------------------------------------------------------
# SearchCore
# ---------------------------------------------------------------------------


class TestSearchCore:
    @pytest.mark.asyncio()
    async def test_no_providers_raises(self) -> None:
        with pytest.raises(NoProvidersError):
            await SearchCore([]).search_multi_page("x", 1)

    @pytest.mark.asyncio()
    async def test_fast_provider_results_come_first(self) -> None:
        # The fast provider is the slowest, yet its pages still lead.
        fast = _FakeProvider(FAST_PROVIDER_NAME, delay=0.02)
        other = _FakeProvider("other")
        core = SearchCore([other, fast])

        results = await core.search_multi_page("x", 2)

        assert _titles(results)[:2] == [
            f"{FAST_PROVIDER_NAME} p1",
            f"{FAST_PROVIDER_NAME} p2",
        ]
        assert sorted(_titles(results)[2:]) == ["other p1", "other p2"]

    @pytest.mark.asyncio()
    async def test_fast_pages_requested_in_order(self) -> None:
        fast = _FakeProvider(FAST_PROVIDER_NAME)
        await SearchCore([fast]).search_multi_page("iron", 3)
        assert fast.calls == [("iron", 1), ("iron", 2), ("iron", 3)]

    @pytest.mark.asyncio()
    async def test_failed_pages_are_dropped(self) -> None:
        fast = _FakeProvider(FAST_PROVIDER_NAME, fail_pages=(1,))
        good = _FakeProvider("good")
        bad = _FakeProvider("bad", fail_pages=(1, 2))
        core = SearchCore([fast, good, bad])

        results = await core.search_multi_page("x", 2)

        assert _titles(results)[0] == f"{FAST_PROVIDER_NAME} p2"
        assert sorted(_titles(results)[1:]) == ["good p1", "good p2"]

    @pytest.mark.asyncio()
    async def test_all_pages_failing_yields_empty(self) -> None:
        bad = _FakeProvider("bad", fail_pages=(1,))
        assert await SearchCore([bad]).search("x") == []

    @pytest.mark.asyncio()
    async def test_other_providers_run_concurrently(self) -> None:
        slow = [_FakeProvider(f"slow{i}", delay=0.05) for i in range(4)]
        core = SearchCore(slow)

        loop = asyncio.get_running_loop()
        started = loop.time()
        results = await core.search_multi_page("x", 2)
        elapsed = loop.time() - started

        assert len(results) == 8
        assert elapsed < 0.3

    @pytest.mark.asyncio()
    async def test_context_manager_cleans_up(self) -> None:
        first = _BrokenCleanupProvider("broken")
        second = _FakeProvider("ok")

        async with SearchCore([first, second]) as core:
            await core.search("x")

        assert second.cleaned_up


# ---------------------------------------------------------------------------
# build_search_core
# ---------------------------------------------------------------------------


class TestBuildSearchCore:
    def _engines(self) -> list[ProviderDefinition]:
        return [
            ProviderDefinition(
                name=FAST_PROVIDER_NAME,
                url_template="http://clmclm.com/search-{keyword}-1-1-{page}.html",
            ),
            ProviderDefinition(
                name="custom", url_template="https://c.example/?q={keyword}"
            ),
            ProviderDefinition(
                name="off", url_template="https://o.example/?q={keyword}", enabled=False
            ),
        ]

    def test_fast_and_enabled_templated(self) -> None:
        core = build_search_core(engines=self._engines())
        providers = core.providers

        assert isinstance(providers[0], ClmclmProvider)
        assert [p.name for p in providers] == [FAST_PROVIDER_NAME, "custom"]

    def test_fast_only(self) -> None:
        core = build_search_core(engines=self._engines(), include_others=False)
        assert [p.name for p in core.providers] == [FAST_PROVIDER_NAME]

    def test_others_only(self) -> None:
        core = build_search_core(engines=self._engines(), include_fast=False)
        assert [p.name for p in core.providers] == ["custom"]

    def test_ai_extraction_uses_analysis_config_as_fallback(
        self, llm_config: LlmConfig
    ) -> None:
        core = build_search_core(
            engines=self._engines(),
            include_fast=False,
            extractor=object(),  # type: ignore[arg-type]
            extraction_config=None,
            analysis_config=llm_config,
            priority_keywords=["4k"],
        )
        (provider,) = core.providers
        assert isinstance(provider, TemplatedProvider)
        assert provider.uses_ai_extraction

    def test_unconfigured_llm_disables_ai_extraction(self) -> None:
        core = build_search_core(
            engines=self._engines(),
            include_fast=False,
            extractor=object(),  # type: ignore[arg-type]
            extraction_config=LlmConfig(api_key=""),
        )
        (provider,) = core.providers
        assert isinstance(provider, TemplatedProvider)
        assert not provider.uses_ai_extraction
