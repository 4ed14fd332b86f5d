"""Composition root: wires config, settings store, LLM client and use cases."""

from __future__ import annotations

import functools
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from magnetlink_optimizer.application.filtering import ResultFilter
from magnetlink_optimizer.application.use_cases import (
    AnalysisUseCase,
    SearchUseCase,
    SettingsUseCase,
)
from magnetlink_optimizer.domain.entities import LlmConfig
from magnetlink_optimizer.infrastructure.common import parse_size_to_bytes
from magnetlink_optimizer.infrastructure.config import AppConfig
from magnetlink_optimizer.infrastructure.llm import GeminiClient
from magnetlink_optimizer.infrastructure.normalizer import clean_title_fallback
from magnetlink_optimizer.infrastructure.persistence import JsonSettingsStore
from magnetlink_optimizer.infrastructure.search import build_search_core

log = structlog.get_logger(__name__)


@dataclass
class Container:
    """Everything one CLI invocation needs; call ``aclose()`` when done."""

    config: AppConfig
    store: JsonSettingsStore
    llm_client: GeminiClient
    search: SearchUseCase
    analysis: AnalysisUseCase
    settings: SettingsUseCase

    async def aclose(self) -> None:
        await self.llm_client.aclose()


def build_container(
    config: AppConfig,
    *,
    store: JsonSettingsStore | None = None,
    llm_client: GeminiClient | None = None,
) -> Container:
    """Build the object graph.

    Order matters:
        1. Settings store (engines, keywords, LLM endpoints)
        2. LLM client (shared by extraction and analysis)
        3. Search core factory + result filter factory
        4. Use cases
    """
    if store is None:
        store = JsonSettingsStore.load(
            config.state_file, default_max_pages=config.default_max_pages
        )

    if llm_client is None:
        llm_client = GeminiClient(
            max_attempts=config.llm.max_attempts,
            retry_delay_seconds=config.llm.retry_delay_seconds,
            max_html_chars=config.llm.max_html_chars,
        )

    def make_filter(
        analysis_config: LlmConfig | None, priority_keywords: Sequence[str]
    ) -> ResultFilter:
        return ResultFilter(
            llm_client if analysis_config is not None else None,
            analysis_config,
            title_fallback=clean_title_fallback,
            priority_keywords=priority_keywords,
            builtin_markers=config.llm.builtin_priority_markers,
            max_failed_batches=config.llm.max_failed_batches,
            item_timeout_seconds=config.llm.item_timeout_seconds,
        )

    core_factory = functools.partial(
        build_search_core,
        extractor=llm_client,
        timeout=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
    )

    log.debug("container_built", state_file=str(store.path))
    return Container(
        config=config,
        store=store,
        llm_client=llm_client,
        search=SearchUseCase(store, core_factory, make_filter, parse_size_to_bytes),
        analysis=AnalysisUseCase(store, make_filter, llm_client.test_connection),
        settings=SettingsUseCase(store),
    )
