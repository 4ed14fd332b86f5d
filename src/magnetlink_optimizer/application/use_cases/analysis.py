"""Analysis use case: on-demand LLM analysis and endpoint checks."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Literal

import structlog

from magnetlink_optimizer.application.filtering import ResultFilterFactory
from magnetlink_optimizer.domain.entities import (
    DetailedAnalysisResult,
    LlmConfig,
    SearchResult,
)
from magnetlink_optimizer.domain.exceptions import SettingsError
from magnetlink_optimizer.domain.ports import SettingsStorePort

log = structlog.get_logger(__name__)

EndpointKind = Literal["extraction", "analysis"]
ConnectionTester = Callable[[LlmConfig], Awaitable[str]]


class AnalysisUseCase:
    """Analyzes results against the stored analysis endpoint."""

    def __init__(
        self,
        settings: SettingsStorePort,
        filter_factory: ResultFilterFactory,
        connection_tester: ConnectionTester,
    ) -> None:
        self._settings = settings
        self._filter_factory = filter_factory
        self._connection_tester = connection_tester

    def _analysis_config(self) -> LlmConfig:
        config = self._settings.get_llm_config().analysis
        if not config.is_configured:
            raise SettingsError("No analysis API key is configured")
        return config

    async def analyze(self, result: SearchResult) -> DetailedAnalysisResult:
        """Single result with retry; raises ``AnalysisExhaustedError``."""
        result_filter = self._filter_factory(self._analysis_config(), ())
        return await result_filter.analyze(result)

    async def batch_analyze(
        self, results: list[SearchResult]
    ) -> list[DetailedAnalysisResult]:
        if not results:
            return []
        result_filter = self._filter_factory(self._analysis_config(), ())
        analyzed = await result_filter.batch_analyze(results)
        log.info(
            "batch_analysis_completed",
            requested=len(results),
            analyzed=len(analyzed),
        )
        return analyzed

    async def test_connection(self, kind: EndpointKind) -> str:
        llm = self._settings.get_llm_config()
        config = llm.extraction if kind == "extraction" else llm.analysis
        if not config.is_configured:
            raise SettingsError(f"No {kind} API key is configured")
        return await self._connection_tester(config)
