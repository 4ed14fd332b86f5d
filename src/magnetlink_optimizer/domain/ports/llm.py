"""Ports for the external text-generation capability."""

from __future__ import annotations

from typing import Protocol

from magnetlink_optimizer.domain.entities import (
    AnalysisItem,
    ExtractedBasicInfo,
    LlmConfig,
    TitleAnalysis,
)


class ExtractionPort(Protocol):
    """Turns raw page HTML into basic result fields (single best-effort call)."""

    async def extract_basic_info(
        self, html: str, config: LlmConfig
    ) -> list[ExtractedBasicInfo]: ...


class AnalysisPort(Protocol):
    """Cleans titles, scores purity and extracts tags for a batch of items."""

    async def analyze_titles(
        self, items: list[AnalysisItem], config: LlmConfig
    ) -> list[TitleAnalysis]: ...

    async def analyze_titles_with_retry(
        self, items: list[AnalysisItem], config: LlmConfig
    ) -> list[TitleAnalysis]: ...
