"""Ports for building and running a multi-provider search."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from magnetlink_optimizer.domain.entities import (
    LlmConfig,
    ProviderDefinition,
    SearchResult,
)


class SearchCorePort(Protocol):
    """One search session over a fixed provider set."""

    async def search_multi_page(
        self, query: str, max_pages: int
    ) -> list[SearchResult]: ...

    async def aclose(self) -> None: ...


class SearchCoreFactory(Protocol):
    """Builds a fresh ``SearchCorePort`` for one invocation."""

    def __call__(
        self,
        *,
        engines: Sequence[ProviderDefinition] = (),
        include_fast: bool = True,
        include_others: bool = True,
        extraction_config: LlmConfig | None = None,
        analysis_config: LlmConfig | None = None,
        priority_keywords: Sequence[str] = (),
    ) -> SearchCorePort: ...
