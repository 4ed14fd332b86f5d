"""Domain models for persisted user settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from .llm import LlmConfig
from .search import FAST_PROVIDER_NAME, ProviderDefinition

DEFAULT_ENGINE_ID = "default_clmclm"
DEFAULT_ENGINE_TEMPLATE = "http://clmclm.com/search-{keyword}-1-1-{page}.html"

SORT_BY_SCORE = "score"
SORT_BY_SIZE = "size"
SORT_OPTIONS: tuple[str, ...] = (SORT_BY_SCORE, SORT_BY_SIZE)


@dataclass(frozen=True)
class FavoriteItem:
    id: str
    title: str
    magnet_link: str
    file_size: str | None = None
    file_list: list[str] = field(default_factory=list)
    created_at: str = ""  # ISO 8601, UTC


@dataclass(frozen=True)
class SearchEngine:
    """A configured engine; the built-in clmclm.com entry is not deletable."""

    id: str
    name: str
    url_template: str
    is_enabled: bool = True
    is_deletable: bool = True

    def to_definition(self) -> ProviderDefinition:
        return ProviderDefinition(
            name=self.name, url_template=self.url_template, enabled=self.is_enabled
        )


def default_engine() -> SearchEngine:
    return SearchEngine(
        id=DEFAULT_ENGINE_ID,
        name=FAST_PROVIDER_NAME,
        url_template=DEFAULT_ENGINE_TEMPLATE,
        is_enabled=True,
        is_deletable=False,
    )


@dataclass(frozen=True)
class PriorityKeyword:
    id: str
    keyword: str


@dataclass(frozen=True)
class DualLlmConfig:
    """Separate endpoints for page extraction and title analysis."""

    extraction: LlmConfig = field(default_factory=LlmConfig)
    analysis: LlmConfig = field(default_factory=LlmConfig)


@dataclass(frozen=True)
class SearchSettings:
    use_smart_filter: bool = True
    max_pages: int = 1
    sort_by: str = SORT_BY_SCORE
    title_must_contain_keyword: bool = True
