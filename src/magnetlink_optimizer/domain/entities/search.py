"""Domain models for search results and provider definitions."""

from __future__ import annotations

from dataclasses import dataclass, field

# Fixed-markup provider that the aggregator searches first.
FAST_PROVIDER_NAME = "clmclm.com"


@dataclass
class SearchResult:
    """Normalized search result.

    ``magnet_link`` is the natural identity key within one search session.
    ``score`` and ``tags`` stay ``None`` until the LLM filter track runs.
    """

    title: str
    magnet_link: str

    file_size: str | None = None
    upload_date: str | None = None
    file_list: list[str] = field(default_factory=list)
    source_url: str | None = None

    # Populated by the filtering pipeline
    score: int | None = None
    tags: list[str] | None = None


@dataclass(frozen=True)
class ProviderDefinition:
    """A configured search engine as handed over by the settings store."""

    name: str
    url_template: str
    enabled: bool = True

    @property
    def is_fast_provider(self) -> bool:
        return self.name == FAST_PROVIDER_NAME
