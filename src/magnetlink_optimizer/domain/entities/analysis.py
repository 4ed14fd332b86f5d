"""Domain models for LLM extraction and title analysis."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExtractedBasicInfo:
    """Raw entry pulled out of a result page by the extraction model."""

    title: str
    magnet_link: str
    file_size: str | None = None
    source_url: str | None = None


@dataclass(frozen=True)
class AnalysisItem:
    """Input of one title analysis: a title and its file names."""

    title: str
    file_list: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TitleAnalysis:
    """Model output for one ``AnalysisItem``."""

    cleaned_title: str
    purity_score: int
    tags: list[str] = field(default_factory=list)


@dataclass
class DetailedAnalysisResult:
    """Analysis outcome merged with the pass-through fields of a result.

    ``error`` is set when the analysis failed and the entry carries
    placeholder values (neutral score, diagnostic tag).
    """

    title: str
    purity_score: int
    tags: list[str]
    magnet_link: str
    file_size: str | None = None
    file_list: list[str] = field(default_factory=list)
    error: str | None = None
