from .analysis import (
    AnalysisItem,
    DetailedAnalysisResult,
    ExtractedBasicInfo,
    TitleAnalysis,
)
from .llm import LlmConfig
from .search import FAST_PROVIDER_NAME, ProviderDefinition, SearchResult
from .settings import (
    DualLlmConfig,
    FavoriteItem,
    PriorityKeyword,
    SearchEngine,
    SearchSettings,
)

__all__ = [
    "FAST_PROVIDER_NAME",
    "AnalysisItem",
    "DetailedAnalysisResult",
    "DualLlmConfig",
    "ExtractedBasicInfo",
    "FavoriteItem",
    "LlmConfig",
    "PriorityKeyword",
    "ProviderDefinition",
    "SearchEngine",
    "SearchResult",
    "SearchSettings",
    "TitleAnalysis",
]
