from .llm import AnalysisPort, ExtractionPort
from .search import SearchCoreFactory, SearchCorePort
from .settings import SettingsStorePort

__all__ = [
    "AnalysisPort",
    "ExtractionPort",
    "SearchCoreFactory",
    "SearchCorePort",
    "SettingsStorePort",
]
