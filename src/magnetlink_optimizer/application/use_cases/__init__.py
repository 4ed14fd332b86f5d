from .analysis import AnalysisUseCase
from .search import SearchUseCase
from .settings import SettingsUseCase

__all__ = ["AnalysisUseCase", "SearchUseCase", "SettingsUseCase"]
