from .core import SearchCore, build_search_core

__all__ = ["SearchCore", "build_search_core"]
