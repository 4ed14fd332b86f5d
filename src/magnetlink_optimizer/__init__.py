"""Multi-provider magnet search with optional LLM-based result cleaning."""

__version__ = "0.1.0"
