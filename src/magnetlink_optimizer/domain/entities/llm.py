"""LLM endpoint configuration consumed by the adapters."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash-lite-preview-06-17"
DEFAULT_BATCH_SIZE = 5


@dataclass(frozen=True)
class LlmConfig:
    """One model endpoint (either the extraction or the analysis one)."""

    provider: str = DEFAULT_LLM_PROVIDER
    api_key: str = ""
    api_base: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    batch_size: int = DEFAULT_BATCH_SIZE

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())
