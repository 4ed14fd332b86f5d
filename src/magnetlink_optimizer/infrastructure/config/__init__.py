from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, LlmSettings

__all__ = ["AppConfig", "EnvOverrides", "LlmSettings", "load_config"]
