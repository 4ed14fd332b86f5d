from .settings_store import AppData, JsonSettingsStore

__all__ = ["AppData", "JsonSettingsStore"]
