"""Port for the persisted settings collaborator."""

from __future__ import annotations

from typing import Protocol

from magnetlink_optimizer.domain.entities import (
    DualLlmConfig,
    FavoriteItem,
    PriorityKeyword,
    SearchEngine,
    SearchSettings,
)


class SettingsStorePort(Protocol):
    """Favorites, engines, priority keywords, LLM and search settings.

    Mutations raise ``SettingsError`` for unknown ids, duplicates and
    attempts to delete the built-in engine. ``save()`` persists a snapshot.
    """

    # Favorites
    def add_favorite(
        self,
        title: str,
        magnet_link: str,
        file_size: str | None = None,
        file_list: list[str] | None = None,
    ) -> FavoriteItem: ...

    def list_favorites(self) -> list[FavoriteItem]: ...

    def remove_favorite(self, favorite_id: str) -> None: ...

    def search_favorites(self, query: str) -> list[FavoriteItem]: ...

    # Engines
    def add_engine(self, name: str, url_template: str) -> SearchEngine: ...

    def list_engines(self) -> list[SearchEngine]: ...

    def set_engine_enabled(self, engine_id: str, enabled: bool) -> None: ...

    def delete_engine(self, engine_id: str) -> None: ...

    # Priority keywords
    def add_priority_keyword(self, keyword: str) -> PriorityKeyword: ...

    def list_priority_keywords(self) -> list[PriorityKeyword]: ...

    def delete_priority_keyword(self, keyword_id: str) -> None: ...

    # LLM / search settings
    def get_llm_config(self) -> DualLlmConfig: ...

    def update_llm_config(self, config: DualLlmConfig) -> None: ...

    def get_search_settings(self) -> SearchSettings: ...

    def update_search_settings(self, settings: SearchSettings) -> None: ...

    def save(self) -> None: ...
