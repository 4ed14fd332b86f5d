"""Settings use case: validated mutations that persist immediately."""

from __future__ import annotations

import structlog

from magnetlink_optimizer.domain.entities import (
    DualLlmConfig,
    FavoriteItem,
    PriorityKeyword,
    SearchEngine,
    SearchResult,
    SearchSettings,
)
from magnetlink_optimizer.domain.entities.settings import SORT_OPTIONS
from magnetlink_optimizer.domain.exceptions import SettingsError
from magnetlink_optimizer.domain.ports import SettingsStorePort

log = structlog.get_logger(__name__)

KEYWORD_PLACEHOLDER = "{keyword}"


class SettingsUseCase:
    """Wraps ``SettingsStorePort``; every successful mutation is saved."""

    def __init__(self, store: SettingsStorePort) -> None:
        self._store = store

    def _persist(self, event: str, **fields: object) -> None:
        self._store.save()
        log.info(event, **fields)

    # --- favorites ---

    def add_favorite(self, result: SearchResult) -> FavoriteItem:
        item = self._store.add_favorite(
            result.title,
            result.magnet_link,
            result.file_size,
            list(result.file_list),
        )
        self._persist("favorite_added", favorite_id=item.id)
        return item

    def list_favorites(self) -> list[FavoriteItem]:
        return self._store.list_favorites()

    def remove_favorite(self, favorite_id: str) -> None:
        self._store.remove_favorite(favorite_id)
        self._persist("favorite_removed", favorite_id=favorite_id)

    def search_favorites(self, query: str) -> list[FavoriteItem]:
        return self._store.search_favorites(query)

    # --- engines ---

    def add_engine(self, name: str, url_template: str) -> SearchEngine:
        name = name.strip()
        url_template = url_template.strip()
        if not name:
            raise SettingsError("Engine name must not be empty")
        if KEYWORD_PLACEHOLDER not in url_template:
            raise SettingsError(
                f"URL template must contain the {KEYWORD_PLACEHOLDER} placeholder"
            )
        engine = self._store.add_engine(name, url_template)
        self._persist("engine_added", engine_id=engine.id, name=name)
        return engine

    def list_engines(self) -> list[SearchEngine]:
        return self._store.list_engines()

    def set_engine_enabled(self, engine_id: str, enabled: bool) -> None:
        self._store.set_engine_enabled(engine_id, enabled)
        self._persist("engine_status_updated", engine_id=engine_id, enabled=enabled)

    def delete_engine(self, engine_id: str) -> None:
        self._store.delete_engine(engine_id)
        self._persist("engine_deleted", engine_id=engine_id)

    # --- priority keywords ---

    def add_priority_keyword(self, keyword: str) -> PriorityKeyword:
        keyword = keyword.strip()
        if not keyword:
            raise SettingsError("Priority keyword must not be empty")
        item = self._store.add_priority_keyword(keyword)
        self._persist("priority_keyword_added", keyword_id=item.id)
        return item

    def list_priority_keywords(self) -> list[PriorityKeyword]:
        return self._store.list_priority_keywords()

    def delete_priority_keyword(self, keyword_id: str) -> None:
        self._store.delete_priority_keyword(keyword_id)
        self._persist("priority_keyword_deleted", keyword_id=keyword_id)

    # --- LLM / search settings ---

    def get_llm_config(self) -> DualLlmConfig:
        return self._store.get_llm_config()

    def update_llm_config(self, config: DualLlmConfig) -> None:
        for label, single in (
            ("extraction", config.extraction),
            ("analysis", config.analysis),
        ):
            if single.batch_size < 1:
                raise SettingsError(f"{label} batch_size must be >= 1")
        self._store.update_llm_config(config)
        self._persist("llm_config_updated")

    def get_search_settings(self) -> SearchSettings:
        return self._store.get_search_settings()

    def update_search_settings(self, settings: SearchSettings) -> None:
        if settings.max_pages < 1:
            raise SettingsError("max_pages must be >= 1")
        if settings.sort_by not in SORT_OPTIONS:
            raise SettingsError(
                f"sort_by must be one of: {', '.join(SORT_OPTIONS)}"
            )
        self._store.update_search_settings(settings)
        self._persist("search_settings_updated")
