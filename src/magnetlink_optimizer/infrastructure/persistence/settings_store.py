"""JSON-file settings store.

All settings live in one ``AppData`` structure guarded by a single
``threading.Lock``. The lock is only held for synchronous read/mutate/copy
steps, never across an ``await``. ``save()`` writes a pretty-printed JSON
snapshot atomically; a file that fails to parse on load is copied to
``*.json.backup`` and defaults are used.
"""

from __future__ import annotations

import json
import shutil
import threading
import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from magnetlink_optimizer.domain.entities import (
    DualLlmConfig,
    FavoriteItem,
    LlmConfig,
    PriorityKeyword,
    SearchEngine,
    SearchSettings,
)
from magnetlink_optimizer.domain.entities.settings import default_engine
from magnetlink_optimizer.domain.exceptions import SettingsError

log = structlog.get_logger(__name__)

DATA_VERSION = "1.0.0"


@dataclass
class AppData:
    favorites: list[FavoriteItem] = field(default_factory=list)
    search_engines: list[SearchEngine] = field(
        default_factory=lambda: [default_engine()]
    )
    priority_keywords: list[PriorityKeyword] = field(default_factory=list)
    llm_config: DualLlmConfig = field(default_factory=DualLlmConfig)
    search_settings: SearchSettings = field(default_factory=SearchSettings)
    version: str = DATA_VERSION


# ----------------------------------------------------------------------
# (De)serialization
# ----------------------------------------------------------------------


def _serialize(data: AppData) -> str:
    payload = {
        "favorites": [asdict(f) for f in data.favorites],
        "search_engines": [asdict(e) for e in data.search_engines],
        "priority_keywords": [asdict(k) for k in data.priority_keywords],
        "llm_config": {
            "extraction_config": asdict(data.llm_config.extraction),
            "analysis_config": asdict(data.llm_config.analysis),
        },
        "search_settings": asdict(data.search_settings),
        "version": data.version,
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _deserialize_llm(raw: dict[str, Any] | None) -> LlmConfig:
    if not raw:
        return LlmConfig()
    defaults = LlmConfig()
    return LlmConfig(
        provider=raw.get("provider", defaults.provider),
        api_key=raw.get("api_key", defaults.api_key),
        api_base=raw.get("api_base", defaults.api_base),
        model=raw.get("model", defaults.model),
        batch_size=int(raw.get("batch_size", defaults.batch_size)),
    )


def _deserialize(text: str) -> AppData:
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("settings root must be a JSON object")

    engines = [SearchEngine(**e) for e in raw.get("search_engines", [])]
    # The built-in engine is restored if an older file lost it.
    if not any(not e.is_deletable for e in engines):
        engines.insert(0, default_engine())

    llm_raw = raw.get("llm_config") or {}
    return AppData(
        favorites=[FavoriteItem(**f) for f in raw.get("favorites", [])],
        search_engines=engines,
        priority_keywords=[
            PriorityKeyword(**k) for k in raw.get("priority_keywords", [])
        ],
        llm_config=DualLlmConfig(
            extraction=_deserialize_llm(llm_raw.get("extraction_config")),
            analysis=_deserialize_llm(llm_raw.get("analysis_config")),
        ),
        search_settings=SearchSettings(**raw.get("search_settings", {})),
        version=raw.get("version", DATA_VERSION),
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ----------------------------------------------------------------------
# Store
# ----------------------------------------------------------------------


class JsonSettingsStore:
    """Implements ``SettingsStorePort`` on top of a JSON snapshot file."""

    def __init__(self, path: Path, data: AppData | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._data = data if data is not None else AppData()

    @classmethod
    def load(cls, path: Path, *, default_max_pages: int = 1) -> JsonSettingsStore:
        """Load *path*; missing or unreadable files yield defaults.

        *default_max_pages* seeds the search settings of a fresh store.
        """
        defaults = AppData(search_settings=SearchSettings(max_pages=default_max_pages))
        if not path.exists():
            log.info("settings_file_missing", path=str(path))
            return cls(path, defaults)

        try:
            data = _deserialize(path.read_text(encoding="utf-8"))
        except (ValueError, TypeError, AttributeError) as exc:
            backup = path.with_suffix(".json.backup")
            log.warning(
                "settings_file_corrupt",
                path=str(path),
                backup=str(backup),
                error=str(exc),
            )
            try:
                shutil.copyfile(path, backup)
            except OSError:
                log.warning("settings_backup_failed", backup=str(backup), exc_info=True)
            return cls(path, defaults)

        log.debug("settings_loaded", path=str(path))
        return cls(path, data)

    @property
    def path(self) -> Path:
        return self._path

    def save(self) -> None:
        with self._lock:
            content = _serialize(self._data)

        tmp = self._path.with_suffix(".json.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            log.error("settings_save_failed", path=str(self._path), error=str(exc))
            raise SettingsError(f"Failed to save settings: {exc}") from exc

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def add_favorite(
        self,
        title: str,
        magnet_link: str,
        file_size: str | None = None,
        file_list: list[str] | None = None,
    ) -> FavoriteItem:
        with self._lock:
            if any(f.magnet_link == magnet_link for f in self._data.favorites):
                raise SettingsError("Item already in favorites")
            item = FavoriteItem(
                id=str(uuid.uuid4()),
                title=title,
                magnet_link=magnet_link,
                file_size=file_size,
                file_list=list(file_list or []),
                created_at=_now_iso(),
            )
            self._data.favorites.append(item)
            return item

    def list_favorites(self) -> list[FavoriteItem]:
        with self._lock:
            return list(self._data.favorites)

    def remove_favorite(self, favorite_id: str) -> None:
        with self._lock:
            before = len(self._data.favorites)
            self._data.favorites = [
                f for f in self._data.favorites if f.id != favorite_id
            ]
            if len(self._data.favorites) == before:
                raise SettingsError("Favorite item not found")

    def search_favorites(self, query: str) -> list[FavoriteItem]:
        needle = query.lower()
        with self._lock:
            return [f for f in self._data.favorites if needle in f.title.lower()]

    # ------------------------------------------------------------------
    # Engines
    # ------------------------------------------------------------------

    def add_engine(self, name: str, url_template: str) -> SearchEngine:
        engine = SearchEngine(
            id=str(uuid.uuid4()),
            name=name,
            url_template=url_template,
            is_enabled=True,
            is_deletable=True,
        )
        with self._lock:
            self._data.search_engines.append(engine)
        return engine

    def list_engines(self) -> list[SearchEngine]:
        with self._lock:
            return list(self._data.search_engines)

    def set_engine_enabled(self, engine_id: str, enabled: bool) -> None:
        with self._lock:
            for index, engine in enumerate(self._data.search_engines):
                if engine.id == engine_id:
                    self._data.search_engines[index] = replace(
                        engine, is_enabled=enabled
                    )
                    return
            raise SettingsError("Search engine not found")

    def delete_engine(self, engine_id: str) -> None:
        with self._lock:
            engine = next(
                (e for e in self._data.search_engines if e.id == engine_id), None
            )
            if engine is None:
                raise SettingsError("Search engine not found")
            if not engine.is_deletable:
                raise SettingsError("Cannot delete default search engine")
            self._data.search_engines.remove(engine)

    # ------------------------------------------------------------------
    # Priority keywords
    # ------------------------------------------------------------------

    def add_priority_keyword(self, keyword: str) -> PriorityKeyword:
        with self._lock:
            if any(k.keyword == keyword for k in self._data.priority_keywords):
                raise SettingsError("Keyword already exists")
            item = PriorityKeyword(id=str(uuid.uuid4()), keyword=keyword)
            self._data.priority_keywords.append(item)
            return item

    def list_priority_keywords(self) -> list[PriorityKeyword]:
        with self._lock:
            return list(self._data.priority_keywords)

    def delete_priority_keyword(self, keyword_id: str) -> None:
        with self._lock:
            before = len(self._data.priority_keywords)
            self._data.priority_keywords = [
                k for k in self._data.priority_keywords if k.id != keyword_id
            ]
            if len(self._data.priority_keywords) == before:
                raise SettingsError("Priority keyword not found")

    # ------------------------------------------------------------------
    # LLM / search settings
    # ------------------------------------------------------------------

    def get_llm_config(self) -> DualLlmConfig:
        with self._lock:
            return self._data.llm_config

    def update_llm_config(self, config: DualLlmConfig) -> None:
        with self._lock:
            self._data.llm_config = config

    def get_search_settings(self) -> SearchSettings:
        with self._lock:
            return self._data.search_settings

    def update_search_settings(self, settings: SearchSettings) -> None:
        with self._lock:
            self._data.search_settings = settings
