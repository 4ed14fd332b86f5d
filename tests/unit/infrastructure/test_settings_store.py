"""Tests for the JSON settings store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from magnetlink_optimizer.domain.entities import (
    DualLlmConfig,
    LlmConfig,
    SearchSettings,
)
from magnetlink_optimizer.domain.entities.settings import DEFAULT_ENGINE_ID
from magnetlink_optimizer.domain.exceptions import SettingsError
from magnetlink_optimizer.infrastructure.persistence import JsonSettingsStore

MAGNET = "magnet:?xt=urn:btih:" + "a" * 40

# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


class TestLoadSave:
    def test_missing_file_yields_defaults(self, state_file: Path) -> None:
        store = JsonSettingsStore.load(state_file, default_max_pages=4)

        (engine,) = store.list_engines()
        assert engine.id == DEFAULT_ENGINE_ID
        assert not engine.is_deletable
        assert store.get_search_settings().max_pages == 4
        assert store.list_favorites() == []
        assert not state_file.exists()

    def test_round_trip(self, settings_store: JsonSettingsStore) -> None:
        settings_store.add_favorite("Iron Man", MAGNET, "4 GB", ["a.mkv"])
        settings_store.add_engine("custom", "https://c.example/?q={keyword}")
        settings_store.add_priority_keyword("4K")
        settings_store.update_llm_config(
            DualLlmConfig(analysis=LlmConfig(api_key="k", batch_size=3))
        )
        settings_store.update_search_settings(
            SearchSettings(max_pages=2, sort_by="size")
        )
        settings_store.save()

        reloaded = JsonSettingsStore.load(settings_store.path)

        (favorite,) = reloaded.list_favorites()
        assert favorite.title == "Iron Man"
        assert favorite.file_list == ["a.mkv"]
        assert [e.name for e in reloaded.list_engines()] == ["clmclm.com", "custom"]
        assert [k.keyword for k in reloaded.list_priority_keywords()] == ["4K"]
        assert reloaded.get_llm_config().analysis.api_key == "k"
        assert reloaded.get_llm_config().analysis.batch_size == 3
        assert reloaded.get_search_settings().sort_by == "size"

    def test_saved_file_layout(self, settings_store: JsonSettingsStore) -> None:
        settings_store.save()
        raw = json.loads(settings_store.path.read_text(encoding="utf-8"))

        assert set(raw["llm_config"]) == {"extraction_config", "analysis_config"}
        assert raw["version"] == "1.0.0"
        assert not settings_store.path.with_suffix(".json.tmp").exists()

    def test_corrupt_file_is_backed_up(self, state_file: Path) -> None:
        state_file.parent.mkdir(parents=True)
        state_file.write_text("{not json", encoding="utf-8")

        store = JsonSettingsStore.load(state_file)

        backup = state_file.with_suffix(".json.backup")
        assert backup.read_text(encoding="utf-8") == "{not json"
        assert [e.id for e in store.list_engines()] == [DEFAULT_ENGINE_ID]

    def test_builtin_engine_restored(self, state_file: Path) -> None:
        state_file.parent.mkdir(parents=True)
        state_file.write_text(
            json.dumps(
                {
                    "search_engines": [
                        {
                            "id": "x",
                            "name": "custom",
                            "url_template": "https://c.example/?q={keyword}",
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )

        store = JsonSettingsStore.load(state_file)

        assert [e.id for e in store.list_engines()] == [DEFAULT_ENGINE_ID, "x"]

    def test_save_failure_raises_settings_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        store = JsonSettingsStore(blocker / "nested" / "app_data.json")

        with pytest.raises(SettingsError, match="Failed to save"):
            store.save()


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


class TestFavorites:
    def test_duplicate_magnet_rejected(
        self, settings_store: JsonSettingsStore
    ) -> None:
        settings_store.add_favorite("A", MAGNET)
        with pytest.raises(SettingsError, match="already in favorites"):
            settings_store.add_favorite("B", MAGNET)

    def test_remove(self, settings_store: JsonSettingsStore) -> None:
        item = settings_store.add_favorite("A", MAGNET)
        settings_store.remove_favorite(item.id)
        assert settings_store.list_favorites() == []

    def test_remove_unknown(self, settings_store: JsonSettingsStore) -> None:
        with pytest.raises(SettingsError, match="not found"):
            settings_store.remove_favorite("missing")

    def test_search_is_case_insensitive(
        self, settings_store: JsonSettingsStore
    ) -> None:
        settings_store.add_favorite("Iron Man", MAGNET)
        assert [f.title for f in settings_store.search_favorites("iron")] == [
            "Iron Man"
        ]
        assert settings_store.search_favorites("hulk") == []

    def test_created_at_is_utc_iso(self, settings_store: JsonSettingsStore) -> None:
        item = settings_store.add_favorite("A", MAGNET)
        assert item.created_at.endswith("+00:00")


# ---------------------------------------------------------------------------
# Engines and keywords
# ---------------------------------------------------------------------------


class TestEngines:
    def test_toggle(self, settings_store: JsonSettingsStore) -> None:
        settings_store.set_engine_enabled(DEFAULT_ENGINE_ID, False)
        (engine,) = settings_store.list_engines()
        assert not engine.is_enabled

    def test_toggle_unknown(self, settings_store: JsonSettingsStore) -> None:
        with pytest.raises(SettingsError, match="Search engine not found"):
            settings_store.set_engine_enabled("missing", True)

    def test_builtin_not_deletable(self, settings_store: JsonSettingsStore) -> None:
        with pytest.raises(SettingsError, match="Cannot delete default"):
            settings_store.delete_engine(DEFAULT_ENGINE_ID)

    def test_delete_custom(self, settings_store: JsonSettingsStore) -> None:
        engine = settings_store.add_engine("c", "https://c.example/?q={keyword}")
        settings_store.delete_engine(engine.id)
        assert [e.id for e in settings_store.list_engines()] == [DEFAULT_ENGINE_ID]


class TestPriorityKeywords:
    def test_duplicate_rejected(self, settings_store: JsonSettingsStore) -> None:
        settings_store.add_priority_keyword("4K")
        with pytest.raises(SettingsError, match="already exists"):
            settings_store.add_priority_keyword("4K")

    def test_delete_unknown(self, settings_store: JsonSettingsStore) -> None:
        with pytest.raises(SettingsError, match="not found"):
            settings_store.delete_priority_keyword("missing")
