"""Shared test fixtures for the magnetlink-optimizer test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from magnetlink_optimizer.domain.entities import LlmConfig, SearchResult
from magnetlink_optimizer.infrastructure.persistence import JsonSettingsStore

HASH_A = "a" * 40
HASH_B = "b" * 40
HASH_C = "c" * 40

MAGNET_A = f"magnet:?xt=urn:btih:{HASH_A}"
MAGNET_B = f"magnet:?xt=urn:btih:{HASH_B}"
MAGNET_C = f"magnet:?xt=urn:btih:{HASH_C}"

CLMCLM_TWO_CARDS = f"""
<html><body>
<div class="ssbox">
  <div class="title"><h3><a href="/detail/1">Movie A 1080p</a></h3></div>
  <div class="sbar">
    <a href="{MAGNET_A}">Magnet</a>
    <span>大小: 1.2GB</span>
  </div>
  <ul><li>Movie.A.mkv 1.2GB</li></ul>
</div>
<div class="ssbox">
  <div class="title"><h3><a href="/detail/2">Show B</a></h3></div>
  <div class="sbar">
    <a href="{MAGNET_B}">Magnet</a>
  </div>
</div>
</body></html>
"""

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def search_result() -> SearchResult:
    """Minimal valid SearchResult with a file list."""
    return SearchResult(
        title="[y5y4.com] Iron Man 2008 1080p BluRay",
        magnet_link=MAGNET_A,
        file_size="4.5 GB",
        file_list=["Iron.Man.2008.1080p.BluRay.mkv", "Sample.mkv"],
        source_url="http://clmclm.com/detail/1",
    )


@pytest.fixture()
def llm_config() -> LlmConfig:
    """Configured analysis endpoint (batch of 5)."""
    return LlmConfig(api_key="test-key", model="test-model", batch_size=5)


@pytest.fixture()
def clmclm_html() -> str:
    """clmclm.com page with two result cards (A with files, B without)."""
    return CLMCLM_TWO_CARDS


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def state_file(tmp_path: Path) -> Path:
    return tmp_path / "state" / "app_data.json"


@pytest.fixture()
def settings_store(state_file: Path) -> JsonSettingsStore:
    """Fresh store with defaults, backed by a temp file."""
    return JsonSettingsStore.load(state_file)
