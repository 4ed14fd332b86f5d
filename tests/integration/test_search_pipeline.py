"""End-to-end search through the composition root with mocked HTTP.

Covers: settings store → search core (clmclm.com + a templated engine) →
keyword filter → LLM scoring → sorting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest
import respx

from magnetlink_optimizer.domain.entities import DualLlmConfig, LlmConfig
from magnetlink_optimizer.domain.entities.settings import (
    DEFAULT_ENGINE_ID,
    SearchSettings,
)
from magnetlink_optimizer.infrastructure.config import load_config
from magnetlink_optimizer.interfaces.composition import Container, build_container

pytestmark = pytest.mark.integration

HASH_C = "c" * 40
MAGNET_C = f"magnet:?xt=urn:btih:{HASH_C}"

GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "test-model:generateContent"
)
ENGINE_TEMPLATE = "https://engine.example/search/{keyword}/{page}"

ENGINE_PAGE = f"""
<html><body><table>
  <tr><td><a href="/t/9">Movie C WEB-DL</a></td><td>2.1 GB</td>
      <td>2024-03-01</td><td><a href="{MAGNET_C}">magnet</a></td></tr>
</table></body></html>
"""


def _gemini_reply(payload: dict[str, Any]) -> dict[str, Any]:
    text = "```json\n" + json.dumps(payload) + "\n```"
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _fake_model(request: httpx.Request) -> httpx.Response:
    """Extraction calls fail; analysis scores every later item lower."""
    prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
    if "magnet:?xt=" in prompt and "file_list" not in prompt:
        return httpx.Response(500, text="extraction unavailable")
    count = prompt.count('"index"')
    results = [
        {"cleaned_title": f"Clean {i}", "purity_score": 90 - i * 10, "tags": ["Movie"]}
        for i in range(count)
    ]
    return httpx.Response(200, json=_gemini_reply({"results": results}))


@pytest.fixture()
def container(tmp_path: Path) -> Container:
    config = load_config(
        cli_overrides={
            "state_file": str(tmp_path / "app_data.json"),
            "llm": {"retry_delay_seconds": 0.0},
        }
    )
    return build_container(config)


class TestSearchPipeline:
    @pytest.mark.asyncio()
    @respx.mock
    async def test_fast_provider_only(
        self, container: Container, clmclm_html: str
    ) -> None:
        container.settings.update_search_settings(
            SearchSettings(use_smart_filter=False, max_pages=1)
        )
        respx.get("http://clmclm.com/search-movie-1-1-1.html").respond(
            200, text=clmclm_html
        )

        results = await container.search.search_multi_page("movie")

        assert [r.title for r in results] == ["Movie A 1080p"]
        await container.aclose()

    @pytest.mark.asyncio()
    @respx.mock
    async def test_engines_merge_and_llm_scores(
        self, container: Container, clmclm_html: str
    ) -> None:
        uc = container.settings
        uc.add_engine("engine", ENGINE_TEMPLATE)
        uc.update_llm_config(
            DualLlmConfig(analysis=LlmConfig(api_key="k", model="test-model"))
        )
        uc.update_search_settings(
            SearchSettings(max_pages=1, title_must_contain_keyword=False)
        )

        respx.get("http://clmclm.com/search-movie-1-1-1.html").respond(
            200, text=clmclm_html
        )
        # AI extraction falls back to the analysis endpoint; a failing
        # extraction call degrades to the generic table parser.
        respx.get("https://engine.example/search/movie/1").respond(
            200, text=ENGINE_PAGE
        )
        gemini = respx.post(url__startswith=GEMINI_URL)
        gemini.side_effect = _fake_model

        results = await container.search.search_multi_page("movie", smart_filter=True)

        # Fast provider pages first, then the engine; scored in input order
        # with descending scores, so sorting keeps that order.
        assert [r.score for r in results] == [90, 80, 70]
        assert [r.title for r in results] == ["Clean 0", "Clean 1", "Clean 2"]
        assert results[2].magnet_link == MAGNET_C
        assert results[2].upload_date == "2024-03-01"
        assert gemini.call_count == 2
        await container.aclose()

    @pytest.mark.asyncio()
    @respx.mock
    async def test_failing_provider_does_not_break_search(
        self, container: Container
    ) -> None:
        uc = container.settings
        uc.add_engine("engine", ENGINE_TEMPLATE)
        uc.set_engine_enabled(DEFAULT_ENGINE_ID, True)
        uc.update_search_settings(
            SearchSettings(
                use_smart_filter=False, max_pages=1, title_must_contain_keyword=False
            )
        )
        respx.get("http://clmclm.com/search-movie-1-1-1.html").respond(503)
        respx.get("https://engine.example/search/movie/1").respond(
            200, text=ENGINE_PAGE
        )

        results = await container.search.search_multi_page("movie")

        assert [r.magnet_link for r in results] == [MAGNET_C]
        await container.aclose()

    @pytest.mark.asyncio()
    @respx.mock
    async def test_priority_keyword_skips_llm(
        self, container: Container, clmclm_html: str
    ) -> None:
        uc = container.settings
        uc.add_priority_keyword("1080p")
        uc.update_llm_config(
            DualLlmConfig(analysis=LlmConfig(api_key="k", model="test-model"))
        )
        uc.update_search_settings(
            SearchSettings(max_pages=1, title_must_contain_keyword=False)
        )
        respx.get("http://clmclm.com/search-movie-1-1-1.html").respond(
            200, text=clmclm_html
        )
        gemini = respx.post(url__startswith=GEMINI_URL)

        results = await container.search.search_multi_page("movie")

        assert [r.title for r in results] == ["Movie A 1080p"]
        assert not gemini.called
        await container.aclose()
