"""Tests for text cleaning, magnet helpers and the display-title fallback."""

from __future__ import annotations

import pytest

from magnetlink_optimizer.infrastructure.normalizer import (
    clean_html_text,
    clean_title_fallback,
    is_magnet_link,
    origin_of,
    resolve_source_url,
    title_from_magnet,
)

HASH = "0123456789abcdef0123456789abcdef01234567"

# ---------------------------------------------------------------------------
# clean_html_text
# ---------------------------------------------------------------------------


class TestCleanHtmlText:
    def test_strips_tags(self) -> None:
        assert clean_html_text("<b>Movie</b> <i>2024</i>") == "Movie 2024"

    def test_decodes_entities(self) -> None:
        assert clean_html_text("Tom &amp; Jerry &lt;HD&gt;") == "Tom & Jerry <HD>"

    def test_collapses_spaces(self) -> None:
        assert clean_html_text("  A   B  ") == "A B"

    def test_nbsp_becomes_space(self) -> None:
        assert clean_html_text("A&nbsp;B") == "A B"


# ---------------------------------------------------------------------------
# Magnet helpers
# ---------------------------------------------------------------------------


class TestMagnetHelpers:
    def test_is_magnet_link(self) -> None:
        assert is_magnet_link(f"magnet:?xt=urn:btih:{HASH}")
        assert not is_magnet_link("http://example.com/file.torrent")

    def test_title_from_dn(self) -> None:
        magnet = f"magnet:?xt=urn:btih:{HASH}&dn=Some%20Movie%202024"
        assert title_from_magnet(magnet) == "Some Movie 2024"

    def test_title_from_dn_plus_signs(self) -> None:
        magnet = f"magnet:?xt=urn:btih:{HASH}&dn=Some+Movie+2024&tr=udp"
        assert title_from_magnet(magnet) == "Some Movie 2024"

    def test_short_dn_uses_hash(self) -> None:
        magnet = f"magnet:?xt=urn:btih:{HASH}&dn=abc"
        assert title_from_magnet(magnet) == "Torrent_01234567"

    def test_no_dn_uses_hash(self) -> None:
        assert title_from_magnet(f"magnet:?xt=urn:btih:{HASH}") == "Torrent_01234567"


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


class TestUrlHelpers:
    def test_origin_of_template(self) -> None:
        assert (
            origin_of("https://example.com/s?q={keyword}&p={page}")
            == "https://example.com"
        )

    def test_origin_of_relative(self) -> None:
        assert origin_of("/search") is None

    @pytest.mark.parametrize(
        ("href", "expected"),
        [
            ("/detail/1", "http://clmclm.com/detail/1"),
            ("https://other.org/x", "https://other.org/x"),
            ("detail/1", "http://clmclm.com/detail/1"),
            ("//cdn.example.net/t/1", "http://cdn.example.net/t/1"),
            ("https://cdn.example.net/t/1", "https://cdn.example.net/t/1"),
        ],
    )
    def test_resolve_source_url(self, href: str, expected: str) -> None:
        assert resolve_source_url(href, "http://clmclm.com") == expected

    def test_resolve_without_origin(self) -> None:
        assert resolve_source_url("/detail/1", None) == "/detail/1"


# ---------------------------------------------------------------------------
# clean_title_fallback
# ---------------------------------------------------------------------------


class TestCleanTitleFallback:
    def test_removes_bracketed_ads(self) -> None:
        title = "[y5y4.com] Iron Man 【高清剧集网发布 www.DDHDTV.com】"
        assert clean_title_fallback(title) == "Iron Man"

    def test_removes_urls(self) -> None:
        assert clean_title_fallback("Movie https://ads.example/x 2024") == "Movie 2024"

    def test_keeps_original_when_everything_stripped(self) -> None:
        assert clean_title_fallback(" [only-ads] ") == "[only-ads]"
