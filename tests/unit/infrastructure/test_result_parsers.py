"""Tests for the clmclm.com structured parser and the generic parser."""

from __future__ import annotations

from magnetlink_optimizer.infrastructure.normalizer import (
    parse_generic_results,
    parse_magnet_fallback,
    parse_structured_results,
)

HASH_A = "a" * 40
HASH_B = "b" * 40
MAGNET_A = f"magnet:?xt=urn:btih:{HASH_A}"
MAGNET_B = f"magnet:?xt=urn:btih:{HASH_B}"

# ---------------------------------------------------------------------------
# Structured (clmclm.com) parser
# ---------------------------------------------------------------------------


class TestStructuredParser:
    def test_two_cards(self, clmclm_html: str) -> None:
        results = parse_structured_results(clmclm_html, "http://clmclm.com")

        assert [r.title for r in results] == ["Movie A 1080p", "Show B"]

        first, second = results
        assert first.magnet_link == MAGNET_A
        assert first.file_size == "1.2GB"
        assert first.file_list == ["Movie.A.mkv"]
        assert first.source_url == "http://clmclm.com/detail/1"
        assert first.upload_date is None

        assert second.magnet_link == MAGNET_B
        assert second.file_size is None
        assert second.file_list  # synthesized
        assert second.source_url == "http://clmclm.com/detail/2"

    def test_card_without_magnet_is_skipped(self) -> None:
        html = """
        <div class="ssbox">
          <div class="title"><h3><a href="/detail/1">No Magnet</a></h3></div>
          <div class="sbar"><span>大小: 1GB</span></div>
        </div>
        """
        assert parse_structured_results(html, "http://clmclm.com") == []

    def test_card_without_title_is_skipped(self) -> None:
        html = f"""
        <div class="ssbox">
          <div class="sbar"><a href="{MAGNET_A}">Magnet</a></div>
        </div>
        """
        assert parse_structured_results(html, None) == []

    def test_english_size_marker(self) -> None:
        html = f"""
        <div class="ssbox">
          <div class="title"><h3><a href="/d">Title</a></h3></div>
          <div class="sbar"><a href="{MAGNET_A}">M</a><span>Size: 700MB</span></div>
        </div>
        """
        (result,) = parse_structured_results(html, None)
        assert result.file_size == "700MB"

    def test_title_entities_decoded(self) -> None:
        html = f"""
        <div class="ssbox">
          <div class="title"><h3><a href="/d">Tom &amp; Jerry</a></h3></div>
          <div class="sbar"><a href="{MAGNET_A}">M</a></div>
        </div>
        """
        (result,) = parse_structured_results(html, None)
        assert result.title == "Tom & Jerry"

    def test_empty_page(self) -> None:
        assert parse_structured_results("<html><body></body></html>", None) == []


# ---------------------------------------------------------------------------
# Generic parser: table rows
# ---------------------------------------------------------------------------


class TestGenericTableRows:
    def test_row_with_link_size_and_date(self) -> None:
        html = f"""
        <table>
          <tr><th>Name</th><th>Size</th><th>Date</th></tr>
          <tr>
            <td><a href="/t/1">Great Movie 2024</a></td>
            <td>1.4 GB</td>
            <td>2024-01-15</td>
            <td><a href="{MAGNET_A}">magnet</a></td>
          </tr>
        </table>
        """
        (result,) = parse_generic_results(html, "https://example.com")

        assert result.title == "Great Movie 2024"
        assert result.magnet_link == MAGNET_A
        assert result.file_size == "1.4 GB"
        assert result.upload_date == "2024-01-15"
        assert result.source_url == "https://example.com/t/1"
        assert result.file_list

    def test_row_without_title_uses_magnet(self) -> None:
        html = f"""
        <table>
          <tr><td>x</td><td><a href="{MAGNET_B}">magnet</a></td></tr>
        </table>
        """
        (result,) = parse_generic_results(html, None)
        assert result.title == "Torrent_bbbbbbbb"

    def test_plain_text_first_cell(self) -> None:
        html = f"""
        <table>
          <tr><td>Plain Cell Title</td><td><a href="{MAGNET_A}">m</a></td></tr>
        </table>
        """
        (result,) = parse_generic_results(html, None)
        assert result.title == "Plain Cell Title"
        assert result.source_url is None

    def test_nested_layout_table_yields_inner_rows_once(self) -> None:
        html = f"""
        <table class="layout">
          <tr>
            <td>
              <table class="results">
                <tr>
                  <td><a href="/t/1">First Movie Title</a></td>
                  <td><a href="{MAGNET_A}">magnet</a></td>
                </tr>
                <tr>
                  <td><a href="/t/2">Second Movie Title</a></td>
                  <td><a href="{MAGNET_B}">magnet</a></td>
                </tr>
              </table>
            </td>
            <td>sidebar</td>
          </tr>
        </table>
        """
        results = parse_generic_results(html, "https://example.com")

        assert [(r.title, r.magnet_link) for r in results] == [
            ("First Movie Title", MAGNET_A),
            ("Second Movie Title", MAGNET_B),
        ]

    def test_repeated_magnet_rows_collapse(self) -> None:
        html = f"""
        <table>
          <tr><td>Mirror One Title</td><td><a href="{MAGNET_A}">m</a></td></tr>
        </table>
        <table>
          <tr><td>Mirror Two Title</td><td><a href="{MAGNET_A}">m</a></td></tr>
        </table>
        """
        results = parse_generic_results(html, None)
        assert [r.title for r in results] == ["Mirror One Title"]


# ---------------------------------------------------------------------------
# Generic parser: whole-page magnet scan
# ---------------------------------------------------------------------------


class TestMagnetFallback:
    def test_duplicates_collapse(self) -> None:
        html = f"""
        <div><a href="{MAGNET_A}&amp;dn=First%20Movie">one</a></div>
        <p>{MAGNET_A}</p>
        <div><a href="{MAGNET_B}">two</a></div>
        """
        results = parse_magnet_fallback(html)

        assert [r.magnet_link for r in results] == [MAGNET_A, MAGNET_B]
        assert results[0].title == "First Movie"
        assert results[1].title == "Torrent_bbbbbbbb"
        assert all(r.file_list for r in results)

    def test_no_magnets(self) -> None:
        assert parse_magnet_fallback("<html>nothing here</html>") == []

    def test_generic_uses_fallback_without_tables(self) -> None:
        html = f'<ul><li><a href="{MAGNET_A}&dn=Some.Show.S01">x</a></li></ul>'
        (result,) = parse_generic_results(html, None)
        assert result.title == "Some.Show.S01"
        assert any(".S01E" in name for name in result.file_list)

    def test_short_hash_ignored(self) -> None:
        assert parse_magnet_fallback("magnet:?xt=urn:btih:abc123") == []
