"""Generic parsing for pages with unknown markup.

Two strategies, in order:

1. Table rows: any ``<tr>`` whose HTML contains a magnet URI becomes a
   result; cells are scanned for title, size and date heuristically.
   Layout rows wrapping a nested table are skipped (the inner rows are
   read when that table is scanned) and each magnet is kept once.
2. Whole-page scan: if no table row matched, every magnet URI in the page
   becomes a result, deduplicated by magnet string, titled from its ``dn``
   parameter.
"""

from __future__ import annotations

import re

import structlog
from bs4 import BeautifulSoup, Tag

from magnetlink_optimizer.domain.entities import SearchResult
from magnetlink_optimizer.infrastructure.common import (
    is_date,
    is_file_size,
    parse_html,
    select_first,
    select_items,
)

from .file_list import generate_file_list_from_title
from .text import MAGNET_RE, clean_html_text, resolve_source_url, title_from_magnet

log = structlog.get_logger(__name__)

# Cells without an anchor need more than this many characters to count as title.
_MIN_CELL_TITLE_LEN = 5

# The magnet match itself stops at the first ``&``; the title lookup reads
# the whole attribute value so the ``dn`` parameter is visible.
_MAGNET_TAIL_RE = re.compile(r"[^\s\"'<>]*")


def _title_from_first_cell(
    cell: Tag, origin: str | None
) -> tuple[str | None, str | None]:
    title: str | None = None
    source_url: str | None = None

    link = select_first(cell, "a")
    if link is not None:
        link_text = link.get_text().strip()
        if link_text and not link_text.startswith("magnet:"):
            title = clean_html_text(link_text)
            href = link.get("href")
            if href:
                source_url = resolve_source_url(str(href), origin)

    if title is None:
        cell_text = cell.get_text().strip()
        if len(cell_text) > _MIN_CELL_TITLE_LEN:
            title = clean_html_text(cell_text)

    return title or None, source_url


def parse_table_row(row: Tag, origin: str | None) -> SearchResult | None:
    """Build a result from one table row, or None if it has no magnet/cells."""
    match = MAGNET_RE.search(str(row))
    if match is None:
        return None
    magnet_link = match.group(0)

    cells = row.find_all("td", recursive=False)
    if not cells:
        return None

    title: str | None = None
    source_url: str | None = None
    file_size: str | None = None
    upload_date: str | None = None

    for index, cell in enumerate(cells):
        cell_text = cell.get_text().strip()

        if index == 0:
            title, source_url = _title_from_first_cell(cell, origin)

        if file_size is None and is_file_size(cell_text):
            file_size = cell_text

        if upload_date is None and is_date(cell_text):
            upload_date = cell_text

    final_title = title or title_from_magnet(magnet_link)

    return SearchResult(
        title=final_title,
        magnet_link=magnet_link,
        file_size=file_size,
        upload_date=upload_date,
        file_list=generate_file_list_from_title(final_title),
        source_url=source_url,
    )


def _own_rows(table: Tag) -> list[Tag]:
    """Rows of *table* itself, excluding rows of tables nested inside it."""
    return [
        row
        for row in select_items(table, "tr")
        if row.find_parent("table") is table and row.find("table") is None
    ]


def _parse_tables(soup: BeautifulSoup, origin: str | None) -> list[SearchResult]:
    results: list[SearchResult] = []
    seen: set[str] = set()
    for table in select_items(soup, "table"):
        for row in _own_rows(table):
            result = parse_table_row(row, origin)
            if result is None or result.magnet_link in seen:
                continue
            seen.add(result.magnet_link)
            results.append(result)
    return results


def parse_magnet_fallback(html: str) -> list[SearchResult]:
    """Regex-scan the raw page for magnet URIs, one result per distinct URI."""
    results: list[SearchResult] = []
    seen: set[str] = set()

    for match in MAGNET_RE.finditer(html):
        magnet_link = match.group(0)
        if magnet_link in seen:
            continue
        seen.add(magnet_link)

        tail = _MAGNET_TAIL_RE.match(html, match.end())
        full_uri = magnet_link + (tail.group(0) if tail else "")
        title = title_from_magnet(full_uri.replace("&amp;", "&"))
        results.append(
            SearchResult(
                title=title,
                magnet_link=magnet_link,
                file_list=generate_file_list_from_title(title),
            )
        )

    return results


def parse_generic_results(html: str, origin: str | None) -> list[SearchResult]:
    """Parse a page of unknown markup (tables first, then whole-page scan)."""
    soup = parse_html(html)
    results = _parse_tables(soup, origin)

    if not results:
        results = parse_magnet_fallback(html)

    log.debug("generic_parse_completed", result_count=len(results))
    return results
