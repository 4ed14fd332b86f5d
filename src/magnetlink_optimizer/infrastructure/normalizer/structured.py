"""Structured parsing for the clmclm.com result markup.

Page layout (one card per torrent)::

    <div class="ssbox">
      <div class="title"><h3><a href="/detail/...">Title</a></h3></div>
      <div class="sbar">
        <a href="magnet:?xt=urn:btih:...">Magnet</a>
        <span>大小: 1.2GB</span>
      </div>
      <ul><li>File A 700MB</li>...</ul>
    </div>
"""

from __future__ import annotations

from bs4 import Tag

from magnetlink_optimizer.domain.entities import SearchResult
from magnetlink_optimizer.infrastructure.common import (
    extract_attr,
    parse_html,
    select_first,
    select_items,
    split_file_entry,
)

from .file_list import generate_file_list_from_title
from .text import clean_html_text, resolve_source_url

CARD_SELECTOR = "div.ssbox"
TITLE_SELECTOR = "div.title > h3 > a"
MAGNET_SELECTOR = 'div.sbar a[href^="magnet:"]'
SIZE_LABEL_SELECTOR = "div.sbar span"
FILE_ITEM_SELECTOR = "ul > li"

SIZE_MARKERS: tuple[str, ...] = ("大小:", "Size:")


def _extract_size(card: Tag) -> str | None:
    for span in select_items(card, SIZE_LABEL_SELECTOR):
        text = span.get_text().strip()
        for marker in SIZE_MARKERS:
            if text.startswith(marker):
                return text[len(marker) :].strip() or None
    return None


def _extract_file_list(card: Tag) -> list[str]:
    files: list[str] = []
    for li in select_items(card, FILE_ITEM_SELECTOR):
        name = split_file_entry(li.get_text())
        if name:
            files.append(name)
    return files


def parse_card(card: Tag, origin: str | None) -> SearchResult | None:
    """Convert one result card; cards without title or magnet yield None."""
    title_node = select_first(card, TITLE_SELECTOR)
    magnet_link = extract_attr(card, MAGNET_SELECTOR, "href")
    if title_node is None or not magnet_link:
        return None

    title = clean_html_text(title_node.get_text())
    href = extract_attr(title_node, "", "href")
    source_url = resolve_source_url(href, origin) if href else None

    file_list = _extract_file_list(card)
    if not file_list:
        file_list = generate_file_list_from_title(title)

    return SearchResult(
        title=title,
        magnet_link=magnet_link,
        file_size=_extract_size(card),
        upload_date=None,  # not exposed by the markup
        file_list=file_list,
        source_url=source_url,
    )


def parse_structured_results(html: str, origin: str | None) -> list[SearchResult]:
    """Parse every result card of a clmclm.com page in document order."""
    soup = parse_html(html)
    results: list[SearchResult] = []
    for card in select_items(soup, CARD_SELECTOR):
        result = parse_card(card, origin)
        if result is not None:
            results.append(result)
    return results
