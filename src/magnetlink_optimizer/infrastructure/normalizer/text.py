"""Text cleaning and magnet/URL helpers shared by the result parsers."""

from __future__ import annotations

import re
from urllib.parse import unquote, urljoin, urlsplit

MAGNET_PREFIX = "magnet:?xt=urn:btih:"

# Full 40-hex info-hash, followed by the remaining parameters up to ``&``,
# whitespace or the end of an HTML attribute (``&amp;`` in raw HTML ends the
# match early).
MAGNET_RE = re.compile(r"magnet:\?xt=urn:btih:[0-9a-fA-F]{40}[^&\s\"'<>]*")

_TAG_RE = re.compile(r"<[^>]*>")
_MULTI_SPACE_RE = re.compile(r" {2,}")

_HTML_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)


def clean_html_text(text: str) -> str:
    """Strip tags, decode the common entities and collapse repeated spaces."""
    text = _TAG_RE.sub("", text)
    for entity, char in _HTML_ENTITIES:
        text = text.replace(entity, char)
    return _MULTI_SPACE_RE.sub(" ", text).strip()


def is_magnet_link(value: str) -> bool:
    return value.startswith(MAGNET_PREFIX)


def title_from_magnet(magnet_link: str) -> str:
    """Derive a display title from a magnet URI.

    Uses the URL-decoded ``dn`` parameter when it is longer than five
    characters, otherwise ``Torrent_<first 8 hash chars>``.
    """
    dn_start = magnet_link.find("&dn=")
    if dn_start != -1:
        dn_value = magnet_link[dn_start + 4 :].split("&", 1)[0]
        decoded = unquote(dn_value.replace("+", " "))
        if len(decoded) > 5:
            return decoded

    btih = magnet_link.find("btih:")
    if btih == -1:
        return "Torrent_unknown"
    hash_part = magnet_link[btih + 5 :].split("&", 1)[0]
    return f"Torrent_{hash_part[:8]}"


def origin_of(url: str) -> str | None:
    """Return ``scheme://host[:port]`` of *url*, or None if it has no host.

    Works on URL templates too, since placeholders only appear in the path
    or query.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def resolve_source_url(href: str, origin: str | None) -> str:
    """Make a detail-page href absolute against the provider origin.

    Relative hrefs resolve against the origin root; without an origin the
    href is returned unchanged.
    """
    if not origin:
        return href
    return urljoin(origin + "/", href)
