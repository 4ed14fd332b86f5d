"""Regex-only display-title cleaner used when the model returns nothing."""

from __future__ import annotations

import re

# Ad markers such as ``[y5y4.com]`` or ``【高清剧集网发布 www.DDHDTV.com】``.
_BRACKETS_RE = re.compile(r"\[.*?\]|【.*?】")
_URL_RE = re.compile(r"(www\.\S+\.\S+|https?://\S+)", re.IGNORECASE)
_MULTI_SPACE_RE = re.compile(r" {2,}")


def clean_title_fallback(title: str) -> str:
    """Strip bracketed ad segments and URL-looking substrings.

    Unlike ``file_list.extract_clean_title`` the result stays human-readable
    (spaces and punctuation are kept).
    """
    cleaned = _BRACKETS_RE.sub("", title)
    cleaned = _URL_RE.sub("", cleaned)
    cleaned = _MULTI_SPACE_RE.sub(" ", cleaned).strip()
    return cleaned or title.strip()
