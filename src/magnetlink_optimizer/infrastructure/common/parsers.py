"""Parsing utilities for size-, date- and file-entry-shaped text."""

from __future__ import annotations

import re

_SIZE_UNITS: tuple[str, ...] = ("GB", "MB", "KB", "TB")

_SIZE_RE = re.compile(r"([\d.]+)\s*([KMGT]?B)")


def has_size_unit(text: str) -> bool:
    """Return True if *text* contains one of GB/MB/KB/TB (case-insensitive)."""
    upper = text.upper()
    return any(unit in upper for unit in _SIZE_UNITS)


def is_file_size(text: str) -> bool:
    """Heuristic: a size unit plus at least one digit.

    Examples: ``"1.2 GB"``, ``"900MB"``, ``"Size: 4 TB"``.
    """
    return has_size_unit(text) and any(ch.isdigit() for ch in text)


def is_date(text: str) -> bool:
    """Heuristic for date-shaped table cells.

    Contains ``-``, is 8-20 characters long and has at least 4 digits
    (``2024-01-15``, ``15-Jan-2024``, ``2024-01-15 10:22``).
    """
    if "-" not in text or not 8 <= len(text) <= 20:
        return False
    return sum(ch.isdigit() for ch in text) >= 4


def split_file_entry(text: str) -> str | None:
    """Extract the file name from a ``"<name> <size>"`` list entry.

    If the last whitespace-separated token carries a size unit, it is
    dropped and the remainder is the file name; otherwise the whole line is
    the name.  Returns ``None`` for blank lines.

    Examples:
        - ``"Movie.mkv 1.2GB"`` → ``"Movie.mkv"``
        - ``"Episode 01 450MB"`` → ``"Episode 01"``
        - ``"README.txt"`` → ``"README.txt"``
    """
    text = text.strip()
    if not text:
        return None

    parts = text.split()
    if len(parts) >= 2 and any(unit in parts[-1] for unit in _SIZE_UNITS):
        name = " ".join(parts[:-1])
        return name or None
    return text


def parse_size_to_bytes(size_str: str) -> int:
    """Parse a human-readable size string to bytes.

    Supports ``"1234"`` (raw bytes), ``"4.5 GB"``, ``"500 MB"``, ``"1.2 TB"``.
    Unparseable input yields 0.
    """
    if not size_str:
        return 0

    if size_str.isdigit():
        return int(size_str)

    match = _SIZE_RE.search(size_str.upper().strip())
    if not match:
        return 0

    try:
        value = float(match.group(1))
    except ValueError:
        return 0
    unit = match.group(2)

    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "TB": 1024**4,
    }

    return int(value * multipliers.get(unit, 1))
