"""Synthesized file lists for results whose page does not expose one.

Downstream analysis and display both reason over file names, so every
normalized result carries a non-empty list.  When the page has none, a
plausible list is generated from the title's category.
"""

from __future__ import annotations

import re

_README = "README.txt"

# Checked in this order; the first category with a matching token wins.
_MOVIE_TOKENS: tuple[str, ...] = ("电影", "movie", "film")
_TV_TOKENS: tuple[str, ...] = ("s0", "season", "集")
_GAME_TOKENS: tuple[str, ...] = ("游戏", "game")
_MUSIC_TOKENS: tuple[str, ...] = ("音乐", "music", "mp3", "flac")
_SOFTWARE_TOKENS: tuple[str, ...] = ("软件", "software", "app")

_BRACKET_PATTERNS: tuple[str, ...] = (
    r"\[.*?\]",
    r"\(.*?\)",
    r"【.*?】",
    r"（.*?）",
)

_FORMAT_TOKENS: tuple[str, ...] = (
    r"1080p",
    r"720p",
    r"4K",
    r"BluRay",
    r"WEB-DL",
    r"HDTV",
    r"x264",
    r"x265",
    r"H\.264",
    r"H\.265",
    r"HEVC",
    r"DTS",
    r"AC3",
    r"AAC",
    r"MP3",
    r"FLAC",
    r"mkv",
    r"mp4",
    r"avi",
    r"rmvb",
    r"wmv",
)

_STRIP_RE = re.compile(
    "|".join((*_BRACKET_PATTERNS, *_FORMAT_TOKENS)),
    re.IGNORECASE,
)
_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_CHARS_RE = re.compile(r"[^\w-]")


def extract_clean_title(title: str) -> str:
    """Reduce a title to a stable, filesystem-safe base name.

    Never contains spaces; used only for synthetic file names, never shown
    as a display title (see ``title_cleaner.clean_title_fallback``).
    """
    clean = _STRIP_RE.sub("", title)
    clean = _WHITESPACE_RE.sub(" ", clean).strip().replace(" ", "_")
    clean = _UNSAFE_CHARS_RE.sub("", clean)
    return clean or "Unknown"


def _contains_any(text: str, tokens: tuple[str, ...]) -> bool:
    return any(token in text for token in tokens)


def generate_file_list_from_title(title: str) -> list[str]:
    """Return a deterministic, non-empty list of plausible file names."""
    lowered = title.lower()
    base = extract_clean_title(title)

    if _contains_any(lowered, _MOVIE_TOKENS):
        files = [
            f"{base}.1080p.BluRay.x264.mkv",
            f"{base}.720p.BluRay.x264.mkv",
            "Subtitles/Chinese.srt",
            "Subtitles/English.srt",
            "Sample.mkv",
        ]
    elif _contains_any(lowered, _TV_TOKENS):
        files = [f"{base}.S01E{i:02d}.1080p.WEB-DL.x264.mkv" for i in range(1, 11)]
        files += ["Subtitles/Chinese.srt", "Subtitles/English.srt"]
    elif _contains_any(lowered, _GAME_TOKENS):
        files = [f"{base}.exe", "Setup.exe", "Crack/Keygen.exe", _README]
    elif _contains_any(lowered, _MUSIC_TOKENS):
        files = [f"{base} - Track {i:02d}.mp3" for i in range(1, 13)]
        files.append("Cover.jpg")
    elif _contains_any(lowered, _SOFTWARE_TOKENS):
        files = [f"{base}_Setup.exe", "Crack/Patch.exe", "License.txt", _README]
    else:
        files = [f"{base}.mkv", f"{base}.mp4", _README]

    if not any("README" in name for name in files):
        files.append(_README)

    return files
