from .file_list import extract_clean_title, generate_file_list_from_title
from .generic import parse_generic_results, parse_magnet_fallback
from .structured import parse_structured_results
from .text import (
    clean_html_text,
    is_magnet_link,
    origin_of,
    resolve_source_url,
    title_from_magnet,
)
from .title_cleaner import clean_title_fallback

__all__ = [
    "clean_html_text",
    "clean_title_fallback",
    "extract_clean_title",
    "generate_file_list_from_title",
    "is_magnet_link",
    "origin_of",
    "parse_generic_results",
    "parse_magnet_fallback",
    "parse_structured_results",
    "resolve_source_url",
    "title_from_magnet",
]
