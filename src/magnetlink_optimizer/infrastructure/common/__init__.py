from .html_selectors import (
    extract_attr,
    extract_text,
    parse_html,
    select_first,
    select_items,
)
from .parsers import (
    has_size_unit,
    is_date,
    is_file_size,
    parse_size_to_bytes,
    split_file_entry,
)

__all__ = [
    "extract_attr",
    "extract_text",
    "has_size_unit",
    "is_date",
    "is_file_size",
    "parse_html",
    "parse_size_to_bytes",
    "select_first",
    "select_items",
    "split_file_entry",
]
