"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "magnetlink-optimizer",
    "environment": "dev",
    "http": {
        "timeout_seconds": 30.0,
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "storage": {
        "state_file": "~/.magnetlink-optimizer/app_data.json",
    },
    "search": {
        "default_max_pages": 3,
    },
    "llm": {
        "max_attempts": 3,
        "retry_delay_seconds": 2.0,
        "max_failed_batches": 3,
        "item_timeout_seconds": 30.0,
        "max_html_chars": 80_000,
        "builtin_priority_markers": ["蓝光原盘", "高清电影"],
    },
}
