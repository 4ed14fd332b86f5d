from .clmclm import ClmclmProvider
from .httpx_base import HttpxProviderBase, looks_like_javascript
from .templated import TemplatedProvider, build_search_url, partition_priority

__all__ = [
    "ClmclmProvider",
    "HttpxProviderBase",
    "TemplatedProvider",
    "build_search_url",
    "looks_like_javascript",
    "partition_priority",
]
