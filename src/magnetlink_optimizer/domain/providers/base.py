"""Protocol every search provider satisfies."""

from __future__ import annotations

from typing import Protocol

from magnetlink_optimizer.domain.entities.search import SearchResult


class SearchProviderProtocol(Protocol):
    """
    Protocol for search providers.

    A provider:
    - has a ``name: str`` attribute
    - implements: async def search(query, page) -> list[SearchResult]
    - raises ``FetchError`` when its page cannot be retrieved
    - implements: async def cleanup() to release its HTTP client
    """

    name: str

    async def search(self, query: str, page: int) -> list[SearchResult]: ...

    async def cleanup(self) -> None: ...
