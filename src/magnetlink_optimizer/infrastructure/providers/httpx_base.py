"""Shared base class for httpx-based search providers.

Owns the client lifecycle and page fetching so concrete providers only
build URLs and parse HTML. Providers inheriting from ``HttpxProviderBase``
structurally satisfy ``SearchProviderProtocol``.
"""

from __future__ import annotations

import httpx
import structlog

from magnetlink_optimizer.domain.entities import SearchResult
from magnetlink_optimizer.domain.exceptions import FetchError

from .constants import (
    DEFAULT_CLIENT_TIMEOUT,
    DEFAULT_USER_AGENT,
    HTML_PREVIEW_CHARS,
    JS_BODY_MARKERS,
    JS_BODY_PREFIX,
    REPLACEMENT_CHAR,
)


def looks_like_javascript(body: str) -> bool:
    """True if *body* is a script bundle rather than an HTML page."""
    if body.lstrip().startswith(JS_BODY_PREFIX):
        return True
    return any(marker in body for marker in JS_BODY_MARKERS)


class HttpxProviderBase:
    """Shared base for httpx-based providers.

    Subclasses **must** set ``name`` (or assign it in ``__init__``) and
    override ``search()``. ``_extra_headers`` is merged into the client
    headers.
    """

    name: str = ""

    _timeout: float = DEFAULT_CLIENT_TIMEOUT
    _user_agent: str = DEFAULT_USER_AGENT
    _extra_headers: dict[str, str] = {}  # noqa: RUF012  # subclass overrides

    def __init__(
        self,
        *,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._client: httpx.AsyncClient | None = None
        if timeout is not None:
            self._timeout = timeout
        if user_agent:
            self._user_agent = user_agent
        self._log = structlog.get_logger(__name__).bind(provider=self.name)

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Create httpx client if not already running."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={**self._extra_headers, "User-Agent": self._user_agent},
            )
        return self._client

    async def cleanup(self) -> None:
        """Close httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _fetch_page(self, url: str) -> str:
        """GET *url* and return its decoded body.

        Raises ``FetchError`` on network errors, timeouts and non-2xx
        status codes.
        """
        client = await self._ensure_client()
        self._log.info("provider_fetch", url=url)
        try:
            resp = await client.get(url)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            self._log.warning("provider_timeout", url=url)
            raise FetchError(url, "request timed out") from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self._log.warning("provider_http_error", url=url, status=status)
            raise FetchError(url, f"HTTP {status}") from exc
        except httpx.HTTPError as exc:
            self._log.warning("provider_fetch_error", url=url, error=str(exc))
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        return resp.text

    def _usable_html(self, url: str, body: str) -> bool:
        """Reject script bundles; warn about bodies with decoding damage."""
        if looks_like_javascript(body):
            self._log.warning(
                "provider_javascript_body",
                url=url,
                preview=body[:HTML_PREVIEW_CHARS],
            )
            return False

        if REPLACEMENT_CHAR in body:
            self._log.warning(
                "provider_garbled_body",
                url=url,
                preview=body[:HTML_PREVIEW_CHARS],
            )

        if "magnet:" not in body and ("404" in body or "Not Found" in body):
            self._log.warning("provider_possible_error_page", url=url)

        return True

    # ------------------------------------------------------------------
    # Abstract search (subclass must implement)
    # ------------------------------------------------------------------

    async def search(self, query: str, page: int) -> list[SearchResult]:
        """Fetch one result page and return normalised results.

        Subclasses **must** override this method.
        """
        raise NotImplementedError(f"{type(self).__name__}.search() not implemented")
