"""Gemini ``generateContent`` client for page extraction and title analysis.

Implements ``ExtractionPort`` and ``AnalysisPort`` from
``domain.ports.llm``. One instance may serve both model configurations;
the config is passed per call.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit

import httpx
import structlog

from magnetlink_optimizer.domain.entities import (
    AnalysisItem,
    ExtractedBasicInfo,
    LlmConfig,
    TitleAnalysis,
)
from magnetlink_optimizer.domain.entities.llm import DEFAULT_API_BASE
from magnetlink_optimizer.domain.exceptions import (
    AnalysisExhaustedError,
    CountMismatchError,
    LlmRequestError,
    MagnetOptimizerError,
)

from .prompts import (
    CONNECTION_TEST_PROMPT,
    build_analysis_prompt,
    build_extraction_prompt,
)
from .response import (
    extract_candidate_text,
    parse_analysis_response,
    parse_extraction_response,
)

log = structlog.get_logger(__name__)

_HOSTED_API_HOST = "generativelanguage.googleapis.com"
_DEFAULT_API_VERSION = "v1beta"
_VERSION_SEGMENT_RE = re.compile(r"/v\d+[a-z0-9]*(/|$)")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 2.0
DEFAULT_MAX_HTML_CHARS = 80_000
DEFAULT_REQUEST_TIMEOUT = 60.0

SleepFunc = Callable[[float], Awaitable[Any]]


def normalize_api_base(api_base: str) -> str:
    """Normalize a configured API base into a versioned endpoint root.

    Empty input means the hosted Gemini API. For the hosted host a missing
    ``/vN`` segment defaults to ``/v1beta``; custom proxies are used as-is.
    """
    base = api_base.strip().rstrip("/")
    if not base:
        base = DEFAULT_API_BASE

    parts = urlsplit(base)
    if parts.netloc == _HOSTED_API_HOST and not _VERSION_SEGMENT_RE.search(parts.path):
        base = f"{base}/{_DEFAULT_API_VERSION}"
    return base


def build_endpoint(config: LlmConfig) -> str:
    base = normalize_api_base(config.api_base)
    return f"{base}/models/{config.model}:generateContent"


class GeminiClient:
    """Async JSON-over-HTTPS client for a Gemini-compatible model API."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY,
        max_html_chars: int = DEFAULT_MAX_HTML_CHARS,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._http = http_client
        self._owns_http = http_client is None
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay_seconds
        self._max_html_chars = max_html_chars
        self._timeout = timeout_seconds
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _post(self, prompt: str, config: LlmConfig) -> dict[str, Any]:
        """POST one prompt; transport and HTTP failures raise ``LlmRequestError``."""
        url = build_endpoint(config)
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        client = self._ensure_client()

        try:
            resp = await client.post(url, params={"key": config.api_key}, json=body)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.warning(
                "llm_http_error",
                model=config.model,
                status=exc.response.status_code,
            )
            raise LlmRequestError(
                f"model API returned HTTP {exc.response.status_code}: "
                f"{exc.response.text[:500]}"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("llm_network_error", model=config.model, error=str(exc))
            raise LlmRequestError(f"model API request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise LlmRequestError("model API returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise LlmRequestError("model API returned an unexpected body")
        return data

    async def _generate(self, prompt: str, config: LlmConfig) -> str:
        """POST one prompt and return the first candidate's text."""
        return extract_candidate_text(await self._post(prompt, config))

    # ------------------------------------------------------------------
    # Public API (ExtractionPort / AnalysisPort)
    # ------------------------------------------------------------------

    async def extract_basic_info(
        self, html: str, config: LlmConfig
    ) -> list[ExtractedBasicInfo]:
        """Extract raw magnet entries from a result page (single attempt)."""
        if len(html) > self._max_html_chars:
            log.debug(
                "llm_html_truncated",
                original_chars=len(html),
                max_chars=self._max_html_chars,
            )
            html = html[: self._max_html_chars]

        text = await self._generate(build_extraction_prompt(html), config)
        entries = parse_extraction_response(text)
        log.debug("llm_extraction_completed", entry_count=len(entries))
        return entries

    async def analyze_titles(
        self, items: list[AnalysisItem], config: LlmConfig
    ) -> list[TitleAnalysis]:
        """Analyze one batch in a single request.

        Raises ``CountMismatchError`` when the model does not return exactly
        one analysis per input item.
        """
        if not items:
            return []

        text = await self._generate(build_analysis_prompt(items), config)
        analyses = parse_analysis_response(text)
        if len(analyses) != len(items):
            raise CountMismatchError(expected=len(items), actual=len(analyses))
        return analyses

    async def analyze_titles_with_retry(
        self, items: list[AnalysisItem], config: LlmConfig
    ) -> list[TitleAnalysis]:
        """``analyze_titles`` with a fixed number of attempts and fixed delay."""
        last_error: MagnetOptimizerError | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self.analyze_titles(items, config)
            except MagnetOptimizerError as exc:
                last_error = exc
                log.warning(
                    "llm_analysis_attempt_failed",
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    batch_size=len(items),
                    error=str(exc),
                )
                if attempt < self._max_attempts:
                    await self._sleep(self._retry_delay)

        if last_error is None:
            raise ValueError("max_attempts must be >= 1")
        raise AnalysisExhaustedError(
            attempts=self._max_attempts, last_error=last_error
        ) from last_error

    async def test_connection(self, config: LlmConfig) -> str:
        """Send a trivial prompt; return a success message or raise."""
        await self._post(CONNECTION_TEST_PROMPT, config)
        log.info("llm_connection_ok", model=config.model)
        return f"Connection to {config.model} succeeded"
