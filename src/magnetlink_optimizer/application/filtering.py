"""Two-track result filter: priority keywords first, LLM scoring second.

Priority track: if any title contains a priority marker (operator keywords
plus built-in markers, case-insensitive), only those results are returned
and no model call is made.

LLM track: results are analyzed in sequential batches. A batch that fails
after retries falls back to per-item analysis (single attempt, bounded
timeout). Once ``max_failed_batches`` batches have failed, every remaining
item is annotated without further calls. Failed items are kept with a
neutral score and a diagnostic tag.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import structlog

from magnetlink_optimizer.domain.entities import (
    AnalysisItem,
    DetailedAnalysisResult,
    LlmConfig,
    SearchResult,
    TitleAnalysis,
)
from magnetlink_optimizer.domain.exceptions import SettingsError
from magnetlink_optimizer.domain.ports import AnalysisPort

log = structlog.get_logger(__name__)

DEFAULT_PRIORITY_MARKERS: tuple[str, ...] = ("蓝光原盘", "高清电影")

PLACEHOLDER_SCORE = 50
DEFAULT_MAX_FAILED_BATCHES = 3
DEFAULT_ITEM_TIMEOUT = 30.0

TAG_TOO_MANY_FAILURES = "Analysis Failed - Too Many Failures"
TAG_ITEM_FAILED = "Individual Analysis Failed"
TAG_TIMEOUT = "Analysis Timeout"
TAG_NO_RESULTS = "No Results"

TitleCleaner = Callable[[str], str]


class ResultFilter:
    """Applies the priority and LLM tracks to aggregated search results."""

    def __init__(
        self,
        analyzer: AnalysisPort | None,
        config: LlmConfig | None,
        *,
        title_fallback: TitleCleaner,
        priority_keywords: Sequence[str] = (),
        builtin_markers: Sequence[str] = DEFAULT_PRIORITY_MARKERS,
        max_failed_batches: int = DEFAULT_MAX_FAILED_BATCHES,
        item_timeout_seconds: float = DEFAULT_ITEM_TIMEOUT,
    ) -> None:
        self._analyzer = analyzer
        self._config = config
        self._title_fallback = title_fallback
        self._markers = [
            m.lower() for m in (*priority_keywords, *builtin_markers) if m.strip()
        ]
        self._max_failed_batches = max_failed_batches
        self._item_timeout = item_timeout_seconds

    @property
    def llm_enabled(self) -> bool:
        return (
            self._analyzer is not None
            and self._config is not None
            and self._config.is_configured
        )

    # ------------------------------------------------------------------
    # Priority track
    # ------------------------------------------------------------------

    def priority_matches(self, results: Sequence[SearchResult]) -> list[SearchResult]:
        if not self._markers:
            return []
        return [
            r for r in results if any(m in r.title.lower() for m in self._markers)
        ]

    # ------------------------------------------------------------------
    # Filter entry point
    # ------------------------------------------------------------------

    async def filter(self, results: list[SearchResult]) -> list[SearchResult]:
        """Run the two tracks; LLM output is written onto the results in place."""
        priority = self.priority_matches(results)
        if priority:
            log.info(
                "filter_priority_track",
                total=len(results),
                matched=len(priority),
            )
            return priority

        if not self.llm_enabled:
            log.debug("filter_llm_track_skipped", reason="no analysis endpoint")
            return results

        eligible = [r for r in results if r.file_list]
        analyzed = await self.batch_analyze(eligible)
        for result, detail in zip(eligible, analyzed):
            result.title = detail.title
            result.score = detail.purity_score
            result.tags = list(detail.tags)

        log.info(
            "filter_llm_track",
            total=len(results),
            analyzed=len(analyzed),
            failed=sum(1 for d in analyzed if d.error),
        )
        return results

    # ------------------------------------------------------------------
    # LLM track
    # ------------------------------------------------------------------

    def _merge(
        self, result: SearchResult, analysis: TitleAnalysis
    ) -> DetailedAnalysisResult:
        title = analysis.cleaned_title or self._title_fallback(result.title)
        return DetailedAnalysisResult(
            title=title,
            purity_score=analysis.purity_score,
            tags=list(analysis.tags),
            magnet_link=result.magnet_link,
            file_size=result.file_size,
            file_list=list(result.file_list),
        )

    def _placeholder(
        self, result: SearchResult, tag: str, error: str
    ) -> DetailedAnalysisResult:
        return DetailedAnalysisResult(
            title=self._title_fallback(result.title),
            purity_score=PLACEHOLDER_SCORE,
            tags=[tag],
            magnet_link=result.magnet_link,
            file_size=result.file_size,
            file_list=list(result.file_list),
            error=error,
        )

    def _require_llm(self) -> tuple[AnalysisPort, LlmConfig]:
        if self._analyzer is None or self._config is None:
            raise SettingsError("analysis endpoint is not configured")
        return self._analyzer, self._config

    async def _analyze_single(self, result: SearchResult) -> DetailedAnalysisResult:
        """Per-item fallback: one attempt under the item timeout."""
        analyzer, config = self._require_llm()
        item = AnalysisItem(title=result.title, file_list=list(result.file_list))
        try:
            analyses = await asyncio.wait_for(
                analyzer.analyze_titles([item], config),
                timeout=self._item_timeout,
            )
        except asyncio.TimeoutError:
            log.warning("analysis_item_timeout", title=result.title)
            return self._placeholder(
                result,
                TAG_TIMEOUT,
                f"Analysis timed out after {self._item_timeout:g} seconds",
            )
        except Exception as exc:  # noqa: BLE001
            log.warning("analysis_item_failed", title=result.title, error=str(exc))
            return self._placeholder(
                result, TAG_ITEM_FAILED, f"Individual analysis failed: {exc}"
            )

        if not analyses:
            log.warning("analysis_item_empty", title=result.title)
            return self._placeholder(
                result, TAG_NO_RESULTS, "Individual analysis returned no results"
            )
        return self._merge(result, analyses[0])

    async def batch_analyze(
        self, results: Sequence[SearchResult]
    ) -> list[DetailedAnalysisResult]:
        """Analyze *results* in order; one output per result with a file list.

        Never raises for analysis failures; failed items carry placeholders.
        """
        analyzer, config = self._require_llm()
        items = [r for r in results if r.file_list]
        if not items:
            return []

        batch_size = max(config.batch_size, 1)
        batches = [items[i : i + batch_size] for i in range(0, len(items), batch_size)]
        output: list[DetailedAnalysisResult] = []
        failed_batches = 0

        for index, batch in enumerate(batches, start=1):
            if failed_batches >= self._max_failed_batches:
                output.extend(
                    self._placeholder(
                        r,
                        TAG_TOO_MANY_FAILURES,
                        "Too many batch failures, analysis aborted",
                    )
                    for r in batch
                )
                continue

            batch_items = [
                AnalysisItem(title=r.title, file_list=list(r.file_list)) for r in batch
            ]
            try:
                analyses = await analyzer.analyze_titles_with_retry(batch_items, config)
            except Exception as exc:  # noqa: BLE001
                failed_batches += 1
                log.warning(
                    "analysis_batch_failed",
                    batch=index,
                    batches=len(batches),
                    failed_batches=failed_batches,
                    max_failed_batches=self._max_failed_batches,
                    error=str(exc),
                )
                if failed_batches >= self._max_failed_batches:
                    output.extend(
                        self._placeholder(
                            r,
                            TAG_TOO_MANY_FAILURES,
                            "Too many batch failures, analysis aborted",
                        )
                        for r in batch
                    )
                    continue

                for result in batch:
                    output.append(await self._analyze_single(result))
                continue

            output.extend(self._merge(r, a) for r, a in zip(batch, analyses))
            log.debug("analysis_batch_completed", batch=index, batches=len(batches))

        return output

    async def analyze(self, result: SearchResult) -> DetailedAnalysisResult:
        """Analyze one result with retry; raises ``AnalysisExhaustedError``."""
        analyzer, config = self._require_llm()
        item = AnalysisItem(title=result.title, file_list=list(result.file_list))
        analyses = await analyzer.analyze_titles_with_retry([item], config)
        return self._merge(result, analyses[0])


ResultFilterFactory = Callable[[LlmConfig | None, Sequence[str]], ResultFilter]
