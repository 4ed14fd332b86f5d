"""Parsing and validation of model responses.

The model is asked for bare JSON but frequently wraps it in Markdown code
fences; those are stripped before validation. Shape errors surface as
``ParseError`` so callers can fall back to cheaper strategies.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from magnetlink_optimizer.domain.entities import ExtractedBasicInfo, TitleAnalysis
from magnetlink_optimizer.domain.exceptions import ParseError

MAX_TAGS = 4


class _ExtractedEntry(BaseModel):
    title: str
    magnet_link: str
    file_size: Optional[str] = None
    source_url: Optional[str] = None


class _ExtractionPayload(BaseModel):
    results: List[_ExtractedEntry] = Field(default_factory=list)


class _AnalysisEntry(BaseModel):
    cleaned_title: str = ""
    purity_score: int = Field(..., ge=0, le=100)
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def _limit_tags(cls, v: List[str]) -> List[str]:
        # Models sometimes pad with empty strings for unknown categories.
        return [tag.strip() for tag in v if tag and tag.strip()][:MAX_TAGS]


class _AnalysisPayload(BaseModel):
    results: List[_AnalysisEntry]


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` fences around a model reply."""
    return text.strip().replace("```json", "").replace("```", "").strip()


def extract_candidate_text(body: dict[str, Any]) -> str:
    """Return ``candidates[0].content.parts[0].text`` of a generateContent reply."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError("model response contains no candidate text") from exc
    if not isinstance(text, str):
        raise ParseError("model candidate text is not a string")
    return text


def _load_json(text: str) -> Any:
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ParseError(f"model returned invalid JSON: {exc}") from exc


def parse_extraction_response(text: str) -> list[ExtractedBasicInfo]:
    data = _load_json(text)
    try:
        payload = _ExtractionPayload.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"unexpected extraction shape: {exc}") from exc

    return [
        ExtractedBasicInfo(
            title=entry.title,
            magnet_link=entry.magnet_link,
            file_size=entry.file_size,
            source_url=entry.source_url,
        )
        for entry in payload.results
    ]


def parse_analysis_response(text: str) -> list[TitleAnalysis]:
    data = _load_json(text)
    try:
        payload = _AnalysisPayload.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"unexpected analysis shape: {exc}") from exc

    return [
        TitleAnalysis(
            cleaned_title=entry.cleaned_title.strip(),
            purity_score=entry.purity_score,
            tags=list(entry.tags),
        )
        for entry in payload.results
    ]
