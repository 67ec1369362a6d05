"""Query, strategy and unified result models for the resolver pipeline.

Uses CandidateItem from the catalog search contract as the canonical result type.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.contracts.catalog_search_v1 import CandidateItem
from src.orchestrators.resolver.abbreviations import is_likely_abbreviation
from src.orchestrators.resolver.constants import (
    ABBREVIATION_MAX_LENGTH,
    NATURAL_LANGUAGE_MIN_LENGTH,
    QueryShape,
    SearchType,
)
from src.orchestrators.resolver.normalizer import looks_like_regex, normalize_query


def _detect_shape(raw: str, normalized: str) -> QueryShape:
    if not normalized:
        return QueryShape.EMPTY
    if looks_like_regex(raw):
        return QueryShape.REGEX
    if is_likely_abbreviation(raw) and len(normalized) <= ABBREVIATION_MAX_LENGTH:
        return QueryShape.ABBREVIATION
    if " " in normalized and len(normalized) > NATURAL_LANGUAGE_MIN_LENGTH:
        return QueryShape.NATURAL_LANGUAGE
    return QueryShape.KEYWORD


class SearchQuery(BaseModel):
    """A user query, immutable for the lifetime of one pipeline run."""

    model_config = ConfigDict(frozen=True)

    raw: str = Field(description="Query exactly as the caller supplied it")
    normalized: str = Field(description="Uppercased, dot-free, whitespace-collapsed form")
    shape: QueryShape = Field(default=QueryShape.KEYWORD)

    @classmethod
    def from_raw(cls, raw: str | None) -> SearchQuery:
        text = raw or ""
        normalized = normalize_query(text)
        return cls(raw=text, normalized=normalized, shape=_detect_shape(text, normalized))

    @property
    def is_empty(self) -> bool:
        return not self.normalized


class SearchStrategy(BaseModel):
    """Which engines to run for a query, in priority order."""

    model_config = ConfigDict(frozen=True)

    name: str
    engines: tuple[str, ...]
    rationale: str = ""


class ResultMetadata(BaseModel):
    engines: list[str] = Field(default_factory=list, description="Engines that contributed")
    engine_weights: dict[str, float] = Field(default_factory=dict)
    combined_results: int = Field(default=0, description="Distinct identity keys before dedup")
    strategy: str | None = None
    engine_errors: dict[str, str] = Field(
        default_factory=dict, description="Engine id -> failure message"
    )
    skipped_engines: list[str] = Field(
        default_factory=list, description="Engines not ready at dispatch time"
    )
    cached: bool = False
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class UnifiedResult(BaseModel):
    """Final response from the resolver pipeline."""

    results: list[CandidateItem] = Field(
        default_factory=list, description="Deduplicated, unified-score sorted"
    )
    total: int = 0
    search_type: SearchType
    search_time_ms: float = 0.0
    error: str | None = None
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)

    @classmethod
    def build(
        cls,
        results: list[CandidateItem],
        search_type: SearchType,
        search_time_ms: float = 0.0,
        error: str | None = None,
        **metadata: Any,
    ) -> UnifiedResult:
        return cls(
            results=results,
            total=len(results),
            search_type=search_type,
            search_time_ms=search_time_ms,
            error=error,
            metadata=ResultMetadata(**metadata),
        )
