"""Catalog Search Contract v1.

Defines the canonical types shared by the resolver pipeline and every engine adapter:
  - Request options (SearchOptions, ContentType)
  - Candidate payload (CandidateItem, MatchType)
  - Per-engine response (EngineResult)

Engine adapters build CandidateItem instances and return them in an EngineResult.
Only the fusion stage may set CandidateItem.unified_score.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, model_validator

# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------


class ContentType(StrEnum):
    INSTITUTIONS = "institutions"
    PROGRAMS = "programs"
    RANKINGS = "rankings"


# ---------------------------------------------------------------------------
# Match tags
# ---------------------------------------------------------------------------


class MatchType(StrEnum):
    """Tags describing how a candidate matched the query."""

    EXACT = "exact"
    PREFIX = "prefix"
    ABBREVIATION = "abbreviation"
    CONTAINS = "contains"
    WORD_BOUNDARY = "word-boundary"
    FUZZY = "fuzzy"
    REGEX = "regex"
    SEMANTIC = "semantic"
    BACKEND = "backend"


# ---------------------------------------------------------------------------
# Request options
# ---------------------------------------------------------------------------


class SearchOptions(BaseModel):
    """Per-request options. `filters` is opaque and passed to engines unchanged."""

    content_type: str = Field(
        default=ContentType.INSTITUTIONS.value,
        description="institutions | programs | rankings",
    )
    limit: int = Field(default=100, ge=1, le=1000, description="Result-count limit")
    page: int = Field(default=1, ge=1)
    filters: dict[str, Any] = Field(
        default_factory=dict,
        description="Engine-specific filters, never interpreted by the core",
    )

    def cache_fragment(self) -> str:
        """Deterministic serialization used in cache keys."""
        return json.dumps(
            self.model_dump(mode="json"),
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        )


# ---------------------------------------------------------------------------
# Candidate payload
# ---------------------------------------------------------------------------

_NAME_FIELDS = ("name", "college_name", "course_name", "title", "college")


class CandidateItem(BaseModel):
    """One catalog entity as seen by one or more engines."""

    identity_key: str = Field(
        description="Join key across engines, e.g. 'id:42' or 'name:AIIMS NEW DELHI'"
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Entity attributes from the owning engine; opaque to the core",
    )
    engine_scores: dict[str, float] = Field(
        default_factory=dict,
        description="Engine id -> score (0-100), e.g. {'backend': 80.0, 'simple': 95.0}",
    )
    match_types: set[str] = Field(default_factory=set)
    unified_score: float | None = Field(
        default=None,
        description="Fusion-computed relevance; None until fusion has run",
    )

    @property
    def best_score(self) -> float:
        if not self.engine_scores:
            return 0.0
        return max(self.engine_scores.values())

    @property
    def display_name(self) -> str:
        for key in _NAME_FIELDS:
            value = self.payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
        return ""


# ---------------------------------------------------------------------------
# Per-engine response
# ---------------------------------------------------------------------------


class EngineResult(BaseModel):
    """What one engine returned for one query: candidates or an error, never both."""

    engine: str = Field(description="Engine identifier, e.g. 'backend', 'simple'")
    results: list[CandidateItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Total-count hint from the engine")
    search_type: str = Field(default="")
    metadata: dict[str, Any] = Field(default_factory=dict)
    error: str | None = Field(default=None)
    elapsed_ms: float = Field(default=0.0)

    @model_validator(mode="after")
    def _error_excludes_results(self) -> EngineResult:
        if self.error is not None and self.results:
            raise ValueError("EngineResult cannot carry both results and an error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None
