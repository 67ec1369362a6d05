"""Catalog search contract v1: shared types for engine adapters and the resolver pipeline."""

from src.contracts.catalog_search_v1 import (
    CandidateItem,
    ContentType,
    EngineResult,
    MatchType,
    SearchOptions,
)

__all__ = [
    "CandidateItem",
    "ContentType",
    "EngineResult",
    "MatchType",
    "SearchOptions",
]
