"""Shared typed constants for query classification and result assembly."""

from dataclasses import dataclass
from enum import StrEnum


class EngineId(StrEnum):
    """Identifiers of the engines the resolver knows how to weight and route to."""

    BACKEND = "backend"
    AI = "ai"
    ADVANCED = "advanced"
    SIMPLE = "simple"
    REGEX = "regex"


class QueryShape(StrEnum):
    """Shape of a query, derived once when the query is constructed."""

    EMPTY = "empty"
    REGEX = "regex"
    ABBREVIATION = "abbreviation"
    NATURAL_LANGUAGE = "natural_language"
    KEYWORD = "keyword"


class StrategyName(StrEnum):
    REGEX_FOCUSED = "regex-focused"
    ABBREVIATION_FOCUSED = "abbreviation-focused"
    NATURAL_LANGUAGE = "natural-language"
    AGGREGATION_ONLY = "aggregation-only"
    COMPREHENSIVE = "comprehensive"


class SearchType(StrEnum):
    """Outcome tag of a unified search."""

    EMPTY_QUERY = "empty-query"
    NO_RESULTS = "no-results"
    ERROR = "error"
    SINGLE_ENGINE = "single-engine"
    UNIFIED_SEARCH = "unified-search"


# Abbreviation-like queries longer than this are not routed as abbreviations.
ABBREVIATION_MAX_LENGTH = 8
# Spaced queries must be strictly longer than this to count as natural language.
NATURAL_LANGUAGE_MIN_LENGTH = 10


@dataclass(frozen=True)
class StrategyPolicy:
    """Policy entry for a strategy: which engines run, in which order."""

    engines: tuple[EngineId, ...]
    rationale: str


STRATEGY_POLICIES: dict[StrategyName, StrategyPolicy] = {
    StrategyName.REGEX_FOCUSED: StrategyPolicy(
        engines=(EngineId.BACKEND, EngineId.REGEX),
        rationale="Regex pattern detected",
    ),
    StrategyName.ABBREVIATION_FOCUSED: StrategyPolicy(
        engines=(EngineId.BACKEND, EngineId.AI, EngineId.ADVANCED),
        rationale="Abbreviation search detected",
    ),
    StrategyName.NATURAL_LANGUAGE: StrategyPolicy(
        engines=(EngineId.AI, EngineId.BACKEND, EngineId.ADVANCED),
        rationale="Natural language query detected",
    ),
    StrategyName.AGGREGATION_ONLY: StrategyPolicy(
        engines=(EngineId.BACKEND,),
        rationale="Program search needs server-side grouping, backend only",
    ),
    StrategyName.COMPREHENSIVE: StrategyPolicy(
        engines=(EngineId.BACKEND, EngineId.AI, EngineId.ADVANCED, EngineId.SIMPLE),
        rationale="Comprehensive search across all engines",
    ),
}
