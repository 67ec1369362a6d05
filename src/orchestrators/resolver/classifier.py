"""Deterministic query classifier: picks the engine strategy for a query.

Rules, first match wins:
  1. regex-looking query           -> regex-focused
  2. abbreviation-like, len <= 8   -> abbreviation-focused
  3. spaced and len > 10           -> natural-language
  4. content type "programs"       -> aggregation-only
  5. otherwise                     -> comprehensive
"""

import logging

from src.contracts.catalog_search_v1 import ContentType, SearchOptions
from src.orchestrators.resolver.constants import (
    STRATEGY_POLICIES,
    QueryShape,
    StrategyName,
)
from src.orchestrators.resolver.errors import UnknownContentTypeError
from src.orchestrators.resolver.models import SearchQuery, SearchStrategy

logger = logging.getLogger(__name__)

_SHAPE_STRATEGIES: dict[QueryShape, StrategyName] = {
    QueryShape.REGEX: StrategyName.REGEX_FOCUSED,
    QueryShape.ABBREVIATION: StrategyName.ABBREVIATION_FOCUSED,
    QueryShape.NATURAL_LANGUAGE: StrategyName.NATURAL_LANGUAGE,
}


def resolve_content_type(value: str) -> ContentType:
    try:
        return ContentType(value)
    except ValueError:
        raise UnknownContentTypeError(value) from None


class QueryClassifier:
    """Maps a query shape and options onto one of the strategy policies."""

    def classify(self, query: SearchQuery, options: SearchOptions) -> SearchStrategy:
        content_type = resolve_content_type(options.content_type)

        name = _SHAPE_STRATEGIES.get(query.shape)
        if name is None:
            if content_type == ContentType.PROGRAMS:
                name = StrategyName.AGGREGATION_ONLY
            else:
                name = StrategyName.COMPREHENSIVE

        policy = STRATEGY_POLICIES[name]
        logger.debug(
            "Classifier: %r shape=%s content_type=%s -> %s",
            query.raw,
            query.shape,
            content_type,
            name,
        )
        return SearchStrategy(
            name=name.value,
            engines=tuple(e.value for e in policy.engines),
            rationale=policy.rationale,
        )
