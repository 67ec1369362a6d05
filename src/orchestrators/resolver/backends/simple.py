"""Simple heuristic engine: strict tiered matching over the in-memory catalog.

The only engine that uses the abbreviation machinery. Precision over recall:
every candidate must pass MatchValidator.
"""

import logging
from typing import Any

from src.contracts.catalog_search_v1 import EngineResult, SearchOptions
from src.orchestrators.resolver.constants import EngineId
from src.orchestrators.resolver.errors import EngineNotReadyError
from src.orchestrators.resolver.identity import candidate_from_payload
from src.orchestrators.resolver.interface import CatalogEngine
from src.orchestrators.resolver.matching import MatchValidator
from src.orchestrators.resolver.models import SearchQuery
from src.orchestrators.resolver.normalizer import normalize_name, normalize_query

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


class SimpleHeuristicEngine(CatalogEngine):
    def __init__(self, validator: MatchValidator | None = None):
        super().__init__()
        self._validator = validator or MatchValidator()

    def get_engine_id(self) -> str:
        return EngineId.SIMPLE.value

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        if not self.is_ready():
            raise EngineNotReadyError(self.get_engine_id())
        if len(query.normalized) < MIN_QUERY_LENGTH:
            return EngineResult(engine=self.get_engine_id(), search_type="simple-search")

        scored = []
        for index, item in self._entries(options.filters):
            name = item.get("name")
            if not isinstance(name, str) or not name.strip():
                continue
            outcome = self._validator.match(query.raw, name)
            if outcome is None:
                continue
            scored.append((outcome.score, index, item, outcome.tags))

        # Highest score first; catalog order within a tier.
        scored.sort(key=lambda s: (-s[0], s[1]))
        candidates = [
            candidate_from_payload(item, self.get_engine_id(), score, tags)
            for score, _index, item, tags in scored[: options.limit]
        ]
        logger.debug("Simple: %r -> %s matches", query.normalized, len(scored))
        return EngineResult(
            engine=self.get_engine_id(),
            results=candidates,
            total=len(scored),
            search_type="simple-search",
            metadata={"normalized_query": query.normalized},
        )

    def suggest(self, query: str, limit: int = 5) -> list[str]:
        """Display names containing the query, plus name words starting with it."""
        normalized = normalize_query(query)
        if not self.is_ready() or len(normalized) < MIN_QUERY_LENGTH:
            return []

        suggestions: dict[str, None] = {}
        for item in self._catalog:
            name = item.get("name")
            if not isinstance(name, str) or normalized not in normalize_name(name):
                continue
            suggestions[name] = None
            for word in name.split():
                if word.upper().startswith(normalized):
                    suggestions[word] = None
        return list(suggestions)[:limit]

    def health(self) -> dict[str, Any]:
        return {
            "engine": self.get_engine_id(),
            "initialized": self.is_ready(),
            "catalog_size": self.catalog_size,
            "status": "healthy" if self.is_ready() else "not-initialized",
        }
