"""Advanced fuzzy engine: rapidfuzz similarity over the in-memory catalog."""

import logging

from rapidfuzz import fuzz, process

from src.contracts.catalog_search_v1 import EngineResult, MatchType, SearchOptions
from src.core.config import config
from src.orchestrators.resolver.constants import EngineId
from src.orchestrators.resolver.errors import EngineNotReadyError
from src.orchestrators.resolver.identity import candidate_from_payload
from src.orchestrators.resolver.interface import CatalogEngine
from src.orchestrators.resolver.models import SearchQuery
from src.orchestrators.resolver.normalizer import normalize_name

logger = logging.getLogger(__name__)

# Secondary fields folded into the searchable text after the name.
_CONTEXT_FIELDS = ("city", "state")


class AdvancedFuzzyEngine(CatalogEngine):
    def __init__(self, score_cutoff: float | None = None, limit: int | None = None):
        super().__init__()
        self._score_cutoff = score_cutoff if score_cutoff is not None else config.fuzzy_score_cutoff
        self._limit = limit if limit is not None else config.fuzzy_limit

    def get_engine_id(self) -> str:
        return EngineId.ADVANCED.value

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        if not self.is_ready():
            raise EngineNotReadyError(self.get_engine_id())
        if len(query.normalized) < 2:
            return EngineResult(engine=self.get_engine_id(), search_type="advanced-search")

        choices: dict[int, str] = {}
        for index, item in self._entries(options.filters):
            text = self._searchable_text(item)
            if text:
                choices[index] = text

        matches = process.extract(
            query.normalized,
            choices,
            scorer=fuzz.WRatio,
            score_cutoff=self._score_cutoff,
            limit=min(self._limit, options.limit),
        )
        candidates = [
            candidate_from_payload(
                self._catalog[index], self.get_engine_id(), round(score, 2), {MatchType.FUZZY.value}
            )
            for _text, score, index in matches
        ]
        logger.debug(
            "Fuzzy: %r -> %s matches over %s entries", query.normalized, len(candidates), len(choices)
        )
        return EngineResult(
            engine=self.get_engine_id(),
            results=candidates,
            total=len(candidates),
            search_type="advanced-search",
            metadata={"scorer": "WRatio", "score_cutoff": self._score_cutoff},
        )

    @staticmethod
    def _searchable_text(item: dict) -> str:
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            return ""
        parts = [name] + [
            item[f] for f in _CONTEXT_FIELDS if isinstance(item.get(f), str) and item[f].strip()
        ]
        return normalize_name(" ".join(parts))
