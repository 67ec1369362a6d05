"""Unified search engine: multi-engine query resolution with weighted fusion.

Pipeline:
  1. Normalize the query (empty -> "empty-query", nothing dispatched)
  2. Cache lookup (a hit short-circuits everything below)
  3. Classify into a strategy (which engines, in which order)
  4. Dispatch to engines in parallel, isolating per-engine failures
  5. Weighted fusion by identity key, then deduplication
  6. Cache the result (error results are never cached)
"""

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.contracts.catalog_search_v1 import SearchOptions
from src.core.logger import logger
from src.orchestrators.resolver.cache import ResultCache, make_cache_key
from src.orchestrators.resolver.classifier import QueryClassifier
from src.orchestrators.resolver.constants import SearchType
from src.orchestrators.resolver.dispatcher import DispatchOutcome, ParallelSearchOrchestrator
from src.orchestrators.resolver.fusion import ResultFusionRanker, deduplicate
from src.orchestrators.resolver.interface import CatalogEngine, EngineAdapter
from src.orchestrators.resolver.models import SearchQuery, SearchStrategy, UnifiedResult


@dataclass
class PerformanceMetrics:
    total_searches: int = 0
    successful_searches: int = 0
    cache_hits: int = 0
    total_response_ms: float = 0.0

    def record(self, elapsed_ms: float, success: bool, cached: bool = False) -> None:
        self.total_searches += 1
        self.total_response_ms += elapsed_ms
        if success:
            self.successful_searches += 1
        if cached:
            self.cache_hits += 1

    @property
    def average_response_ms(self) -> float:
        if not self.total_searches:
            return 0.0
        return self.total_response_ms / self.total_searches

    @property
    def success_rate(self) -> float:
        if not self.total_searches:
            return 0.0
        return self.successful_searches / self.total_searches

    @property
    def cache_hit_rate(self) -> float:
        if not self.total_searches:
            return 0.0
        return self.cache_hits / self.total_searches

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_searches": self.total_searches,
            "average_response_ms": round(self.average_response_ms, 2),
            "success_rate": round(self.success_rate, 4),
            "cache_hits": self.cache_hits,
            "cache_hit_rate": round(self.cache_hit_rate, 4),
        }


def _elapsed_ms(t0: float) -> float:
    return round((time.monotonic() - t0) * 1000, 1)


class UnifiedSearchEngine:
    """Resolves free-text queries against the catalog through several engines."""

    def __init__(
        self,
        engines: Sequence[EngineAdapter],
        cache: ResultCache | None = None,
        ranker: ResultFusionRanker | None = None,
        classifier: QueryClassifier | None = None,
        engine_timeout: float | None = None,
    ):
        self._engines = list(engines)
        self._dispatcher = ParallelSearchOrchestrator(self._engines, engine_timeout=engine_timeout)
        self._cache = cache if cache is not None else ResultCache()
        self._ranker = ranker or ResultFusionRanker()
        self._classifier = classifier or QueryClassifier()
        self._metrics = PerformanceMetrics()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def get_engine(self, engine_id: str) -> EngineAdapter | None:
        return self._dispatcher.get(engine_id)

    async def initialize(self, catalog: Sequence[dict[str, Any]]) -> bool:
        """Load the catalog into every in-memory engine concurrently.

        A failing engine is logged and stays not-ready; the others still load.
        """
        catalog_engines = [e for e in self._engines if isinstance(e, CatalogEngine)]
        outcomes = await asyncio.gather(
            *(e.initialize(catalog) for e in catalog_engines),
            return_exceptions=True,
        )
        loaded = 0
        for engine, outcome in zip(catalog_engines, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Catalog load failed for engine '{engine.get_engine_id()}'",
                    exception=outcome if isinstance(outcome, Exception) else None,
                )
            elif outcome:
                loaded += 1
        self._initialized = True
        logger.info(
            "Initialized %s/%s catalog engines with %s entries",
            loaded,
            len(catalog_engines),
            len(catalog),
        )
        return loaded > 0

    async def resolve(
        self, query: str | None, options: SearchOptions | None = None
    ) -> UnifiedResult:
        """Run the full pipeline. Never raises for search failures.

        Raises UnknownContentTypeError for an unsupported options.content_type.
        """
        t0 = time.monotonic()
        options = options or SearchOptions()
        search_query = SearchQuery.from_raw(query)

        if search_query.is_empty:
            result = UnifiedResult.build([], SearchType.EMPTY_QUERY)
            self._metrics.record(_elapsed_ms(t0), success=True)
            return result

        cache_key = make_cache_key(search_query, options)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.cache_hit(search_query.raw)
            hit = cached.model_copy(deep=True)
            hit.metadata.cached = True
            self._metrics.record(_elapsed_ms(t0), success=True, cached=True)
            return hit

        strategy = self._classifier.classify(search_query, options)
        logger.search_start(search_query.raw, strategy.name, list(strategy.engines))

        outcome = await self._dispatcher.execute(search_query, strategy, options)
        for engine_result in outcome.results:
            logger.engine_result(
                engine_result.engine,
                len(engine_result.results),
                engine_result.elapsed_ms,
                error=engine_result.error,
            )

        result = self._assemble(strategy, outcome, _elapsed_ms(t0))
        if result.search_type != SearchType.ERROR:
            self._cache.put(cache_key, result.model_copy(deep=True))

        self._metrics.record(
            result.search_time_ms, success=result.search_type != SearchType.ERROR
        )
        logger.search_complete(
            search_query.raw, result.search_type.value, result.total, result.search_time_ms
        )
        return result

    def _assemble(
        self,
        strategy: SearchStrategy,
        outcome: DispatchOutcome,
        elapsed_ms: float,
    ) -> UnifiedResult:
        successes = outcome.successes
        failures = outcome.failures
        common: dict[str, Any] = {
            "strategy": strategy.name,
            "engine_errors": {r.engine: r.error or "" for r in failures},
            "skipped_engines": list(outcome.skipped),
        }

        if not successes:
            # Last failure in dispatch order; no dispatch at all also counts as failure.
            error = failures[-1].error if failures else "No engine available for this query"
            return UnifiedResult.build(
                [], SearchType.ERROR, search_time_ms=elapsed_ms, error=error, **common
            )

        fusion = self._ranker.fuse(successes)
        items = deduplicate(fusion.items)
        if not items:
            search_type = SearchType.NO_RESULTS
        elif len(successes) == 1:
            search_type = SearchType.SINGLE_ENGINE
        else:
            search_type = SearchType.UNIFIED_SEARCH

        return UnifiedResult.build(
            items,
            search_type,
            search_time_ms=elapsed_ms,
            engines=[r.engine for r in successes],
            engine_weights=fusion.engine_weights,
            combined_results=fusion.combined_results,
            **common,
        )

    def get_performance_metrics(self) -> dict[str, Any]:
        metrics = self._metrics.to_dict()
        stats = self._cache.stats
        metrics["cache"] = {
            "entries": len(self._cache),
            "hits": stats.hits,
            "misses": stats.misses,
            "evictions": stats.evictions,
        }
        return metrics

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Search cache cleared")
