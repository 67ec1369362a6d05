from __future__ import annotations

import pytest

from src.contracts.catalog_search_v1 import EngineResult, SearchOptions
from src.orchestrators.resolver import UnifiedSearchEngine
from src.orchestrators.resolver.backends import AdvancedFuzzyEngine, SimpleHeuristicEngine
from src.orchestrators.resolver.cache import ResultCache
from src.orchestrators.resolver.classifier import QueryClassifier
from src.orchestrators.resolver.errors import UnknownContentTypeError
from src.orchestrators.resolver.fusion import ResultFusionRanker
from src.orchestrators.resolver.identity import candidate_from_payload
from src.orchestrators.resolver.interface import CatalogEngine, EngineAdapter
from src.orchestrators.resolver.models import SearchQuery, SearchStrategy

WEIGHTS = {"backend": 0.4, "ai": 0.3, "advanced": 0.2, "simple": 0.1, "regex": 0.2}

CATALOG = [
    {"id": 1, "name": "AIIMS NEW DELHI"},
    {"id": 2, "name": "AIIMS"},
    {"id": 3, "name": "ALL INDIA INSTITUTE OF MEDICAL SCIENCES (AIIMS) JODHPUR"},
    {"id": 4, "name": "KASTURBA MEDICAL COLLEGE"},
    {"id": 5, "name": "A J INSTITUTE OF MEDICAL SCIENCES & RESEARCH CENTRE"},
]


class StubEngine(EngineAdapter):
    """Returns canned (payload, score) pairs, or raises."""

    def __init__(
        self,
        engine_id: str,
        hits: list[tuple[dict, float]] | None = None,
        exc: Exception | None = None,
    ):
        self._id = engine_id
        self._hits = hits or []
        self._exc = exc
        self.calls = 0

    def get_engine_id(self) -> str:
        return self._id

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        self.calls += 1
        if self._exc is not None:
            raise self._exc
        return EngineResult(
            engine=self._id,
            results=[candidate_from_payload(p, self._id, s, {self._id}) for p, s in self._hits],
            total=len(self._hits),
        )


class FixedClassifier(QueryClassifier):
    def __init__(self, *engines: str):
        self._engines = engines

    def classify(self, query: SearchQuery, options: SearchOptions) -> SearchStrategy:
        super().classify(query, options)
        return SearchStrategy(name="fixed", engines=self._engines)


def _resolver(*engines: EngineAdapter, **kwargs) -> UnifiedSearchEngine:
    kwargs.setdefault("ranker", ResultFusionRanker(weights=WEIGHTS, multi_engine_boost=0.1))
    kwargs.setdefault("cache", ResultCache(ttl_seconds=300, max_entries=100, evict_batch=20))
    return UnifiedSearchEngine(list(engines), **kwargs)


class TestEndToEndScenarios:
    @pytest.mark.asyncio
    async def test_empty_query(self):
        backend = StubEngine("backend", [({"id": 1}, 90)])
        resolver = _resolver(backend)
        for query in ("", "   ", None):
            result = await resolver.resolve(query)
            assert result.search_type == "empty-query"
            assert result.results == []
            assert result.total == 0
        assert backend.calls == 0
        assert len(resolver.cache) == 0

    @pytest.mark.asyncio
    async def test_exact_name_ranks_before_substring_matches(self):
        backend = StubEngine(
            "backend",
            [(CATALOG[1], 100), (CATALOG[0], 90), (CATALOG[2], 80)],
        )
        resolver = _resolver(
            backend,
            StubEngine("ai"),
            AdvancedFuzzyEngine(score_cutoff=70, limit=10),
        )
        await resolver.initialize(CATALOG)

        result = await resolver.resolve("AIIMS")

        keys = [c.identity_key for c in result.results]
        assert result.search_type == "unified-search"
        assert result.metadata.strategy == "abbreviation-focused"
        assert keys[:3] == ["id:2", "id:1", "id:3"]
        assert len(keys) == len(set(keys))
        assert "id:4" not in keys
        scores = [c.unified_score for c in result.results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_spaced_initials_surface_abbreviation_match(self):
        simple = SimpleHeuristicEngine()
        resolver = _resolver(simple, classifier=FixedClassifier("simple"))
        await resolver.initialize(CATALOG)

        result = await resolver.resolve("A J")

        assert result.search_type == "single-engine"
        top = result.results[0]
        assert top.payload["name"] == "A J INSTITUTE OF MEDICAL SCIENCES & RESEARCH CENTRE"
        assert "abbreviation" in top.match_types
        assert top.unified_score >= 85

    @pytest.mark.asyncio
    async def test_all_engines_failing_yields_error(self):
        engines = [
            StubEngine(engine_id, exc=RuntimeError(f"{engine_id} down"))
            for engine_id in ("backend", "ai", "advanced", "simple")
        ]
        resolver = _resolver(*engines)

        result = await resolver.resolve("KMC UDUPI")

        assert result.search_type == "error"
        assert result.results == []
        assert result.error == "simple down"
        assert set(result.metadata.engine_errors) == {"backend", "ai", "advanced", "simple"}
        assert len(resolver.cache) == 0

        await resolver.resolve("KMC UDUPI")
        assert all(e.calls == 2 for e in engines)

    @pytest.mark.asyncio
    async def test_shared_identity_key_is_fused_with_boost(self):
        resolver = _resolver(
            StubEngine("backend", [({"id": 42, "name": "KVG MEDICAL COLLEGE"}, 80)]),
            StubEngine("ai"),
            StubEngine("advanced", [({"id": 42, "name": "K V G MEDICAL COLLEGE"}, 60)]),
        )

        result = await resolver.resolve("KVG")

        assert result.metadata.strategy == "abbreviation-focused"
        assert result.search_type == "unified-search"
        assert len(result.results) == 1
        fused = result.results[0]
        assert fused.identity_key == "id:42"
        assert fused.unified_score == pytest.approx(48.4)
        assert fused.engine_scores == {"backend": 80, "advanced": 60}
        assert fused.payload["name"] == "KVG MEDICAL COLLEGE"
        assert result.metadata.engines == ["backend", "ai", "advanced"]
        assert result.metadata.engine_weights == {"backend": 0.4, "ai": 0.3, "advanced": 0.2}


class TestResolvePipeline:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_engines(self):
        backend = StubEngine("backend", [({"id": 1, "name": "X"}, 90)])
        resolver = _resolver(backend, StubEngine("ai"))

        first = await resolver.resolve("KMC UDUPI", SearchOptions(content_type="programs"))
        second = await resolver.resolve("kmc  udupi", SearchOptions(content_type="programs"))

        assert backend.calls == 1
        assert first.metadata.cached is False
        assert second.metadata.cached is True
        assert [c.identity_key for c in second.results] == ["id:1"]

    @pytest.mark.asyncio
    async def test_cached_copy_is_isolated_from_callers(self):
        resolver = _resolver(StubEngine("backend", [({"id": 1, "name": "X"}, 90)]))
        options = SearchOptions(content_type="programs")

        first = await resolver.resolve("KMC UDUPI", options)
        first.results.clear()

        second = await resolver.resolve("KMC UDUPI", options)
        assert len(second.results) == 1

    @pytest.mark.asyncio
    async def test_different_options_miss_the_cache(self):
        backend = StubEngine("backend", [({"id": 1}, 90)])
        resolver = _resolver(backend)
        await resolver.resolve("KMC UDUPI", SearchOptions(content_type="programs"))
        await resolver.resolve("KMC UDUPI", SearchOptions(content_type="programs", limit=5))
        assert backend.calls == 2

    @pytest.mark.asyncio
    async def test_one_failing_engine_does_not_fail_the_search(self):
        resolver = _resolver(
            StubEngine("backend", exc=RuntimeError("backend down")),
            StubEngine("ai", [({"id": 7, "name": "KMC"}, 70)]),
            StubEngine("advanced"),
            StubEngine("simple"),
        )

        result = await resolver.resolve("KMC UDUPI")

        assert result.metadata.strategy == "comprehensive"
        assert result.search_type == "unified-search"
        assert result.error is None
        assert [c.identity_key for c in result.results] == ["id:7"]
        assert result.metadata.engine_errors == {"backend": "backend down"}

    @pytest.mark.asyncio
    async def test_single_success_is_single_engine(self):
        resolver = _resolver(
            StubEngine("backend", exc=RuntimeError("down")),
            StubEngine("ai", [({"id": 7}, 70)]),
            StubEngine("advanced", exc=RuntimeError("down")),
            StubEngine("simple", exc=RuntimeError("down")),
        )
        result = await resolver.resolve("KMC UDUPI")
        assert result.search_type == "single-engine"
        assert result.results[0].unified_score == 70

    @pytest.mark.asyncio
    async def test_not_ready_engines_are_skipped(self):
        resolver = _resolver(
            StubEngine("backend", [({"id": 1}, 90)]),
            StubEngine("ai", [({"id": 1}, 80)]),
            AdvancedFuzzyEngine(),
            SimpleHeuristicEngine(),
        )

        result = await resolver.resolve("KMC UDUPI")

        assert result.search_type == "unified-search"
        assert result.metadata.skipped_engines == ["advanced", "simple"]
        assert result.metadata.engine_errors == {}

    @pytest.mark.asyncio
    async def test_no_results(self):
        resolver = _resolver(StubEngine("backend"), StubEngine("ai"))
        result = await resolver.resolve("KMC UDUPI", SearchOptions(content_type="programs"))
        assert result.search_type == "no-results"
        assert result.error is None
        assert len(resolver.cache) == 1

    @pytest.mark.asyncio
    async def test_no_dispatchable_engine_is_an_error(self):
        resolver = _resolver(SimpleHeuristicEngine(), classifier=FixedClassifier("simple"))
        result = await resolver.resolve("A J")
        assert result.search_type == "error"
        assert result.error == "No engine available for this query"
        assert result.metadata.skipped_engines == ["simple"]

    @pytest.mark.asyncio
    async def test_unknown_content_type_propagates(self):
        backend = StubEngine("backend")
        resolver = _resolver(backend)
        with pytest.raises(UnknownContentTypeError) as exc:
            await resolver.resolve("AIIMS", SearchOptions(content_type="hospitals"))
        assert exc.value.content_type == "hospitals"
        assert backend.calls == 0

    @pytest.mark.asyncio
    async def test_regex_query_routes_to_regex_engine(self):
        regex = StubEngine("regex", [({"id": 9, "name": "AIIMS PATNA"}, 100)])
        backend = StubEngine("backend")
        resolver = _resolver(backend, regex)

        result = await resolver.resolve("^AIIMS.*")

        assert result.metadata.strategy == "regex-focused"
        assert regex.calls == 1
        assert backend.calls == 1
        assert result.results[0].identity_key == "id:9"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_survives_one_engine_failing(self):
        class BrokenCatalogEngine(SimpleHeuristicEngine):
            async def initialize(self, catalog):
                raise RuntimeError("corrupt index")

        fuzzy = AdvancedFuzzyEngine()
        broken = BrokenCatalogEngine()
        resolver = _resolver(fuzzy, broken)

        assert await resolver.initialize(CATALOG) is True
        assert resolver.is_initialized
        assert fuzzy.is_ready()
        assert not broken.is_ready()

    @pytest.mark.asyncio
    async def test_initialize_with_empty_catalog(self):
        resolver = _resolver(SimpleHeuristicEngine())
        assert await resolver.initialize([]) is False
        assert isinstance(resolver.get_engine("simple"), CatalogEngine)

    @pytest.mark.asyncio
    async def test_performance_metrics(self):
        resolver = _resolver(StubEngine("backend", [({"id": 1}, 90)]))
        options = SearchOptions(content_type="programs")
        await resolver.resolve("KMC UDUPI", options)
        await resolver.resolve("KMC UDUPI", options)

        metrics = resolver.get_performance_metrics()
        assert metrics["total_searches"] == 2
        assert metrics["cache_hits"] == 1
        assert metrics["cache_hit_rate"] == 0.5
        assert metrics["success_rate"] == 1.0
        assert metrics["cache"]["entries"] == 1
        assert metrics["cache"]["hits"] == 1

    @pytest.mark.asyncio
    async def test_clear_cache_forces_fresh_dispatch(self):
        backend = StubEngine("backend", [({"id": 1}, 90)])
        resolver = _resolver(backend)
        options = SearchOptions(content_type="programs")
        await resolver.resolve("KMC UDUPI", options)
        resolver.clear_cache()
        await resolver.resolve("KMC UDUPI", options)
        assert backend.calls == 2
