"""Weighted fusion ranker: merges candidates from several engines by identity key.

Unified score = sum(engine score * engine weight) * (1 + boost * (engine_count - 1))

The per-engine weights and the boost are configuration (ENGINE_WEIGHTS,
MULTI_ENGINE_BOOST). They are uncalibrated and should be tuned against
real relevance judgments.

Each group keeps the best score per engine; the maximum raw score of a fused
candidate is its `best_score` over those per-engine scores.
"""

import logging
from dataclasses import dataclass, field

from src.contracts.catalog_search_v1 import CandidateItem, EngineResult
from src.core.config import config

logger = logging.getLogger(__name__)


@dataclass
class FusionOutcome:
    items: list[CandidateItem] = field(default_factory=list)
    combined_results: int = 0
    engine_weights: dict[str, float] = field(default_factory=dict)


@dataclass
class _Group:
    payload: dict
    engine_scores: dict[str, float]
    match_types: set[str]


def deduplicate(items: list[CandidateItem]) -> list[CandidateItem]:
    """Keep the first occurrence of each identity key, preserving order."""
    seen: set[str] = set()
    unique: list[CandidateItem] = []
    for item in items:
        if item.identity_key in seen:
            continue
        seen.add(item.identity_key)
        unique.append(item)
    return unique


class ResultFusionRanker:
    """Ranks candidates using weighted score fusion across engines."""

    def __init__(
        self,
        weights: dict[str, float] | None = None,
        multi_engine_boost: float | None = None,
    ) -> None:
        self._weights = dict(weights if weights is not None else config.engine_weights)
        self._boost = (
            multi_engine_boost if multi_engine_boost is not None else config.multi_engine_boost
        )

    @property
    def weights(self) -> dict[str, float]:
        return dict(self._weights)

    def weight_for(self, engine: str) -> float:
        return self._weights.get(engine, 0.0)

    def fuse(self, results: list[EngineResult]) -> FusionOutcome:
        """Group, score and sort candidates from the successful engine results.

        Input order is strategy order; it breaks score ties.
        """
        successes = [r for r in results if r.ok]
        engine_weights = {r.engine: self.weight_for(r.engine) for r in successes}
        if not successes:
            return FusionOutcome(engine_weights=engine_weights)

        if len(successes) == 1:
            return self._pass_through(successes[0], engine_weights)

        groups: dict[str, _Group] = {}
        for result in successes:
            for item in result.results:
                score = item.engine_scores.get(result.engine, item.best_score)
                group = groups.get(item.identity_key)
                if group is None:
                    groups[item.identity_key] = _Group(
                        payload=dict(item.payload),
                        engine_scores={result.engine: score},
                        match_types=set(item.match_types),
                    )
                    continue
                for key, value in item.payload.items():
                    group.payload.setdefault(key, value)
                previous = group.engine_scores.get(result.engine)
                if previous is None or score > previous:
                    group.engine_scores[result.engine] = score
                group.match_types |= item.match_types

        fused: list[CandidateItem] = []
        for key, group in groups.items():
            weighted = sum(
                score * engine_weights.get(engine, self.weight_for(engine))
                for engine, score in group.engine_scores.items()
            )
            boost = 1 + self._boost * (len(group.engine_scores) - 1)
            fused.append(
                CandidateItem(
                    identity_key=key,
                    payload=group.payload,
                    engine_scores=group.engine_scores,
                    match_types=group.match_types,
                    unified_score=weighted * boost,
                )
            )

        fused.sort(key=lambda c: -(c.unified_score or 0.0))

        logger.info(
            "Fusion: %s engines, %s candidates -> %s groups",
            len(successes),
            sum(len(r.results) for r in successes),
            len(groups),
        )
        return FusionOutcome(
            items=fused,
            combined_results=len(groups),
            engine_weights=engine_weights,
        )

    def _pass_through(
        self, result: EngineResult, engine_weights: dict[str, float]
    ) -> FusionOutcome:
        items = [
            item.model_copy(
                update={
                    "unified_score": item.engine_scores.get(result.engine, item.best_score)
                },
                deep=True,
            )
            for item in result.results
        ]
        return FusionOutcome(
            items=items,
            combined_results=len({i.identity_key for i in items}),
            engine_weights=engine_weights,
        )
