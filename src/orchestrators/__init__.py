"""Orchestrators: multi-engine pipelines (e.g. catalog resolution)."""

from src.orchestrators.resolver import (
    EngineAdapter,
    UnifiedResult,
    UnifiedSearchEngine,
)

__all__ = [
    "EngineAdapter",
    "UnifiedResult",
    "UnifiedSearchEngine",
]
