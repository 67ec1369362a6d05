"""Catalog resolver: multi-engine query resolution with weighted fusion."""

from src.contracts.catalog_search_v1 import CandidateItem
from src.orchestrators.resolver.interface import CatalogEngine, EngineAdapter
from src.orchestrators.resolver.models import SearchQuery, UnifiedResult
from src.orchestrators.resolver.orchestrator import UnifiedSearchEngine

__all__ = [
    "CandidateItem",
    "CatalogEngine",
    "EngineAdapter",
    "SearchQuery",
    "UnifiedResult",
    "UnifiedSearchEngine",
]
