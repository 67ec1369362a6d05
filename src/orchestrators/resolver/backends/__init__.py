"""Engine adapters: HTTP-backed catalog engines and in-memory catalog engines."""

from src.orchestrators.resolver.backends.fuzzy import AdvancedFuzzyEngine
from src.orchestrators.resolver.backends.http_api import (
    AiSearchEngine,
    BackendApiEngine,
    RegexSearchEngine,
)
from src.orchestrators.resolver.backends.simple import SimpleHeuristicEngine

__all__ = [
    "AdvancedFuzzyEngine",
    "AiSearchEngine",
    "BackendApiEngine",
    "RegexSearchEngine",
    "SimpleHeuristicEngine",
]
