"""Standard interface for engines used by the resolver.

All engines (HTTP-backed and in-memory) implement EngineAdapter and return EngineResult.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from src.contracts.catalog_search_v1 import EngineResult, SearchOptions
from src.orchestrators.resolver.models import SearchQuery


class EngineAdapter(ABC):
    """Base class for all search engines."""

    @abstractmethod
    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        """Execute search. Raise, or return an EngineResult carrying `error`, on failure."""

    @abstractmethod
    def get_engine_id(self) -> str:
        """Canonical engine identifier, used for weighting and metadata."""

    def is_ready(self) -> bool:
        """Whether the engine can serve searches right now."""
        return True


class CatalogEngine(EngineAdapter):
    """An engine that searches an in-memory catalog loaded at startup."""

    def __init__(self) -> None:
        self._catalog: list[dict[str, Any]] = []
        self._ready = False

    async def initialize(self, catalog: Sequence[dict[str, Any]]) -> bool:
        """Load the catalog. Returns False when nothing usable was given."""
        entries = [dict(item) for item in catalog if isinstance(item, dict)]
        self._catalog = entries
        self._ready = bool(entries)
        return self._ready

    def is_ready(self) -> bool:
        return self._ready

    @property
    def catalog_size(self) -> int:
        return len(self._catalog)

    def _entries(self, filters: dict[str, Any]) -> list[tuple[int, dict[str, Any]]]:
        """Catalog entries (with their index) whose fields equal every given filter."""
        active = {k: v for k, v in filters.items() if v is not None}
        return [
            (index, item)
            for index, item in enumerate(self._catalog)
            if all(item.get(k) == v for k, v in active.items())
        ]
