"""Engine wiring and catalog loading at startup."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import httpx

from src.core.config import config
from src.core.logger import logger
from src.orchestrators.resolver.backends import (
    AdvancedFuzzyEngine,
    AiSearchEngine,
    BackendApiEngine,
    RegexSearchEngine,
    SimpleHeuristicEngine,
)
from src.orchestrators.resolver.cache import ResultCache
from src.orchestrators.resolver.constants import EngineId
from src.orchestrators.resolver.errors import EngineRequestError
from src.orchestrators.resolver.fusion import ResultFusionRanker
from src.orchestrators.resolver.orchestrator import UnifiedSearchEngine


def load_catalog(path: Path) -> list[dict[str, Any]]:
    """Read a catalog JSON file: a list of entries or an object with a `data` list."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("data", data.get("results", []))
    if not isinstance(data, list):
        raise ValueError(f"Catalog file {path} does not contain a list of entries")
    return [item for item in data if isinstance(item, dict)]


def build_search_engine(client: httpx.AsyncClient | None = None) -> UnifiedSearchEngine:
    """Default wiring: the three HTTP engines plus the two in-memory catalog engines."""
    for problem in config.validate():
        logger.warning(f"Config: {problem}")

    engines = [
        BackendApiEngine(client=client),
        AiSearchEngine(client=client),
        RegexSearchEngine(client=client),
        AdvancedFuzzyEngine(),
        SimpleHeuristicEngine(),
    ]
    return UnifiedSearchEngine(
        engines,
        cache=ResultCache(),
        ranker=ResultFusionRanker(),
        engine_timeout=config.engine_timeout_seconds,
    )


async def fetch_remote_catalog(engine: UnifiedSearchEngine) -> list[dict[str, Any]]:
    """Download the institution catalog through the wired backend engine.

    Returns an empty list when the backend is missing or the download fails.
    """
    backend = engine.get_engine(EngineId.BACKEND.value)
    if not isinstance(backend, BackendApiEngine):
        return []
    try:
        return await backend.fetch_catalog()
    except (httpx.HTTPError, EngineRequestError, ValueError) as e:
        logger.warning(f"Catalog download failed: {e}")
        return []


async def setup_search_engine(
    catalog: Sequence[dict[str, Any]] | None = None,
    client: httpx.AsyncClient | None = None,
) -> UnifiedSearchEngine:
    """Build the default engine and load the in-memory catalog.

    With no catalog given, it is fetched from the catalog API.
    """
    engine = build_search_engine(client=client)
    if catalog is None:
        catalog = await fetch_remote_catalog(engine)
    if catalog:
        await engine.initialize(catalog)
    else:
        logger.info("No catalog loaded; in-memory engines will be skipped")
    return engine
