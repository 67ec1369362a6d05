import os
from collections.abc import AsyncIterator
from pathlib import Path

import pytest_asyncio

from src.core.bootstrap import load_catalog, setup_search_engine
from src.orchestrators.resolver import UnifiedSearchEngine


@pytest_asyncio.fixture
async def resolver() -> AsyncIterator[UnifiedSearchEngine]:
    """Real resolver against RESOLVER_API_URL, for e2e/integration suites only.

    Set RESOLVER_E2E_CATALOG to a catalog JSON file instead of downloading it from the API.
    """
    catalog_path = os.getenv("RESOLVER_E2E_CATALOG")
    catalog = load_catalog(Path(catalog_path)) if catalog_path else None
    engine = await setup_search_engine(catalog)
    try:
        yield engine
    finally:
        engine.clear_cache()
