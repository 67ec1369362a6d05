"""One-shot interface: resolve a single query, print the unified result as JSON, exit."""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import ValidationError

from src.contracts.catalog_search_v1 import SearchOptions
from src.core.bootstrap import load_catalog, setup_search_engine
from src.orchestrators.resolver.constants import SearchType
from src.orchestrators.resolver.errors import UnknownContentTypeError


async def run_oneshot(
    query: str,
    content_type: str = "institutions",
    catalog_path: str | None = None,
    limit: int | None = None,
) -> int:
    text = (query or "").strip()
    if not text:
        print("Error: query must not be empty")
        return 2

    try:
        options = SearchOptions(content_type=content_type, **({"limit": limit} if limit else {}))
    except ValidationError as e:
        print(f"Error: invalid options: {e.errors()[0]['msg']}")
        return 2

    catalog = None
    if catalog_path:
        try:
            catalog = load_catalog(Path(catalog_path))
        except (OSError, ValueError) as e:
            print(f"Error: cannot load catalog: {e}")
            return 2

    engine = await setup_search_engine(catalog)
    try:
        result = await engine.resolve(text, options)
    except UnknownContentTypeError as e:
        print(f"Error: {e}")
        return 2

    print(result.model_dump_json(indent=2))
    return 1 if result.search_type == SearchType.ERROR else 0


def main(
    query: str,
    content_type: str = "institutions",
    catalog_path: str | None = None,
    limit: int | None = None,
) -> int:
    return asyncio.run(
        run_oneshot(
            query=query,
            content_type=content_type,
            catalog_path=catalog_path,
            limit=limit,
        )
    )
