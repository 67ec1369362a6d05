"""HTTP-backed engines (catalog API, AI search, regex search). Return EngineResult."""

import logging
from typing import Any

import httpx

from src.contracts.catalog_search_v1 import (
    CandidateItem,
    ContentType,
    EngineResult,
    MatchType,
    SearchOptions,
)
from src.core.config import config
from src.orchestrators.resolver.classifier import resolve_content_type
from src.orchestrators.resolver.constants import EngineId
from src.orchestrators.resolver.errors import EngineRequestError
from src.orchestrators.resolver.identity import candidate_from_payload
from src.orchestrators.resolver.interface import EngineAdapter
from src.orchestrators.resolver.models import SearchQuery

logger = logging.getLogger(__name__)

# Content type -> catalog API collection.
COLLECTIONS: dict[ContentType, str] = {
    ContentType.INSTITUTIONS: "colleges",
    ContentType.PROGRAMS: "courses",
    ContentType.RANKINGS: "cutoffs",
}

# Page size for the startup catalog download.
CATALOG_FETCH_LIMIT = 1000


def rank_score(rank: int) -> float:
    """Fallback score for engines that only return an ordering."""
    return max(30.0, 100.0 - 5.0 * rank)


def item_score(item: dict[str, Any], rank: int) -> float:
    for key in ("relevanceScore", "score"):
        value = item.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    return rank_score(rank)


class HttpEngine(EngineAdapter):
    """Shared GET/JSON plumbing for engines that live behind the catalog API."""

    engine_id: str = ""
    search_type: str = ""
    match_type: MatchType = MatchType.BACKEND

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = (base_url or config.api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else config.http_timeout_seconds
        self._client = client

    def get_engine_id(self) -> str:
        return self.engine_id

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        if self._client is not None:
            response = await self._client.get(url, params=params)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, params=params, follow_redirects=True)
        if not response.is_success:
            raise EngineRequestError(self.engine_id, response.status_code, url)
        data = response.json()
        return data if isinstance(data, dict) else {"results": data}

    def _to_candidates(self, raw: Any) -> list[CandidateItem]:
        items = raw if isinstance(raw, list) else []
        candidates: list[CandidateItem] = []
        for rank, item in enumerate(items):
            if not isinstance(item, dict):
                logger.debug("%s: skipping non-object result at rank %s", self.engine_id, rank)
                continue
            tags = {self.match_type.value}
            declared = item.get("matchType")
            if isinstance(declared, str) and declared:
                tags.add(declared)
            candidates.append(
                candidate_from_payload(item, self.engine_id, item_score(item, rank), tags)
            )
        return candidates


class BackendApiEngine(HttpEngine):
    """Catalog API: GET /api/{colleges|courses|cutoffs}?search=&page=&limit="""

    engine_id = EngineId.BACKEND.value
    search_type = "backend-api"
    match_type = MatchType.BACKEND

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        collection = COLLECTIONS[resolve_content_type(options.content_type)]
        params: dict[str, Any] = {
            "search": query.raw.strip(),
            "page": options.page,
            "limit": options.limit,
        }
        params.update({k: v for k, v in options.filters.items() if v is not None})
        data = await self._get_json(f"/api/{collection}", params)

        candidates = self._to_candidates(data.get("data", data.get("results", [])))
        pagination = data.get("pagination")
        if not isinstance(pagination, dict):
            pagination = {}
        total = pagination.get("totalItems")
        return EngineResult(
            engine=self.engine_id,
            results=candidates,
            total=total if isinstance(total, int) and total >= 0 else len(candidates),
            search_type=self.search_type,
            metadata={"pagination": pagination},
        )

    async def fetch_catalog(self, limit: int = CATALOG_FETCH_LIMIT) -> list[dict[str, Any]]:
        """Institution list used to seed the in-memory engines at startup."""
        data = await self._get_json(
            f"/api/{COLLECTIONS[ContentType.INSTITUTIONS]}", {"limit": limit}
        )
        entries = data.get("data", data.get("results", []))
        if not isinstance(entries, list):
            raise ValueError("Catalog response has no entry list")
        return [item for item in entries if isinstance(item, dict)]


class AiSearchEngine(HttpEngine):
    """Semantic search: GET /api/ai-search?q=&type="""

    engine_id = EngineId.AI.value
    search_type = "ai-search"
    match_type = MatchType.SEMANTIC

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        collection = COLLECTIONS[resolve_content_type(options.content_type)]
        data = await self._get_json(
            "/api/ai-search", {"q": query.raw.strip(), "type": collection}
        )
        candidates = self._to_candidates(data.get("results", []))
        total = data.get("total")
        metadata = data.get("metadata")
        return EngineResult(
            engine=self.engine_id,
            results=candidates,
            total=total if isinstance(total, int) and total >= 0 else len(candidates),
            search_type=self.search_type,
            metadata=metadata if isinstance(metadata, dict) else {},
        )


class RegexSearchEngine(HttpEngine):
    """Pattern search: GET /api/colleges/regex-search?pattern=&limit="""

    engine_id = EngineId.REGEX.value
    search_type = "regex-search"
    match_type = MatchType.REGEX

    async def search(self, query: SearchQuery, options: SearchOptions) -> EngineResult:
        data = await self._get_json(
            "/api/colleges/regex-search",
            {"pattern": query.raw.strip(), "limit": options.limit},
        )
        candidates = self._to_candidates(data.get("results", data.get("data", [])))
        return EngineResult(
            engine=self.engine_id,
            results=candidates,
            total=len(candidates),
            search_type=self.search_type,
            metadata={"pattern": query.raw.strip()},
        )
