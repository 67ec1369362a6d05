"""Parallel engine dispatcher: fans a query out to every engine in a strategy.

Each engine call is an independent task. Exceptions, adapter-reported errors
and timeouts are folded into an EngineResult for that engine only; the other
engines are unaffected.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field

from src.contracts.catalog_search_v1 import EngineResult, SearchOptions
from src.core.config import config
from src.orchestrators.resolver.interface import EngineAdapter
from src.orchestrators.resolver.models import SearchQuery, SearchStrategy

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """Settled engine calls (successes and failures) in strategy order."""

    results: list[EngineResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def successes(self) -> list[EngineResult]:
        return [r for r in self.results if r.ok]

    @property
    def failures(self) -> list[EngineResult]:
        return [r for r in self.results if not r.ok]


class ParallelSearchOrchestrator:
    """Runs engine adapters concurrently and isolates their failures."""

    def __init__(
        self,
        engines: Iterable[EngineAdapter] = (),
        engine_timeout: float | None = None,
    ) -> None:
        self._engines: dict[str, EngineAdapter] = {}
        for engine in engines:
            self.register(engine)
        self._timeout = (
            engine_timeout if engine_timeout is not None else config.engine_timeout_seconds
        )

    def register(self, engine: EngineAdapter) -> None:
        engine_id = engine.get_engine_id()
        self._engines[engine_id] = engine
        logger.info("Dispatcher: registered engine '%s'", engine_id)

    def get(self, engine_id: str) -> EngineAdapter | None:
        return self._engines.get(engine_id)

    @property
    def engine_ids(self) -> list[str]:
        return list(self._engines)

    async def execute(
        self,
        query: SearchQuery,
        strategy: SearchStrategy,
        options: SearchOptions,
    ) -> DispatchOutcome:
        """Dispatch to every engine in the strategy and wait for all of them to settle."""
        jobs: list[Awaitable[EngineResult]] = []
        skipped: list[str] = []
        for engine_id in strategy.engines:
            engine = self._engines.get(engine_id)
            if engine is None:
                jobs.append(self._unregistered(engine_id))
            elif not engine.is_ready():
                skipped.append(engine_id)
            else:
                jobs.append(self._execute_one(engine, query, options))

        if skipped:
            logger.info("Dispatcher: skipping engines not ready: %s", skipped)
        if not jobs:
            return DispatchOutcome(skipped=skipped)

        results = await asyncio.gather(*jobs)
        return DispatchOutcome(results=list(results), skipped=skipped)

    async def _unregistered(self, engine_id: str) -> EngineResult:
        logger.warning("Dispatcher: no engine registered for '%s'", engine_id)
        return EngineResult(engine=engine_id, error=f"Engine '{engine_id}' is not registered")

    async def _execute_one(
        self,
        engine: EngineAdapter,
        query: SearchQuery,
        options: SearchOptions,
    ) -> EngineResult:
        engine_id = engine.get_engine_id()
        t0 = time.monotonic()
        try:
            call = engine.search(query, options)
            if self._timeout is not None:
                result = await asyncio.wait_for(call, timeout=self._timeout)
            else:
                result = await call
        except TimeoutError:
            elapsed_ms = round((time.monotonic() - t0) * 1000, 1)
            logger.warning("Dispatcher: engine '%s' timed out after %ss", engine_id, self._timeout)
            return EngineResult(
                engine=engine_id,
                error=f"{engine_id} timed out after {self._timeout}s",
                elapsed_ms=elapsed_ms,
            )
        except Exception as e:
            elapsed_ms = round((time.monotonic() - t0) * 1000, 1)
            logger.error("Dispatcher: engine '%s' failed: %s", engine_id, e)
            return EngineResult(
                engine=engine_id,
                error=str(e) or type(e).__name__,
                elapsed_ms=elapsed_ms,
            )

        elapsed_ms = round((time.monotonic() - t0) * 1000, 1)
        if result.error is not None:
            logger.warning("Dispatcher: engine '%s' reported error: %s", engine_id, result.error)
        return result.model_copy(update={"engine": engine_id, "elapsed_ms": elapsed_ms})
