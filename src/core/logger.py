"""Search event logging.

Two sinks:
  - console: the stdlib "resolver" logger, one short line per pipeline step
  - event log: JSON lines in logs/resolver.log, one record per search event
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any

from src.core.config import config

# Keyword arguments the stdlib logging methods accept.
_STDLIB_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

_ANSI = {
    "engine": "\033[38;5;81m",
    "ok": "\033[38;5;78m",
    "fail": "\033[38;5;203m",
    "duration": "\033[38;5;221m",
    "dim": "\033[38;5;245m",
}


class EventType(StrEnum):
    SEARCH_START = "SEARCH_START"
    CACHE_HIT = "CACHE_HIT"
    ENGINE_RESULT = "ENGINE_RESULT"
    SEARCH_COMPLETE = "SEARCH_COMPLETE"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _color_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _paint(text: str, role: str) -> str:
    if not _color_enabled():
        return text
    return f"{_ANSI[role]}{text}\033[0m"


def _format_duration(ms: float) -> str:
    if ms >= 1000:
        return f"{ms / 1000:.1f}s"
    if ms >= 1:
        return f"{ms:.0f}ms"
    return "<1ms" if ms > 0 else "0ms"


def _clip(text: str | None, max_len: int = 80) -> str:
    if not text:
        return ""
    line = " ".join(text.split())
    return line if len(line) <= max_len else line[:max_len] + "..."


def _stdlib_kwargs(kwargs: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k in _STDLIB_KWARGS}


class JsonlSink:
    """Append-only JSON-lines file shared by every thread in the process."""

    def __init__(self, path: Path):
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._lock = threading.Lock()
        self._handle = open(path, "a", encoding="utf-8")

    def write(self, event_type: EventType, data: dict[str, Any]) -> None:
        record = {
            "event_type": event_type.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
        line = json.dumps(record, default=str)
        with self._lock:
            self._handle.write(line + "\n")
            self._handle.flush()

    def close(self) -> None:
        with self._lock:
            self._handle.close()


def _console_logger() -> logging.Logger:
    console = logging.getLogger("resolver")
    console.setLevel(logging.DEBUG)
    if not console.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter("%(asctime)s │ %(message)s", datefmt="%H:%M:%S"))
        console.addHandler(handler)
    return console


class ResolverLogger:
    def __init__(self, sink: JsonlSink | None = None, console: logging.Logger | None = None):
        self.sink = sink
        self.console = console or _console_logger()

    def _record(self, event_type: EventType, **data: Any) -> None:
        if self.sink is not None:
            self.sink.write(event_type, data)

    # -- pipeline events --------------------------------------------------

    def search_start(self, query: str, strategy: str, engines: list[str]) -> None:
        self._record(EventType.SEARCH_START, query=query[:200], strategy=strategy, engines=engines)
        self.console.info(
            f"Search: {_clip(query)}  strategy={strategy}  {_paint(', '.join(engines), 'engine')}"
        )

    def cache_hit(self, query: str) -> None:
        self._record(EventType.CACHE_HIT, query=query[:200])
        self.console.info(f"Cache hit: {_clip(query)}")

    def engine_result(
        self,
        engine: str,
        result_count: int,
        elapsed_ms: float,
        *,
        error: str | None = None,
    ) -> None:
        self._record(
            EventType.ENGINE_RESULT,
            engine=engine,
            result_count=result_count,
            elapsed_ms=round(elapsed_ms, 1),
            success=error is None,
            error=error[:500] if error else None,
        )
        label = _paint(engine, "engine")
        duration = _paint(_format_duration(elapsed_ms), "duration")
        if error is None:
            self.console.info(f"  │ {label}  {result_count} results  {duration}  {_paint('[ok]', 'ok')}")
        else:
            self.console.info(f"  │ {label}  {duration}  {_paint('[failed]', 'fail')} {_clip(error)}")

    def search_complete(
        self, query: str, search_type: str, result_count: int, elapsed_ms: float
    ) -> None:
        self._record(
            EventType.SEARCH_COMPLETE,
            query=query[:200],
            search_type=search_type,
            result_count=result_count,
            elapsed_ms=round(elapsed_ms, 1),
        )
        self.console.info(
            f"Done: {result_count} results  {_paint(search_type, 'dim')}  "
            f"{_paint(_format_duration(elapsed_ms), 'duration')}"
        )

    # -- plain messages ---------------------------------------------------

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        self._record(
            EventType.ERROR,
            message=message,
            exception=str(exception) if exception else None,
        )
        log_kwargs = _stdlib_kwargs(kwargs)
        if exception is not None:
            log_kwargs.setdefault("exc_info", exception)
        self.console.error(f"Error: {message}", *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._record(EventType.WARNING, message=message[:500])
        self.console.warning(message, *args, **_stdlib_kwargs(kwargs))

    def info(self, message: str, *args, **kwargs):
        self.console.info(message, *args, **_stdlib_kwargs(kwargs))

    def debug(self, message: str, *args, **kwargs):
        self.console.debug(message, *args, **_stdlib_kwargs(kwargs))


def _default_sink() -> JsonlSink | None:
    if not config.log_to_file:
        return None
    return JsonlSink(config.logs_dir / "resolver.log")


logger = ResolverLogger(sink=_default_sink())
