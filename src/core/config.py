"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ENGINE_WEIGHTS: dict[str, float] = {
    "backend": 0.4,
    "ai": 0.3,
    "advanced": 0.2,
    "simple": 0.1,
    "regex": 0.2,
}


def _parse_weights(raw: str) -> dict[str, float]:
    """Parse 'backend=0.4,ai=0.3' into a weight map layered over the defaults."""
    weights = dict(DEFAULT_ENGINE_WEIGHTS)
    for part in raw.split(","):
        if "=" not in part:
            continue
        name, _, value = part.partition("=")
        name = name.strip().lower()
        if name:
            weights[name] = float(value.strip())
    return weights


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    log_to_file: bool
    api_url: str
    http_timeout_seconds: float
    engine_timeout_seconds: float | None  # None = wait for every engine
    multi_engine_boost: float
    cache_ttl_seconds: float
    cache_max_entries: int
    cache_evict_batch: int
    fuzzy_score_cutoff: float
    fuzzy_limit: int
    engine_weights: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_ENGINE_WEIGHTS)
    )

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        logs_dir = os.getenv("RESOLVER_LOGS_DIR", "")
        return cls(
            project_root=project_root,
            logs_dir=Path(logs_dir) if logs_dir else project_root / "logs",
            log_to_file=_flag(os.getenv("RESOLVER_LOG_TO_FILE"), True),
            api_url=os.getenv("RESOLVER_API_URL", "http://localhost:8787").rstrip("/"),
            http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
            engine_timeout_seconds=_optional_float(os.getenv("ENGINE_TIMEOUT_SECONDS")),
            multi_engine_boost=float(os.getenv("MULTI_ENGINE_BOOST", "0.1")),
            cache_ttl_seconds=float(os.getenv("CACHE_TTL_SECONDS", "300")),
            cache_max_entries=int(os.getenv("CACHE_MAX_ENTRIES", "100")),
            cache_evict_batch=int(os.getenv("CACHE_EVICT_BATCH", "20")),
            fuzzy_score_cutoff=float(os.getenv("FUZZY_SCORE_CUTOFF", "60")),
            fuzzy_limit=int(os.getenv("FUZZY_LIMIT", "50")),
            engine_weights=_parse_weights(os.getenv("ENGINE_WEIGHTS", "")),
        )

    def validate(self) -> list[str]:
        errors = []
        if self.cache_ttl_seconds <= 0:
            errors.append(f"CACHE_TTL_SECONDS must be positive, got {self.cache_ttl_seconds}")
        if self.cache_max_entries < 1:
            errors.append(f"CACHE_MAX_ENTRIES must be >= 1, got {self.cache_max_entries}")
        if not 1 <= self.cache_evict_batch <= self.cache_max_entries:
            errors.append(
                f"CACHE_EVICT_BATCH must be between 1 and CACHE_MAX_ENTRIES, got {self.cache_evict_batch}"
            )
        if self.engine_timeout_seconds is not None and self.engine_timeout_seconds <= 0:
            errors.append(
                f"ENGINE_TIMEOUT_SECONDS must be positive when set, got {self.engine_timeout_seconds}"
            )
        if self.multi_engine_boost < 0:
            errors.append(f"MULTI_ENGINE_BOOST must be >= 0, got {self.multi_engine_boost}")
        for name, weight in self.engine_weights.items():
            if not 0.0 <= weight <= 1.0:
                errors.append(f"Engine weight for '{name}' must be in [0, 1], got {weight}")
        return errors


config = Config.load()
