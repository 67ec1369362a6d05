"""Identity keys: the join key for one real-world entity across engines."""

import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any

from src.contracts.catalog_search_v1 import CandidateItem
from src.orchestrators.resolver.normalizer import normalize_name

# Payload field -> key prefix, in priority order.
_ID_FIELDS: tuple[tuple[str, str], ...] = (
    ("id", "id"),
    ("college_id", "college"),
    ("course_id", "course"),
)


def identity_key(payload: Mapping[str, Any]) -> str:
    """`id:`, `college:` or `course:` from a stable id, else `name:`, else a payload hash."""
    for field_name, prefix in _ID_FIELDS:
        value = payload.get(field_name)
        if value is not None and value != "":
            return f"{prefix}:{value}"
    name = payload.get("name")
    if isinstance(name, str) and name.strip():
        return f"name:{normalize_name(name)}"
    blob = json.dumps(dict(payload), sort_keys=True, default=str)
    return f"hash:{hashlib.sha1(blob.encode('utf-8')).hexdigest()[:16]}"


def candidate_from_payload(
    payload: Mapping[str, Any],
    engine: str,
    score: float,
    match_types: Iterable[str] = (),
) -> CandidateItem:
    return CandidateItem(
        identity_key=identity_key(payload),
        payload=dict(payload),
        engine_scores={engine: float(score)},
        match_types=set(match_types),
    )
