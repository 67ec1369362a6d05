"""Query and name normalization plus the regex-pattern heuristic."""

import re

_WHITESPACE = re.compile(r"\s+")
_REGEX_SPECIAL = frozenset(".*+?^${}()|[]\\")


def normalize_query(text: str | None) -> str:
    """Uppercase, turn dots into spaces, collapse whitespace, trim.

    Idempotent: normalize_query(normalize_query(x)) == normalize_query(x).
    """
    if not text:
        return ""
    folded = text.upper().replace(".", " ")
    return _WHITESPACE.sub(" ", folded).strip()


def normalize_name(name: str | None) -> str:
    """Same transform as normalize_query, applied to catalog display names."""
    return normalize_query(name)


def looks_like_regex(raw: str | None) -> bool:
    """True when the raw (trimmed) query reads like a regular expression.

    Covers a leading metacharacter, any metacharacter in the body
    (`.*+?^${}()|[]\\`) and the `/.../` wrapped form.
    """
    text = (raw or "").strip()
    if not text:
        return False
    if len(text) >= 2 and text.startswith("/") and text.endswith("/"):
        return True
    return any(ch in _REGEX_SPECIAL for ch in text)
