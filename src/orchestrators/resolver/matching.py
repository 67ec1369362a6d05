"""Strict match classification between a query and a catalog display name.

Tiers, most to least specific (first passing tier wins):
    exact 100 > prefix 95 > abbreviation 85 > contains 70 > word-boundary 60

Abbreviation matches go through strict pattern matching and then tiered
validation by pattern length. Long guessed patterns are the main source of
false positives, so patterns of 5+ characters must equal an initialism the
name itself produces.
"""

from dataclasses import dataclass, field

from src.contracts.catalog_search_v1 import MatchType
from src.orchestrators.resolver.abbreviations import (
    generate_name_patterns,
    generate_query_patterns,
    is_likely_abbreviation,
)
from src.orchestrators.resolver.normalizer import normalize_name, normalize_query

MATCH_SCORES: dict[MatchType, float] = {
    MatchType.EXACT: 100.0,
    MatchType.PREFIX: 95.0,
    MatchType.ABBREVIATION: 85.0,
    MatchType.CONTAINS: 70.0,
    MatchType.WORD_BOUNDARY: 60.0,
}

# Queries made of these terms only match when they sit inside a single name word.
GENERIC_TERMS: tuple[str, ...] = (
    "HOSPITAL",
    "COLLEGE",
    "INSTITUTE",
    "MEDICAL",
    "DENTAL",
    "DNB",
)


@dataclass(frozen=True)
class MatchOutcome:
    is_match: bool
    match_type: MatchType
    score: float
    tags: frozenset[str] = field(default_factory=frozenset)


# ---------------------------------------------------------------------------
# Abbreviation mechanics
# ---------------------------------------------------------------------------


def _is_abbreviation_in_word(pattern: str, words: list[str]) -> bool:
    # Only 2-3 char patterns may hit a word prefix; longer ones never do.
    if not 2 <= len(pattern) <= 3:
        return False
    return any(w.startswith(pattern) and len(w) > len(pattern) for w in words)


def strict_pattern_match(pattern: str, name: str) -> bool:
    """Does `pattern` structurally appear at the head of `name` (normalized)?"""
    words = name.split(" ")
    if " " in pattern or "." in pattern:
        parts = [p for p in pattern.replace(".", " ").split(" ") if p]
        if len(parts) > len(words):
            return False
        return all(words[i] == part for i, part in enumerate(parts))

    if words and words[0] == pattern:
        return True
    if 2 <= len(pattern) <= 10 and pattern in generate_name_patterns(name):
        return True
    return _is_abbreviation_in_word(pattern, words)


def validate_pattern(pattern: str, name: str) -> bool:
    """Tiered validation of a pattern that already passed strict matching."""
    if name.startswith(pattern + " "):
        return True

    words = name.split(" ")
    if len(pattern) <= 2:
        for index, word in enumerate(words[:2]):
            if word == pattern:
                return True
            if index == 0 and word.startswith(pattern) and len(word) > len(pattern):
                return True
        return False

    if len(pattern) <= 4:
        if pattern in generate_name_patterns(name):
            return True
        return any(
            word == pattern or (index < 3 and word.startswith(pattern))
            for index, word in enumerate(words)
        )

    return pattern in generate_name_patterns(name)


def abbreviation_match(raw_query: str, name: str) -> bool:
    """Abbreviation tier check for a raw query against a normalized name."""
    if not is_likely_abbreviation(raw_query):
        return False
    query = normalize_query(raw_query)
    patterns = generate_query_patterns(query)

    if not any(
        strict_pattern_match(p, name) and validate_pattern(p, name) for p in patterns
    ):
        return False

    if len(query) <= 2:
        return any(p in name for p in patterns)
    return True


# ---------------------------------------------------------------------------
# Contains / word-boundary
# ---------------------------------------------------------------------------


def _is_significant(query: str, words: list[str]) -> bool:
    # Queries under 3 chars must be a whole word.
    if len(query) < 3:
        return query in words
    return any(query in word for word in words)


def smart_contains_match(query: str, name: str) -> bool:
    if len(query) < 2 or query not in name:
        return False
    query_words = query.split(" ")
    name_words = name.split(" ")
    if len(query_words) > 1:
        return any(
            len(qw) >= 2 and any(qw in nw for nw in name_words) for qw in query_words
        )
    return _is_significant(query, name_words)


def generic_terms_ok(query: str, name: str) -> bool:
    if any(term in query for term in GENERIC_TERMS):
        return any(query in word for word in name.split(" "))
    return True


def word_boundary_match(query: str, name: str) -> bool:
    query_words = query.split(" ")
    if any(len(w) < 3 for w in query_words):
        return False
    name_words = name.split(" ")
    return all(any(nw.startswith(qw) for nw in name_words) for qw in query_words)


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class MatchValidator:
    """Classifies a (query, name) pair into one scored match tier."""

    def match(self, raw_query: str, name: str) -> MatchOutcome | None:
        query = normalize_query(raw_query)
        target = normalize_name(name)
        if not query or not target:
            return None

        if target == query:
            return self._outcome(MatchType.EXACT, raw_query, target)
        if target.startswith(query + " "):
            return self._outcome(MatchType.PREFIX, raw_query, target)
        if abbreviation_match(raw_query, target):
            return self._outcome(MatchType.ABBREVIATION, raw_query, target)
        if smart_contains_match(query, target):
            if not generic_terms_ok(query, target):
                return None
            return self._outcome(MatchType.CONTAINS, raw_query, target)
        if word_boundary_match(query, target):
            return self._outcome(MatchType.WORD_BOUNDARY, raw_query, target)
        return None

    def _outcome(self, match_type: MatchType, raw_query: str, target: str) -> MatchOutcome:
        tags = {match_type.value}
        # An exact or prefix hit that is also a valid abbreviation keeps both tags.
        if match_type in (MatchType.EXACT, MatchType.PREFIX) and abbreviation_match(
            raw_query, target
        ):
            tags.add(MatchType.ABBREVIATION.value)
        return MatchOutcome(
            is_match=True,
            match_type=match_type,
            score=MATCH_SCORES[match_type],
            tags=frozenset(tags),
        )
