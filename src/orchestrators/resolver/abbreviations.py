"""Abbreviation detection and pattern synthesis.

Pure functions; no engine or network dependencies.
  - is_likely_abbreviation: does a raw query look like an initialism
  - generate_query_patterns: spellings a query abbreviation may take in a name
  - generate_name_patterns: the initialisms a display name can legitimately produce
"""

import re

from src.orchestrators.resolver.normalizer import normalize_name, normalize_query

# Articles "A" and "AN" are deliberately absent: they can be real initials.
STOPWORDS: frozenset[str] = frozenset(
    {
        "OF", "THE", "AND", "&", "FOR", "IN", "AT", "TO", "BY", "WITH", "FROM",
        "ON", "AS", "IS", "ARE", "WAS", "WERE", "BE", "BEEN", "BEING", "HAVE",
        "HAS", "HAD", "DO", "DOES", "DID", "WILL", "WOULD", "COULD", "SHOULD",
        "OR", "BUT", "SO", "YET", "NOR",
    }
)

_LETTERS = re.compile(r"^[A-Z]+$")
_NON_WORD = re.compile(r"[^\w]")


def is_likely_abbreviation(raw: str | None) -> bool:
    """Judge the original query: one 2-8 letter token, or 2-3 tokens of 1-2 letters.

    A single token is rejected when the raw text carried a literal dot; dotted
    input such as "A.B." is recognised through the multi-token path instead.
    """
    normalized = normalize_query(raw)
    if not normalized:
        return False
    tokens = normalized.split(" ")
    if len(tokens) == 1:
        token = tokens[0]
        return (
            2 <= len(token) <= 8
            and bool(_LETTERS.match(token))
            and "." not in (raw or "")
        )
    if len(tokens) in (2, 3):
        return all(1 <= len(t) <= 2 and _LETTERS.match(t) for t in tokens)
    return False


def generate_query_patterns(normalized: str) -> list[str]:
    """Candidate spellings of a query abbreviation, ordered and de-duplicated.

    "A B"  -> A B, AB, A.B., A. B., A.B
    "A B C" -> A B C, ABC, A.B.C., A. B. C.
    "KVG"  -> K V G, KVG, K.V.G., K. V. G.
    "AJIMS" additionally yields A J, AJ, A J I, AJI.
    """
    tokens = normalize_query(normalized).split()
    patterns: list[str] = []

    if len(tokens) == 2:
        first, second = tokens
        patterns += [
            f"{first} {second}",
            f"{first}{second}",
            f"{first}.{second}.",
            f"{first}. {second}.",
            f"{first}.{second}",
        ]
    elif len(tokens) == 3:
        first, second, third = tokens
        patterns += [
            f"{first} {second} {third}",
            f"{first}{second}{third}",
            f"{first}.{second}.{third}.",
            f"{first}. {second}. {third}.",
        ]
    elif len(tokens) == 1 and 2 <= len(tokens[0]) <= 5:
        single = tokens[0]
        letters = list(single)
        patterns += [
            " ".join(letters),
            single,
            ".".join(letters) + ".",
            ". ".join(letters) + ".",
        ]
        if len(single) >= 4:
            patterns += [
                " ".join(single[:2]),
                single[:2],
                " ".join(single[:3]),
                single[:3],
            ]

    return list(dict.fromkeys(patterns))


def name_tokens(name: str) -> list[str]:
    """Meaningful tokens of a display name: punctuation stripped, stopwords dropped."""
    tokens = []
    for word in normalize_name(name).split(" "):
        if word in STOPWORDS:
            continue
        cleaned = _NON_WORD.sub("", word)
        if cleaned and cleaned not in STOPWORDS:
            tokens.append(cleaned)
    return tokens


def generate_name_patterns(name: str) -> list[str]:
    """Initialisms of the leading 2..n meaningful tokens of a name.

    "M S RAMAIAH MEDICAL COLLEGE" -> MS, MSR, MSRM, MSRMC
    """
    tokens = name_tokens(name)
    return ["".join(t[0] for t in tokens[:size]) for size in range(2, len(tokens) + 1)]
