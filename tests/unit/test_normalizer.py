from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.orchestrators.resolver.normalizer import (
    looks_like_regex,
    normalize_name,
    normalize_query,
)


class TestNormalizeQuery:
    def test_uppercases_and_replaces_dots(self):
        assert normalize_query("a.b. shetty") == "A B SHETTY"

    def test_collapses_whitespace_and_trims(self):
        assert normalize_query("  m   s\tramaiah \n") == "M S RAMAIAH"

    def test_empty_and_none(self):
        assert normalize_query("") == ""
        assert normalize_query(None) == ""
        assert normalize_query(" . . ") == ""

    def test_name_uses_same_transform(self):
        assert normalize_name("Dr. D.Y. Patil") == normalize_query("Dr. D.Y. Patil") == "DR D Y PATIL"


@pytest.mark.property
@given(st.text())
def test_normalization_is_idempotent(text: str):
    once = normalize_query(text)
    assert normalize_query(once) == once


@pytest.mark.property
@given(st.text())
def test_normalized_form_has_no_dots_or_padding(text: str):
    out = normalize_query(text)
    assert "." not in out
    assert "  " not in out
    assert out == out.strip()


class TestLooksLikeRegex:
    @pytest.mark.parametrize(
        "query",
        ["A.B", "^AIIMS", "AII*", "(MEDICAL|DENTAL)", "/kvg/", "college$", r"\dth"],
    )
    def test_regex_like(self, query: str):
        assert looks_like_regex(query) is True

    @pytest.mark.parametrize("query", ["AIIMS", "M S RAMAIAH", "", "   ", "kasturba medical"])
    def test_plain_text(self, query: str):
        assert looks_like_regex(query) is False
