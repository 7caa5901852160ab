"""Tests for name search and fuzzy suggestions."""
import pytest

from visitor_log.models import Visitor
from visitor_log.search import search_visitors, suggest_visitors

JANE = Visitor(id="1", firstName="Jane", lastName="Doe")
JANET = Visitor(id="2", firstName="Janet", lastName="Smith")
VISITORS = [JANE, JANET]


def test_full_name_is_an_exact_match():
    result = search_visitors(VISITORS, "jane doe")
    assert result.exact == JANE
    assert result.candidates == [JANE]


def test_prefix_returns_every_candidate():
    result = search_visitors(VISITORS, "ja")
    assert result.exact is None
    assert result.candidates == [JANE, JANET]


def test_search_is_case_insensitive():
    assert search_visitors(VISITORS, "  JANE Doe ").exact == JANE


def test_every_token_must_match_a_name():
    assert search_visitors(VISITORS, "smith ja").candidates == [JANET]
    assert search_visitors(VISITORS, "jane nobody").candidates == []


def test_reversed_full_name_is_not_exact():
    result = search_visitors(VISITORS, "doe jane")
    assert result.exact is None
    assert result.candidates == [JANE]


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_searches_nothing(query):
    result = search_visitors(VISITORS, query)
    assert result.empty
    assert result.exact is None


def test_two_visitors_with_the_same_name_are_not_exact():
    twin = Visitor(id="3", firstName="Jane", lastName="Doe", flatNumber="9")
    result = search_visitors([JANE, twin], "jane doe")
    assert result.exact is None
    assert result.candidates == [JANE, twin]


def test_suggestions_catch_typos():
    suggestions = suggest_visitors(VISITORS, "jnae doe")
    assert suggestions[0] == JANE


def test_suggestions_for_empty_query():
    assert suggest_visitors(VISITORS, "") == []
    assert suggest_visitors([], "jane") == []
