"""Unit tests for the theme frequency reducer."""
from src.analysis import themes as th


def test_top_themes_count_then_first_seen():
    themes = th.top_themes([["a", "b"], ["a"], ["c"]])
    assert themes == [("a", 2), ("b", 1), ("c", 1)]


def test_ties_are_not_alphabetical():
    themes = th.top_themes([["zeta"], ["alpha"], ["zeta", "mid"], ["alpha"]])
    assert themes == [("zeta", 2), ("alpha", 2), ("mid", 1)]


def test_literal_keys_are_distinct():
    counts = th.tally_themes([["Docs", "docs", "docs "]])
    assert counts == {"Docs": 1, "docs": 1, "docs ": 1}


def test_limit():
    many = [[f"t{i}"] for i in range(15)]
    top = th.top_themes(many, limit=10)
    assert [name for name, _ in top] == [f"t{i}" for i in range(10)]


def test_empty():
    assert th.top_themes([]) == []
    assert th.top_themes([[], []]) == []
