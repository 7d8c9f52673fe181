import pytest

from mac_backend.features.search.matcher import (
    NEUTRAL_SCORE,
    MatcherOptions,
    best_match,
    match,
    normalize_query,
    substring_distance,
)
from tests.factories import make_asset


def _hero():
    return make_asset(
        "a1",
        displayName="Hero Banner Spring Campaign.png",
        creatorName="John Smith",
        tags=["marketing", "social"],
    )


def test_empty_query_is_neutral():
    assert match(_hero(), "") == NEUTRAL_SCORE
    assert match(_hero(), "   ") == NEUTRAL_SCORE
    assert match(_hero(), None) == NEUTRAL_SCORE


def test_exact_substring_in_name_scores_zero():
    assert match(_hero(), "banner") == 0.0


def test_match_is_case_insensitive():
    assert match(_hero(), "HERO BANNER") == match(_hero(), "hero banner") == 0.0


def _reel():
    return make_asset("a2", displayName="Product Demo Reel.mp4", creatorName="Jane Doe", tags=["product"])


def test_exact_creator_match_scores_zero():
    assert match(_reel(), "jane") == 0.0
    assert match(_reel(), "Jane Doe") == 0.0
    detail = best_match(_reel(), "jane")
    assert detail.field == "creatorName"
    assert detail.weight == pytest.approx(0.2)


def test_inexact_creator_match_is_weighted_down():
    # One transposition over four characters, pushed halfway toward 1.
    assert match(_reel(), "jnae") == pytest.approx(0.625)


def test_exact_hits_prefer_the_heavier_field():
    record = make_asset("x", displayName="Beach.png", creatorName="Jane Doe", tags=["jane"])
    detail = best_match(record, "jane")
    assert detail.score == 0.0
    assert detail.field == "tags"


def test_adjacent_transposition_is_tolerated():
    score = match(_hero(), "bnaner")
    assert score is not None
    assert 0.0 < score <= 1.0


def test_unrelated_query_does_not_match():
    assert match(_hero(), "zzzzzz") is None


def test_short_query_requires_literal_containment():
    assert match(_hero(), "x") is None
    assert match(_hero(), "g") == 0.0


def test_fuzzy_can_be_disabled():
    opts = MatcherOptions(fuzzy=False)
    assert match(_hero(), "bnaner", opts) is None
    assert match(_hero(), "banner", opts) == 0.0


def test_multi_word_query_falls_back_to_every_word_matching():
    record = make_asset("a4", displayName="Podcast Episode 42.mp3", creatorName="Jane Doe", tags=["marketing", "product"])
    # "podcast" hits the name exactly, "jnae" hits the creator at 0.625.
    assert match(record, "jnae podcast") == pytest.approx(0.3125)
    assert match(record, "jane podcast") == 0.0
    assert match(record, "jane banner") is None


def test_best_match_reports_field():
    detail = best_match(_hero(), "social")
    assert detail is not None
    assert detail.field == "tags"
    assert detail.value == "social"
    assert detail.edits == 0


def test_substring_distance_basics():
    assert substring_distance("abc", "xxabcxx", 1) == 0
    assert substring_distance("acb", "xabcx", 1) == 1
    assert substring_distance("abcd", "xyz", 1) is None


def test_normalize_query_collapses_whitespace_and_folds_case():
    assert normalize_query("  Hero   BANNER ") == "hero banner"
    assert normalize_query(None) == ""


def test_scores_stay_in_unit_interval(demo_corpus):
    for query in ("brand", "prodct", "jane", "social teaser", "anthm"):
        for record in demo_corpus:
            score = match(record, query)
            assert score is None or 0.0 <= score <= 1.0


def test_match_is_deterministic(demo_corpus):
    first = [match(r, "campain") for r in demo_corpus]
    second = [match(r, "campain") for r in demo_corpus]
    assert first == second
