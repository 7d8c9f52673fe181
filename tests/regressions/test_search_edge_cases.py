import datetime

import pytest

from mac_backend import QueryDescriptor, SearchSession, load_corpus, search
from tests.factories import NOW, make_asset


def test_future_dated_asset_is_searchable_but_outside_buckets():
    corpus = load_corpus(
        [
            make_asset("future", createdAt=NOW + datetime.timedelta(days=3)),
            make_asset("past", createdAt=NOW - datetime.timedelta(days=3)),
        ]
    )
    outcome = search(corpus, QueryDescriptor(), now=NOW)
    assert outcome.ids() == ["future", "past"]
    assert outcome.facet_counts.count("dateBucket", "week") == 1
    assert outcome.facet_counts.count("dateBucket", "year") == 1


def test_timezone_aware_and_naive_dates_mix():
    corpus = load_corpus(
        [
            make_asset("aware", createdAt="2024-06-10T12:00:00+00:00"),
            make_asset("naive", createdAt=datetime.datetime(2024, 6, 1, 12, 0)),
        ]
    )
    outcome = search(corpus, QueryDescriptor(sort="oldest"), now=NOW)
    assert outcome.ids() == ["naive", "aware"]


def test_overlong_query_is_truncated_not_rejected(sample_corpus):
    outcome = search(sample_corpus, QueryDescriptor(free_text="banner " + "x" * 5000), now=NOW)
    assert outcome.no_matches is True


def test_duplicate_facet_selection_is_harmless(sample_corpus):
    q = QueryDescriptor(selected_facets=[("tag", "brand"), ("tag", "BRAND")])
    assert search(sample_corpus, q, now=NOW).ids() == ["a2", "a5", "a3"]


@pytest.mark.parametrize("payload", [["not", "a", "dict"], "lebron", 42, ("freeText", "banner")])
def test_non_mapping_payload_matches_nothing(sample_corpus, payload):
    outcome = search(sample_corpus, payload, now=NOW)
    assert outcome.no_matches is True
    assert outcome.query.structured_filters.invalid == ("payload",)


def test_missing_payload_matches_everything(sample_corpus):
    assert search(sample_corpus, None, now=NOW).total == 5


def test_malformed_facet_items_are_dropped(sample_corpus):
    q = QueryDescriptor(selected_facets=[("tag", "brand"), 42, "abc", None])
    assert [(f.field, f.value) for f in q.selected_facets] == [("tag", "brand")]
    assert search(sample_corpus, q, now=NOW).ids() == ["a2", "a5", "a3"]


@pytest.mark.asyncio
async def test_session_resolves_non_mapping_payload(sample_corpus):
    session = SearchSession(sample_corpus, latency=(0.0, 0.0), now=NOW)
    result = await session.submit(["not", "a", "dict"])
    assert result.ok is True
    assert result.data.no_matches is True
