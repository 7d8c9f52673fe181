from mac_backend import QueryDescriptor, search, suggest
from mac_backend.features.search.service import SearchOutcome
from tests.factories import NOW


def test_search_returns_outcome(sample_corpus):
    outcome = search(sample_corpus, QueryDescriptor(free_text="banner"), now=NOW)
    assert isinstance(outcome, SearchOutcome)
    assert outcome.ids() == ["a1"]
    assert outcome.total == 1
    assert outcome.no_matches is False


def test_search_accepts_payload_dict(sample_corpus):
    outcome = search(
        sample_corpus,
        {"freeText": "", "selectedFacets": [{"field": "type", "value": "photo"}], "sort": "oldest"},
        now=NOW,
    )
    assert outcome.ids() == ["a5", "a1"]
    assert outcome.query.sort.value == "oldest"


def test_no_matches_sentinel(sample_corpus):
    outcome = search(sample_corpus, QueryDescriptor(free_text="qqqqqqqq"), now=NOW)
    assert outcome.results == ()
    assert outcome.no_matches is True
    assert outcome.facet_counts.count("mediaKind", "image") == 0


def test_malformed_payload_does_not_raise(sample_corpus):
    outcome = search(sample_corpus, {"structuredFilters": "everything please"}, now=NOW)
    assert outcome.no_matches is True


def test_search_is_idempotent(demo_corpus):
    q = QueryDescriptor(free_text="social", selected_facets=[("dateBucket", "year")])
    assert search(demo_corpus, q, now=NOW) == search(demo_corpus, q, now=NOW)


def test_to_dict_shape(sample_corpus):
    data = search(sample_corpus, QueryDescriptor(free_text="jane"), now=NOW).to_dict()
    assert set(data) == {"results", "total", "noMatches", "facetCounts", "query"}
    assert [r["id"] for r in data["results"]] == ["a2", "a4"]
    assert data["facetCounts"]["creator"] == {"alex": 0, "jane": 2, "john": 0}
    assert data["query"]["freeText"] == "jane"


def test_suggest_creators_with_counts(sample_corpus):
    suggestions = suggest(sample_corpus, "jan", now=NOW)
    assert [(s.kind, s.value, s.label, s.count) for s in suggestions] == [("creator", "jane", "Jane Doe", 2)]


def test_suggest_tags(sample_corpus):
    suggestions = suggest(sample_corpus, "mar", now=NOW)
    assert [(s.kind, s.value, s.count) for s in suggestions] == [("tag", "marketing", 2)]
    assert suggestions[0].field == "tag"


def test_suggest_uses_current_filters_and_skips_zero_counts(sample_corpus):
    q = QueryDescriptor(selected_facets=[("mediaKind", "video")])
    suggestions = suggest(sample_corpus, "pro", query=q, now=NOW)
    # "Approved" contains "pro" but no video is approved.
    assert [(s.kind, s.value) for s in suggestions] == [("tag", "product"), ("asset", "a2")]


def test_suggest_skips_selected_facets(sample_corpus):
    q = QueryDescriptor(selected_facets=[("reviewStatus", "approved")])
    assert suggest(sample_corpus, "appr", query=q, now=NOW) == []
    unselected = suggest(sample_corpus, "appr", now=NOW)
    assert [(s.kind, s.field, s.value, s.count) for s in unselected] == [("facet", "reviewStatus", "approved", 3)]


def test_suggest_limits(demo_corpus):
    assert suggest(demo_corpus, "", now=NOW) == []
    assert len(suggest(demo_corpus, "a", now=NOW)) <= 8
    assert len(suggest(demo_corpus, "a", limit=2, now=NOW)) <= 2
