import datetime

from mac_backend.features.search.query import (
    DateRange,
    QueryDescriptor,
    SelectedFacet,
    SortKey,
    StructuredFilters,
    normalize_sort_key,
    parse_inline_filters,
)


def test_sort_key_aliases():
    assert normalize_sort_key("date_asc") is SortKey.OLDEST
    assert normalize_sort_key("MTIME_DESC") is SortKey.NEWEST
    assert normalize_sort_key("score") is SortKey.RELEVANCE
    assert normalize_sort_key("name_desc") is SortKey.NAME_DESC
    assert normalize_sort_key("sideways") is SortKey.NEWEST
    assert normalize_sort_key(None) is SortKey.NEWEST


def test_selected_facet_canonicalizes_field():
    assert SelectedFacet("type", "video").field == "mediaKind"
    assert SelectedFacet("tags", "nike") == SelectedFacet("tag", "nike")
    assert SelectedFacet("color", "red").known_field is None


def test_descriptor_defaults_and_copies():
    q = QueryDescriptor(free_text="  lebron  ")
    assert q.free_text == "lebron"
    assert q.sort is SortKey.NEWEST
    assert q.structured_filters.is_empty()

    narrowed = q.with_facet("mediaKind", "image").with_filters(tags_all=["Nike"])
    assert narrowed.selected_facets == (SelectedFacet("mediaKind", "image"),)
    assert narrowed.structured_filters.tags_all == ("Nike",)
    assert q.selected_facets == ()


def test_facet_groups_keep_selection_order():
    q = QueryDescriptor(selected_facets=[("creator", "john"), ("type", "video"), ("creator", "alex")])
    assert q.facet_groups() == {"creator": ["john", "alex"], "mediaKind": ["video"]}


def test_from_payload_full_shape():
    q = QueryDescriptor.from_payload(
        {
            "freeText": "banner",
            "selectedFacets": [{"field": "mediaKind", "value": "image"}],
            "structuredFilters": {
                "creatorIds": ["john"],
                "tagsAll": ["social", "marketing"],
                "dateRange": {"from": "2024-06-01", "to": "2024-06-12T10:00:00"},
            },
            "sort": "oldest",
        }
    )
    assert q.free_text == "banner"
    assert q.sort is SortKey.OLDEST
    sf = q.structured_filters
    assert sf.creator_ids == ("john",)
    assert sf.tags_all == ("social", "marketing")
    assert sf.date_range == DateRange(datetime.date(2024, 6, 1), datetime.date(2024, 6, 12))
    assert sf.invalid == ()
    assert q.to_dict()["structuredFilters"]["dateRange"] == {"from": "2024-06-01", "to": "2024-06-12"}


def test_from_payload_records_malformed_filters():
    q = QueryDescriptor.from_payload(
        {
            "selectedFacets": [{"field": "creator"}, "garbage"],
            "structuredFilters": {"creatorIds": "john", "dateRange": {"from": "yesterday-ish"}},
        }
    )
    assert set(q.structured_filters.invalid) == {"selectedFacets", "creatorIds", "dateRange"}
    assert not q.structured_filters.is_empty()


def test_from_payload_tolerates_none():
    q = QueryDescriptor.from_payload(None)
    assert q == QueryDescriptor()


def test_date_range_inclusive_and_inverted():
    dr = DateRange("2024-06-01", "2024-06-03")
    assert dr.contains(datetime.datetime(2024, 6, 1, 0, 0))
    assert dr.contains(datetime.datetime(2024, 6, 3, 23, 59))
    assert not dr.contains(datetime.datetime(2024, 6, 4, 0, 0))
    inverted = DateRange("2024-06-03", "2024-06-01")
    assert inverted.inverted
    assert not inverted.contains(datetime.datetime(2024, 6, 2))
    assert DateRange(end="2024-06-01").contains(datetime.datetime(2020, 1, 1))


def test_structured_filters_accept_single_string():
    assert StructuredFilters(creator_ids="john").creator_ids == ("john",)


def test_parse_inline_filters_extracts_field_tokens():
    text, facets = parse_inline_filters("tag:marketing type:video spring")
    assert text == "spring"
    assert facets == [SelectedFacet("tag", "marketing"), SelectedFacet("mediaKind", "video")]


def test_parse_inline_filters_key_with_separate_value():
    text, facets = parse_inline_filters("tags: marketing banner")
    assert text == "banner"
    assert facets == [SelectedFacet("tag", "marketing")]


def test_parse_inline_filters_leaves_unknown_tokens():
    assert parse_inline_filters("foo:bar hello") == ("foo:bar hello", [])
    assert parse_inline_filters("type:hologram") == ("type:hologram", [])
    assert parse_inline_filters("") == ("", [])
    assert parse_inline_filters("status:Approved")[1] == [SelectedFacet("reviewStatus", "Approved")]
