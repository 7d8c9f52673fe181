import datetime

import pytest

from mac_backend.features.search.taxonomy import (
    FacetDefinition,
    FacetTaxonomy,
    FacetValue,
    build_predicate,
    default_taxonomy,
    derive_taxonomy,
    within_days,
)
from mac_backend.shared import ErrorCode, FacetField, TaxonomyError
from tests.factories import NOW, make_asset


def _ids(corpus, predicate):
    return [r.id for r in corpus if predicate(r)]


def test_photo_alias_matches_image(sample_corpus):
    photo = build_predicate("mediaKind", "photo")
    image = build_predicate(FacetField.MEDIA_KIND, "image")
    assert _ids(sample_corpus, photo) == _ids(sample_corpus, image) == ["a1", "a5"]


def test_tag_and_creator_predicates_ignore_case(sample_corpus):
    assert _ids(sample_corpus, build_predicate("tag", "MARKETING")) == ["a1", "a4"]
    assert _ids(sample_corpus, build_predicate("creator", "Jane")) == ["a2", "a4"]


def test_legacy_field_names_resolve(sample_corpus):
    assert _ids(sample_corpus, build_predicate("type", "video")) == ["a2"]
    assert _ids(sample_corpus, build_predicate("status", "draft")) == ["a4"]
    assert _ids(sample_corpus, build_predicate("aspect", "4:3")) == ["a3"]


@pytest.mark.parametrize(
    "field,value",
    [
        ("mediaKind", "hologram"),
        ("aspectRatio", "21:9"),
        ("reviewStatus", "archived"),
        ("dateBucket", "decade"),
        ("color", "red"),
        ("tag", "   "),
    ],
)
def test_unknown_pairs_raise(field, value):
    with pytest.raises(TaxonomyError) as exc:
        build_predicate(field, value)
    assert exc.value.code == ErrorCode.UNKNOWN_FACET


def test_date_buckets_use_calendar_days():
    just_before_midnight = make_asset("late", createdAt=datetime.datetime(2024, 6, 11, 23, 59))
    early_now = datetime.datetime(2024, 6, 12, 0, 1)
    assert build_predicate("dateBucket", "today", now=early_now)(just_before_midnight) is False
    assert build_predicate("dateBucket", "week", now=early_now)(just_before_midnight) is True

    seven = make_asset("seven", createdAt=datetime.datetime(2024, 6, 5, 0, 0))
    eight = make_asset("eight", createdAt=datetime.datetime(2024, 6, 4, 23, 59))
    week = build_predicate("dateBucket", "week", now=NOW)
    assert week(seven) is True
    assert week(eight) is False


def test_quarter_bucket_spans_ninety_calendar_days():
    midnight = datetime.datetime(2024, 6, 12)
    ninety = make_asset("ninety", createdAt=midnight - datetime.timedelta(days=90))
    ninety_one = make_asset("ninety-one", createdAt=midnight - datetime.timedelta(days=90, minutes=1))
    quarter = build_predicate("dateBucket", "quarter", now=NOW)
    assert quarter(ninety) is True
    assert quarter(ninety_one) is False
    assert build_predicate("dateBucket", "month", now=NOW)(ninety) is False
    assert default_taxonomy().label_for("dateBucket", "quarter") == "Last 90 Days"


def test_future_dates_never_match_buckets():
    future = make_asset("future", createdAt=NOW + datetime.timedelta(days=2))
    for bucket in ("today", "week", "month", "quarter", "year"):
        assert build_predicate("dateBucket", bucket, now=NOW)(future) is False
    assert within_days(future.created_at, 365, NOW) is False


def test_taxonomy_rejects_duplicate_values():
    definition = FacetDefinition(
        FacetField.MEDIA_KIND,
        "Content Type",
        (FacetValue("image", "Image"), FacetValue("Image", "Image again")),
    )
    with pytest.raises(TaxonomyError) as exc:
        FacetTaxonomy([definition])
    assert exc.value.identifiers == ("mediaKind:Image",)


def test_taxonomy_rejects_duplicate_fields_and_bad_values():
    kinds = FacetDefinition(FacetField.MEDIA_KIND, "Kind", (FacetValue("image", "Image"),))
    with pytest.raises(TaxonomyError):
        FacetTaxonomy([kinds, kinds])
    with pytest.raises(TaxonomyError):
        FacetTaxonomy([FacetDefinition(FacetField.ASPECT_RATIO, "Aspect", (FacetValue("2:1", "Wide"),))])


def test_from_config_builds_and_validates():
    taxonomy = FacetTaxonomy.from_config(
        [
            {"field": "type", "values": [{"value": "image", "label": "Image"}, "video"]},
            {"field": "tag", "label": "Topic", "values": [("nike", "Nike")]},
        ]
    )
    assert taxonomy.keys() == [("mediaKind", "image"), ("mediaKind", "video"), ("tag", "nike")]
    assert taxonomy.definition("mediaKind").label == "Content Type"
    assert taxonomy.label_for("tag", "NIKE") == "Nike"
    assert taxonomy.is_registered("kind", "Video")
    with pytest.raises(TaxonomyError):
        FacetTaxonomy.from_config([{"field": "color", "values": ["red"]}])


def test_registered_predicate_only():
    taxonomy = default_taxonomy()
    assert taxonomy.predicate("mediaKind", "video")(make_asset("v", mediaKind="video"))
    with pytest.raises(TaxonomyError):
        taxonomy.predicate("tag", "nike")


def test_default_taxonomy_groups():
    fields = [d.field for d in default_taxonomy()]
    assert fields == [FacetField.MEDIA_KIND, FacetField.DATE_BUCKET, FacetField.ASPECT_RATIO, FacetField.REVIEW_STATUS]
    fields = [d.field for d in default_taxonomy(creators=[("john", "John Smith")], tags=["nike"])]
    assert fields[0] is FacetField.CREATOR
    assert fields[-1] is FacetField.TAG


def test_derive_taxonomy_from_corpus(sample_corpus):
    taxonomy = derive_taxonomy(sample_corpus)
    creators = taxonomy.definition("creator").values
    assert [(v.value, v.label) for v in creators] == [("alex", "Alex Johnson"), ("jane", "Jane Doe"), ("john", "John Smith")]
    assert [v.value for v in taxonomy.definition("tag").values] == ["brand", "marketing", "product", "social"]
