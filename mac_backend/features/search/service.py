"""
Search service - the synchronous entry points used by presentation code.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from ...config import SEARCH_SUGGESTION_LIMIT, SEARCH_SUGGESTION_MIN_LENGTH
from ...shared import FacetField, get_logger, local_now, timer
from ...utils import fold
from .combinator import apply_groups, build_filter_groups, order_results, rank_by_text
from .facets import FacetCounts, count_facets, drill_down_counts
from .matcher import MatcherOptions, normalize_query
from .query import QueryDescriptor
from .taxonomy import FacetTaxonomy, derive_taxonomy

if TYPE_CHECKING:
    from ..corpus.models import AssetRecord, Corpus

logger = get_logger(__name__)

QueryLike = Union[QueryDescriptor, Mapping[str, Any], None]

SUGGESTIONS_PER_CREATOR_GROUP = 3
SUGGESTIONS_PER_TAG_GROUP = 3
SUGGESTIONS_PER_FACET_GROUP = 2
SUGGESTIONS_PER_ASSET_GROUP = 3


def coerce_query(query: QueryLike) -> QueryDescriptor:
    if isinstance(query, QueryDescriptor):
        return query
    return QueryDescriptor.from_payload(query)


@dataclass(frozen=True)
class SearchOutcome:
    """Ordered results plus facet counts for one query."""

    query: QueryDescriptor
    results: tuple["AssetRecord", ...]
    facet_counts: FacetCounts = field(default_factory=FacetCounts)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def no_matches(self) -> bool:
        """Sentinel for the "no matches" empty state."""
        return not self.results

    def ids(self) -> list[str]:
        return [r.id for r in self.results]

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "noMatches": self.no_matches,
            "facetCounts": self.facet_counts.by_field(),
            "query": self.query.to_dict(),
        }


def search(
    corpus: "Corpus",
    query: QueryLike,
    *,
    taxonomy: Optional[FacetTaxonomy] = None,
    now: Optional[datetime.datetime] = None,
    options: Optional[MatcherOptions] = None,
) -> SearchOutcome:
    """
    Run a query against the corpus.

    Args:
        corpus: Records to search
        query: QueryDescriptor, or a payload dict for `QueryDescriptor.from_payload`
        taxonomy: Facets to count (default: derived from the corpus)
        now: Reference time for date buckets, read once per call when omitted
        options: Fuzzy matcher tuning

    Returns:
        SearchOutcome with ordered results and drill-down facet counts. Odd
        or malformed queries yield an empty outcome rather than an error.
    """
    descriptor = coerce_query(query)
    facets = taxonomy if taxonomy is not None else derive_taxonomy(corpus)
    ref = now or local_now()
    with timer("search", logger):
        scored = rank_by_text(corpus, descriptor.free_text, options)
        groups = build_filter_groups(descriptor, now=ref)
        passing = apply_groups(scored, groups)
        results = order_results(passing, descriptor.sort, has_text=bool(normalize_query(descriptor.free_text)))
        counts = drill_down_counts(scored, groups, facets, now=ref)
    logger.debug("Search %r matched %d of %d assets", descriptor.free_text, len(results), len(corpus))
    return SearchOutcome(query=descriptor, results=tuple(results), facet_counts=counts)


@dataclass(frozen=True)
class Suggestion:
    """One typeahead entry."""

    kind: str  # creator, tag, facet, asset
    value: str
    label: str
    count: int
    field: Optional[str] = None
    category: Optional[str] = None


def _creator_suggestions(subset: list["AssetRecord"], needle: str) -> list[Suggestion]:
    counts: dict[str, int] = {}
    first: dict[str, "AssetRecord"] = {}
    for record in subset:
        key = fold(record.creator_id)
        counts[key] = counts.get(key, 0) + 1
        first.setdefault(key, record)
    out: list[Suggestion] = []
    for key, record in first.items():
        if needle in fold(record.creator_name):
            out.append(
                Suggestion(
                    kind="creator",
                    value=record.creator_id,
                    label=record.creator_name,
                    count=counts[key],
                    field=FacetField.CREATOR.value,
                    category="Creator",
                )
            )
        if len(out) >= SUGGESTIONS_PER_CREATOR_GROUP:
            break
    return out


def _tag_suggestions(subset: list["AssetRecord"], needle: str) -> list[Suggestion]:
    counts: dict[str, int] = {}
    spelling: dict[str, str] = {}
    for record in subset:
        for tag in {fold(t): t for t in record.tags}.values():
            key = fold(tag)
            counts[key] = counts.get(key, 0) + 1
            spelling.setdefault(key, tag)
    out: list[Suggestion] = []
    for key, tag in spelling.items():
        if needle in key:
            out.append(
                Suggestion(kind="tag", value=tag, label=f"Tag: {tag}", count=counts[key], field=FacetField.TAG.value, category="Tag")
            )
        if len(out) >= SUGGESTIONS_PER_TAG_GROUP:
            break
    return out


def _facet_suggestions(
    subset: list["AssetRecord"],
    needle: str,
    taxonomy: FacetTaxonomy,
    query: QueryDescriptor,
    now: datetime.datetime,
) -> list[Suggestion]:
    selected = {(f.field, fold(f.value)) for f in query.selected_facets}
    counts = count_facets(subset, taxonomy, now=now)
    out: list[Suggestion] = []
    for definition in taxonomy:
        if definition.field in (FacetField.CREATOR, FacetField.TAG):
            continue
        picked = 0
        for facet_value in definition.values:
            if picked >= SUGGESTIONS_PER_FACET_GROUP:
                break
            if (definition.field.value, fold(facet_value.value)) in selected:
                continue
            if needle not in fold(facet_value.label) and needle not in fold(facet_value.value):
                continue
            count = counts.count(definition.field.value, facet_value.value)
            if count <= 0:
                continue
            out.append(
                Suggestion(
                    kind="facet",
                    value=facet_value.value,
                    label=f"{definition.label}: {facet_value.label}",
                    count=count,
                    field=definition.field.value,
                    category=definition.label,
                )
            )
            picked += 1
    return out


def _asset_suggestions(subset: list["AssetRecord"], needle: str) -> list[Suggestion]:
    out: list[Suggestion] = []
    seen: set[str] = set()
    for record in subset:
        name = record.display_name
        if needle in fold(name) and fold(name) not in seen:
            seen.add(fold(name))
            out.append(Suggestion(kind="asset", value=record.id, label=name, count=1, category="Asset"))
        if len(out) >= SUGGESTIONS_PER_ASSET_GROUP:
            break
    return out


def suggest(
    corpus: "Corpus",
    text: str,
    *,
    query: QueryLike = None,
    taxonomy: Optional[FacetTaxonomy] = None,
    limit: int = SEARCH_SUGGESTION_LIMIT,
    now: Optional[datetime.datetime] = None,
) -> list[Suggestion]:
    """
    Typeahead suggestions for partially typed text.

    Candidates come from the records the current query (without its free
    text) already keeps: up to three creators, three tags, two values per
    other facet group (skipping selected and zero-count values) and three
    asset names, cut to `limit` overall. Counts are over that same subset.
    """
    needle = normalize_query(text)
    if len(needle) < SEARCH_SUGGESTION_MIN_LENGTH:
        return []
    descriptor = coerce_query(query)
    facets = taxonomy if taxonomy is not None else derive_taxonomy(corpus)
    ref = now or local_now()
    scored = rank_by_text(corpus, "", None)
    subset = [s.record for s in apply_groups(scored, build_filter_groups(descriptor, now=ref))]

    suggestions = (
        _creator_suggestions(subset, needle)
        + _tag_suggestions(subset, needle)
        + _facet_suggestions(subset, needle, facets, descriptor, ref)
        + _asset_suggestions(subset, needle)
    )
    return suggestions[: max(0, int(limit))]
