"""
Filter combinator - applies free text, facets and structured filters to a corpus.

Evaluation runs in three steps:

1. Free text: an empty query passes every record with a neutral score;
   otherwise only records the fuzzy matcher scores are kept.
2. Filter groups, combined with AND. Facet-picker selections on one field
   form an OR group, as do the structured ``creator_ids``, ``media_kinds``,
   ``aspect_ratios`` and ``container_ids`` lists. When a container parent
   map is given, ``container_ids`` also admit every descendant container.
   ``tags_all`` (typeahead tag pills) is an AND group. ``date_range`` is a single inclusive test.
3. Ordering by the query's sort key, newest first by default. Ties always
   fall back to corpus insertion order.

Odd input never raises: a facet value outside a closed enumeration matches
nothing, an unknown facet field or a malformed structured filter makes its
group match nothing, and an inverted date range matches nothing.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, NamedTuple, Optional

from ...shared import FacetField, TaxonomyError, as_local, coerce_facet_field, get_logger, local_now
from ...utils import fold
from .matcher import NEUTRAL_SCORE, MatcherOptions, best_match, normalize_query
from .query import QueryDescriptor, SortKey
from .taxonomy import Predicate, build_predicate

if TYPE_CHECKING:
    from ..corpus.models import AssetRecord, Corpus

logger = get_logger(__name__)

MODE_ANY = "any"
MODE_ALL = "all"


def _never(record: "AssetRecord") -> bool:
    return False


class Scored(NamedTuple):
    record: "AssetRecord"
    score: float
    position: int
    weight: float = 1.0

    def relevance_key(self) -> tuple[float, float]:
        return (self.score, -self.weight)


@dataclass(frozen=True)
class FilterGroup:
    """
    One conjunct of the combined filter.

    ``facet_field`` is set only for facet-picker groups; the facet counter
    uses it to leave a field's own selection out when counting that field.
    """

    name: str
    mode: str
    predicates: tuple[Predicate, ...]
    facet_field: Optional[FacetField] = None
    matches_nothing: bool = False

    def test(self, record: "AssetRecord") -> bool:
        if self.matches_nothing:
            return False
        if self.mode == MODE_ALL:
            return all(p(record) for p in self.predicates)
        return any(p(record) for p in self.predicates)


def _safe_predicate(field: FacetField, value: str, now: datetime.datetime) -> Predicate:
    try:
        return build_predicate(field, value, now=now)
    except TaxonomyError as exc:
        logger.debug("Ignoring facet value that cannot match: %s", exc)
        return _never


def expand_containers(container_ids: Iterable[str], parents: Optional[Iterable[tuple[str, str]]]) -> set[str]:
    """Folded ids of the given containers plus, when `parents` is set, all their descendants."""
    wanted = {fold(c) for c in container_ids if fold(c)}
    if not parents:
        return wanted
    children: dict[str, list[str]] = {}
    for child, parent in parents:
        children.setdefault(fold(parent), []).append(fold(child))
    pending = list(wanted)
    while pending:
        for child in children.get(pending.pop(), ()):
            if child not in wanted:
                wanted.add(child)
                pending.append(child)
    return wanted


def _container_predicate(wanted: set[str]) -> Predicate:
    return lambda record: record.container_id is not None and fold(record.container_id) in wanted


def _nothing_group(name: str, facet_field: Optional[FacetField] = None) -> FilterGroup:
    return FilterGroup(name=name, mode=MODE_ANY, predicates=(), facet_field=facet_field, matches_nothing=True)


def build_filter_groups(query: QueryDescriptor, *, now: Optional[datetime.datetime] = None) -> list[FilterGroup]:
    """Translate a query's facet picks and structured filters into filter groups."""
    ref = now or local_now()
    groups: list[FilterGroup] = []

    for field_name, values in query.facet_groups().items():
        field = coerce_facet_field(field_name)
        if field is None:
            logger.debug("Unknown facet field in query: %r", field_name)
            groups.append(_nothing_group(f"facet:{field_name}"))
            continue
        predicates = tuple(_safe_predicate(field, v, ref) for v in values)
        groups.append(FilterGroup(name=f"facet:{field.value}", mode=MODE_ANY, predicates=predicates, facet_field=field))

    sf = query.structured_filters
    if sf.invalid:
        groups.append(_nothing_group("invalid:" + ",".join(sf.invalid)))

    for name, field, values in (
        ("creatorIds", FacetField.CREATOR, sf.creator_ids),
        ("mediaKinds", FacetField.MEDIA_KIND, sf.media_kinds),
        ("aspectRatios", FacetField.ASPECT_RATIO, sf.aspect_ratios),
    ):
        if values:
            groups.append(FilterGroup(name=name, mode=MODE_ANY, predicates=tuple(_safe_predicate(field, v, ref) for v in values)))

    if sf.container_ids:
        wanted = expand_containers(sf.container_ids, sf.container_parents)
        groups.append(FilterGroup(name="containerIds", mode=MODE_ANY, predicates=(_container_predicate(wanted),)))

    if sf.tags_all:
        groups.append(FilterGroup(name="tagsAll", mode=MODE_ALL, predicates=tuple(_safe_predicate(FacetField.TAG, t, ref) for t in sf.tags_all)))

    if sf.date_range is not None:
        if sf.date_range.inverted:
            logger.debug("Inverted date range %s..%s matches nothing", sf.date_range.start, sf.date_range.end)
            groups.append(_nothing_group("dateRange"))
        else:
            groups.append(FilterGroup(name="dateRange", mode=MODE_ALL, predicates=(lambda r, dr=sf.date_range: dr.contains(r.created_at),)))

    return groups


def rank_by_text(corpus: Iterable["AssetRecord"], free_text: str, options: Optional[MatcherOptions] = None) -> list[Scored]:
    """
    Step 1: keep records matching the free text, best score first.

    An empty query keeps everything in corpus order with a neutral score.
    """
    records = list(corpus)
    if not normalize_query(free_text):
        return [Scored(record, NEUTRAL_SCORE, i) for i, record in enumerate(records)]
    scored: list[Scored] = []
    for i, record in enumerate(records):
        detail = best_match(record, free_text, options)
        if detail is not None:
            scored.append(Scored(record, detail.score, i, detail.weight))
    scored.sort(key=lambda s: (s.relevance_key(), s.position))
    return scored


def apply_groups(
    scored: Iterable[Scored],
    groups: Iterable[FilterGroup],
    *,
    exclude_field: Optional[FacetField] = None,
) -> list[Scored]:
    """Step 2: keep records passing every group (optionally ignoring one facet field's group)."""
    active = [g for g in groups if exclude_field is None or g.facet_field is not exclude_field]
    return [s for s in scored if all(g.test(s.record) for g in active)]


def _timestamp(record: "AssetRecord") -> float:
    return as_local(record.created_at).timestamp()


def _newest_key(s: Scored) -> float:
    return -_timestamp(s.record)


def order_results(scored: Iterable[Scored], sort: SortKey, *, has_text: bool) -> list["AssetRecord"]:
    """Step 3: final presentation order; ties keep corpus insertion order."""
    items = sorted(scored, key=lambda s: s.position)
    key = sort
    if key is SortKey.RELEVANCE and not has_text:
        key = SortKey.NEWEST

    if key is SortKey.RELEVANCE:
        items.sort(key=Scored.relevance_key)
    elif key is SortKey.OLDEST:
        items.sort(key=lambda s: _timestamp(s.record))
    elif key is SortKey.NAME_ASC:
        items.sort(key=lambda s: fold(s.record.display_name))
    elif key is SortKey.NAME_DESC:
        items.sort(key=lambda s: fold(s.record.display_name), reverse=True)
    elif key is SortKey.CREATOR_ASC:
        items.sort(key=lambda s: fold(s.record.creator_name))
    elif key is SortKey.CREATOR_DESC:
        items.sort(key=lambda s: fold(s.record.creator_name), reverse=True)
    else:
        items.sort(key=_newest_key)
    return [s.record for s in items]


def filter_corpus(
    corpus: "Corpus",
    query: QueryDescriptor,
    *,
    now: Optional[datetime.datetime] = None,
    options: Optional[MatcherOptions] = None,
) -> list["AssetRecord"]:
    """
    Apply a query to the corpus and return the ordered matches.

    Args:
        corpus: Records to scan (read only)
        query: Free text, facet picks, structured filters and sort
        now: Reference time for date buckets (default: local now, read once)
        options: Fuzzy matcher tuning

    Returns:
        Matching records in presentation order; empty when nothing matches
    """
    ref = now or local_now()
    scored = rank_by_text(corpus, query.free_text, options)
    passing = apply_groups(scored, build_filter_groups(query, now=ref))
    results = order_results(passing, query.sort, has_text=bool(normalize_query(query.free_text)))
    logger.debug("Filter matched %d of %d assets", len(results), len(corpus))
    return results
