"""
Facet counter - how many assets each facet value would keep.
"""
from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping, Optional, Sequence

from ...shared import local_now
from .combinator import FilterGroup, Scored, apply_groups
from .taxonomy import FacetKey, FacetTaxonomy, build_predicate

if TYPE_CHECKING:
    from ..corpus.models import AssetRecord


class FacetCounts(Mapping[FacetKey, int]):
    """Read-only mapping of ``(field, value)`` to a count, in taxonomy order."""

    def __init__(self, counts: Iterable[tuple[FacetKey, int]] = ()):
        self._counts: dict[FacetKey, int] = dict(counts)

    def __getitem__(self, key: FacetKey) -> int:
        return self._counts[key]

    def __iter__(self) -> Iterator[FacetKey]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"FacetCounts({self._counts!r})"

    def count(self, field: str, value: str) -> int:
        return self._counts.get((getattr(field, "value", field), value), 0)

    def by_field(self) -> dict[str, dict[str, int]]:
        """Nested ``{field: {value: count}}`` view for presentation code."""
        nested: dict[str, dict[str, int]] = {}
        for (field, value), count in self._counts.items():
            nested.setdefault(field, {})[value] = count
        return nested


def count_facets(
    subset: Sequence["AssetRecord"],
    taxonomy: FacetTaxonomy,
    *,
    now: Optional[datetime.datetime] = None,
) -> FacetCounts:
    """
    Count, for every taxonomy value, the records of `subset` it matches.

    The subset is taken as given (normally an already-filtered result).
    Values with a count of zero are kept.
    """
    ref = now or local_now()
    records = list(subset)
    counts: list[tuple[FacetKey, int]] = []
    for definition in taxonomy:
        for key in definition.keys():
            predicate = build_predicate(definition.field, key[1], now=ref)
            counts.append((key, sum(1 for record in records if predicate(record))))
    return FacetCounts(counts)


def drill_down_counts(
    scored: Sequence[Scored],
    groups: Sequence[FilterGroup],
    taxonomy: FacetTaxonomy,
    *,
    now: Optional[datetime.datetime] = None,
) -> FacetCounts:
    """
    Facet counts for a live query.

    `scored` is the free-text-filtered corpus. Each field is counted over the
    records passing every filter group except that field's own facet-picker
    selection, so a user picking "Video" still sees how many images adding
    "Image" would bring in. AND groups and structured filters always apply.
    """
    ref = now or local_now()
    narrowed = [s.record for s in apply_groups(scored, groups)]
    picked = {g.facet_field for g in groups if g.facet_field is not None}
    counts: list[tuple[FacetKey, int]] = []
    for definition in taxonomy:
        if definition.field in picked:
            base = [s.record for s in apply_groups(scored, groups, exclude_field=definition.field)]
        else:
            base = narrowed
        for key in definition.keys():
            predicate = build_predicate(definition.field, key[1], now=ref)
            counts.append((key, sum(1 for record in base if predicate(record))))
    return FacetCounts(counts)
