"""
Query descriptors: free text, selected facets, structured filters and sort.

Descriptors are immutable and built per search call. `from_payload` accepts
the camelCase shape sent by the console's search bars and never raises on
malformed filters: offending entries are recorded in
``StructuredFilters.invalid`` and the combinator treats them as matching
nothing.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Union

from ...shared import FacetField, TaxonomyError, coerce_facet_field, get_logger, local_date
from ...utils import fold
from .taxonomy import build_predicate

logger = get_logger(__name__)


class SortKey(str, Enum):
    """Result orderings. NEWEST is the default presentation order."""

    NEWEST = "newest"
    OLDEST = "oldest"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    CREATOR_ASC = "creator_asc"
    CREATOR_DESC = "creator_desc"
    RELEVANCE = "relevance"


_SORT_ALIASES = {
    "date_desc": SortKey.NEWEST,
    "mtime_desc": SortKey.NEWEST,
    "date_asc": SortKey.OLDEST,
    "mtime_asc": SortKey.OLDEST,
    "score": SortKey.RELEVANCE,
}


def normalize_sort_key(value: Union[SortKey, str, None]) -> SortKey:
    if isinstance(value, SortKey):
        return value
    s = fold(value)
    if s in _SORT_ALIASES:
        return _SORT_ALIASES[s]
    try:
        return SortKey(s)
    except ValueError:
        return SortKey.NEWEST


@dataclass(frozen=True)
class SelectedFacet:
    """A facet value picked in a dropdown, pill or typeahead."""

    field: str
    value: str

    def __post_init__(self) -> None:
        resolved = coerce_facet_field(self.field)
        if resolved is not None:
            object.__setattr__(self, "field", resolved.value)

    @property
    def known_field(self) -> Optional[FacetField]:
        return coerce_facet_field(self.field)


def _coerce_date(value: Any) -> Optional[datetime.date]:
    if value is None or value == "":
        return None
    if isinstance(value, (datetime.date, datetime.datetime)):
        return local_date(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return local_date(datetime.datetime.fromisoformat(text))
        except ValueError:
            pass
    raise ValueError(f"Not a date: {value!r}")


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range over ``created_at``; either end may be open."""

    start: Optional[datetime.date] = None
    end: Optional[datetime.date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _coerce_date(self.start))
        object.__setattr__(self, "end", _coerce_date(self.end))

    @property
    def inverted(self) -> bool:
        return self.start is not None and self.end is not None and self.end < self.start

    def contains(self, created_at: datetime.datetime) -> bool:
        if self.inverted:
            return False
        day = local_date(created_at)
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


def _as_tuple(values: Optional[Iterable[str]]) -> Optional[tuple[str, ...]]:
    if values is None:
        return None
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def _as_pairs(pairs: Any) -> Optional[tuple[tuple[str, str], ...]]:
    if pairs is None:
        return None
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return tuple((str(child), str(parent)) for child, parent in items)


@dataclass(frozen=True)
class StructuredFilters:
    """
    Constraints coming from dedicated controls rather than the facet picker.

    ``creator_ids``, ``media_kinds``, ``aspect_ratios`` and ``container_ids``
    are OR groups (any listed value passes). ``tags_all`` is an AND group:
    every tag must be present. Empty or missing groups do not constrain.
    ``container_parents`` holds ``(child, parent)`` container pairs; when set,
    ``container_ids`` also admit every descendant of a listed container.
    ``invalid`` names filters that could not be parsed; any entry there makes
    the whole query match nothing.
    """

    creator_ids: Optional[tuple[str, ...]] = None
    media_kinds: Optional[tuple[str, ...]] = None
    aspect_ratios: Optional[tuple[str, ...]] = None
    tags_all: Optional[tuple[str, ...]] = None
    date_range: Optional[DateRange] = None
    container_ids: Optional[tuple[str, ...]] = None
    container_parents: Optional[tuple[tuple[str, str], ...]] = None
    invalid: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("creator_ids", "media_kinds", "aspect_ratios", "tags_all", "container_ids"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))
        object.__setattr__(self, "container_parents", _as_pairs(self.container_parents))
        object.__setattr__(self, "invalid", tuple(self.invalid or ()))

    def is_empty(self) -> bool:
        groups = (self.creator_ids, self.media_kinds, self.aspect_ratios, self.tags_all, self.container_ids)
        return not any(groups) and self.date_range is None and not self.invalid


def _coerce_facets(raw: Iterable[Any]) -> tuple[SelectedFacet, ...]:
    facets: list[SelectedFacet] = []
    for item in raw or ():
        if isinstance(item, SelectedFacet):
            facets.append(item)
        elif isinstance(item, Mapping):
            facets.append(SelectedFacet(field=str(item.get("field") or ""), value=str(item.get("value") or "")))
        else:
            try:
                field_name, value = item
            except (TypeError, ValueError):
                logger.debug("Dropping malformed facet selection: %r", item)
                continue
            facets.append(SelectedFacet(field=str(field_name), value=str(value)))
    return tuple(facets)


@dataclass(frozen=True)
class QueryDescriptor:
    """One search invocation: free text, facet picks, structured filters, sort."""

    free_text: str = ""
    selected_facets: tuple[SelectedFacet, ...] = ()
    structured_filters: StructuredFilters = field(default_factory=StructuredFilters)
    sort: SortKey = SortKey.NEWEST

    def __post_init__(self) -> None:
        object.__setattr__(self, "free_text", str(self.free_text or "").strip())
        object.__setattr__(self, "selected_facets", _coerce_facets(self.selected_facets))
        object.__setattr__(self, "sort", normalize_sort_key(self.sort))
        if self.structured_filters is None:
            object.__setattr__(self, "structured_filters", StructuredFilters())

    def with_facet(self, field_name: Union[FacetField, str], value: str) -> "QueryDescriptor":
        """Copy of this query with one more facet selected."""
        extra = SelectedFacet(field=getattr(field_name, "value", field_name), value=value)
        return replace(self, selected_facets=self.selected_facets + (extra,))

    def with_filters(self, **changes: Any) -> "QueryDescriptor":
        """Copy of this query with structured filter fields replaced."""
        return replace(self, structured_filters=replace(self.structured_filters, **changes))

    def facet_groups(self) -> dict[str, list[str]]:
        """Selected facet values grouped by field, preserving selection order."""
        groups: dict[str, list[str]] = {}
        for facet in self.selected_facets:
            groups.setdefault(facet.field, []).append(facet.value)
        return groups

    @classmethod
    def from_payload(cls, payload: Any) -> "QueryDescriptor":
        """
        Build a descriptor from a presentation-layer dict.

        Recognized keys: ``freeText`` (or ``query``), ``selectedFacets``
        (list of ``{field, value}``), ``structuredFilters`` with
        ``creatorIds``, ``mediaKinds``, ``aspectRatios``, ``tagsAll``,
        ``containerIds``, ``containerParents`` (child id to parent id) and
        ``dateRange: {from, to}``, and ``sort``. A payload that is not a
        mapping yields a query that matches nothing.
        """
        if payload is not None and not isinstance(payload, Mapping):
            logger.debug("Query payload is not a mapping: %r", type(payload).__name__)
            return cls(structured_filters=StructuredFilters(invalid=("payload",)))
        data = payload or {}
        facets: list[SelectedFacet] = []
        invalid: list[str] = []
        raw_facets = data.get("selectedFacets", data.get("facets")) or []
        if not isinstance(raw_facets, (list, tuple)):
            invalid.append("selectedFacets")
            raw_facets = []
        for item in raw_facets:
            if isinstance(item, Mapping) and item.get("field") and isinstance(item.get("value"), str):
                facets.append(SelectedFacet(field=str(item["field"]), value=item["value"]))
            else:
                invalid.append("selectedFacets")

        raw_filters = data.get("structuredFilters", data.get("filters")) or {}
        if not isinstance(raw_filters, Mapping):
            invalid.append("structuredFilters")
            raw_filters = {}
        parsed: dict[str, Any] = {}
        for key, name in (
            ("creatorIds", "creator_ids"),
            ("mediaKinds", "media_kinds"),
            ("aspectRatios", "aspect_ratios"),
            ("tagsAll", "tags_all"),
            ("containerIds", "container_ids"),
        ):
            if key not in raw_filters or raw_filters[key] is None:
                continue
            values = raw_filters[key]
            if isinstance(values, (list, tuple)) and all(isinstance(v, str) for v in values):
                parsed[name] = tuple(values)
            else:
                invalid.append(key)
        raw_parents = raw_filters.get("containerParents")
        if raw_parents is not None:
            if isinstance(raw_parents, Mapping) and all(
                isinstance(k, str) and isinstance(v, str) for k, v in raw_parents.items()
            ):
                parsed["container_parents"] = tuple(raw_parents.items())
            else:
                invalid.append("containerParents")
        raw_range = raw_filters.get("dateRange")
        if raw_range is not None:
            if isinstance(raw_range, Mapping):
                try:
                    parsed["date_range"] = DateRange(
                        start=raw_range.get("from", raw_range.get("start")),
                        end=raw_range.get("to", raw_range.get("end")),
                    )
                except ValueError:
                    invalid.append("dateRange")
            else:
                invalid.append("dateRange")

        if invalid:
            logger.debug("Query payload has malformed filters: %s", ", ".join(invalid))

        free_text = data.get("freeText", data.get("query", ""))
        return cls(
            free_text=free_text if isinstance(free_text, str) else "",
            selected_facets=tuple(facets),
            structured_filters=StructuredFilters(invalid=tuple(dict.fromkeys(invalid)), **parsed),
            sort=normalize_sort_key(data.get("sort")),
        )

    def to_dict(self) -> dict[str, Any]:
        sf = self.structured_filters
        filters: dict[str, Any] = {}
        for key, values in (
            ("creatorIds", sf.creator_ids),
            ("mediaKinds", sf.media_kinds),
            ("aspectRatios", sf.aspect_ratios),
            ("tagsAll", sf.tags_all),
            ("containerIds", sf.container_ids),
        ):
            if values is not None:
                filters[key] = list(values)
        if sf.container_parents is not None:
            filters["containerParents"] = dict(sf.container_parents)
        if sf.date_range is not None:
            filters["dateRange"] = {
                "from": sf.date_range.start.isoformat() if sf.date_range.start else None,
                "to": sf.date_range.end.isoformat() if sf.date_range.end else None,
            }
        return {
            "freeText": self.free_text,
            "selectedFacets": [{"field": f.field, "value": f.value} for f in self.selected_facets],
            "structuredFilters": filters,
            "sort": self.sort.value,
        }


def _inline_facet(key: str, value: str) -> Optional[SelectedFacet]:
    field_name = coerce_facet_field(key)
    value = value.strip().strip(",;")
    if field_name is None or not value:
        return None
    try:
        build_predicate(field_name, value)
    except TaxonomyError:
        return None
    return SelectedFacet(field=field_name.value, value=value)


def parse_inline_filters(raw_query: Optional[str]) -> tuple[str, list[SelectedFacet]]:
    """
    Split field-scoped tokens out of a typed query.

    ``"tag:marketing type:video spring"`` becomes ``("spring", [tag=marketing,
    mediaKind=video])``. A key followed by a bare colon takes the next token as
    its value (``"tags: marketing"``). Tokens with an unknown key or an invalid
    value stay in the free text.
    """
    if not raw_query:
        return "", []
    tokens = str(raw_query).strip().split()
    cleaned: list[str] = []
    facets: list[SelectedFacet] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        key, sep, value = token.partition(":")
        if sep and key:
            if not value and i + 1 < len(tokens):
                facet = _inline_facet(key, tokens[i + 1])
                if facet is not None:
                    facets.append(facet)
                    i += 2
                    continue
            elif value:
                facet = _inline_facet(key, value)
                if facet is not None:
                    facets.append(facet)
                    i += 1
                    continue
        cleaned.append(token)
        i += 1
    return " ".join(cleaned).strip(), facets
