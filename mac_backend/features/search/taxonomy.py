"""
Facet taxonomy and facet predicates.

A taxonomy is the static list of facet groups the console offers (creator,
media kind, aspect ratio, review status, tag, date bucket). Every
``(field, value)`` pair maps to a pure boolean test over an asset record.
Unknown pairs are rejected when the taxonomy is built, never at query time.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Mapping, Optional, Union

from ...shared import (
    AspectRatio,
    FacetField,
    ReviewStatus,
    TaxonomyError,
    calendar_days_between,
    coerce_facet_field,
    coerce_media_kind,
    get_logger,
    local_now,
)
from ...utils import fold

if TYPE_CHECKING:
    from ..corpus.models import AssetRecord, Corpus

logger = get_logger(__name__)

Predicate = Callable[["AssetRecord"], bool]
FacetKey = tuple[str, str]

# Calendar-day windows; "today" means zero days since local midnight.
DATE_BUCKET_DAYS: dict[str, int] = {
    "today": 0,
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}

FIELD_LABELS: dict[FacetField, str] = {
    FacetField.CREATOR: "Creator",
    FacetField.MEDIA_KIND: "Content Type",
    FacetField.DATE_BUCKET: "Date Range",
    FacetField.ASPECT_RATIO: "Aspect Ratio",
    FacetField.REVIEW_STATUS: "Status",
    FacetField.TAG: "Tag",
}

MEDIA_KIND_LABELS = (("image", "Image"), ("video", "Video"), ("document", "Document"), ("audio", "Audio"))
DATE_BUCKET_LABELS = (
    ("today", "Today"),
    ("week", "Last 7 Days"),
    ("month", "Last 30 Days"),
    ("quarter", "Last 90 Days"),
    ("year", "Last Year"),
)
ASPECT_RATIO_LABELS = (("1:1", "1:1 Square"), ("16:9", "16:9 Landscape"), ("9:16", "9:16 Portrait"), ("4:3", "4:3 Standard"))
REVIEW_STATUS_LABELS = (("approved", "Approved"), ("pending", "Pending Review"), ("draft", "Draft"))


def _require_field(field: Union[FacetField, str]) -> FacetField:
    resolved = coerce_facet_field(field)
    if resolved is None:
        raise TaxonomyError(f"Unknown facet field: {field!r}", identifiers=[str(field)])
    return resolved


def _creator_predicate(value: str) -> Predicate:
    wanted = fold(value)
    return lambda record: fold(record.creator_id) == wanted


def _tag_predicate(value: str) -> Predicate:
    wanted = fold(value)
    return lambda record: any(fold(tag) == wanted for tag in record.tags)


def _media_kind_predicate(value: str) -> Predicate:
    kind = coerce_media_kind(value)
    if kind is None:
        raise TaxonomyError(f"Unknown mediaKind value: {value!r}", identifiers=[f"mediaKind:{value}"])
    return lambda record: record.media_kind == kind


def _aspect_ratio_predicate(value: str) -> Predicate:
    try:
        ratio = AspectRatio(str(value).strip())
    except ValueError:
        raise TaxonomyError(f"Unknown aspectRatio value: {value!r}", identifiers=[f"aspectRatio:{value}"]) from None
    return lambda record: record.aspect_ratio == ratio


def _review_status_predicate(value: str) -> Predicate:
    try:
        status = ReviewStatus(fold(value))
    except ValueError:
        raise TaxonomyError(f"Unknown reviewStatus value: {value!r}", identifiers=[f"reviewStatus:{value}"]) from None
    return lambda record: record.review_status == status


def within_days(created_at: datetime.datetime, days: int, now: Optional[datetime.datetime] = None) -> bool:
    """True when `created_at` falls 0..`days` calendar days before `now` (future never matches)."""
    elapsed = calendar_days_between(created_at, now or local_now())
    return 0 <= elapsed <= days


def _date_bucket_predicate(value: str, now: Optional[datetime.datetime]) -> Predicate:
    bucket = fold(value)
    if bucket not in DATE_BUCKET_DAYS:
        raise TaxonomyError(f"Unknown dateBucket value: {value!r}", identifiers=[f"dateBucket:{value}"])
    days = DATE_BUCKET_DAYS[bucket]
    # Without a pinned "now", the clock is read on every evaluation.
    return lambda record: within_days(record.created_at, days, now)


def build_predicate(
    field: Union[FacetField, str],
    value: str,
    *,
    now: Optional[datetime.datetime] = None,
) -> Predicate:
    """
    Build the boolean test for one facet value.

    Args:
        field: Facet field (enum member, canonical name or legacy alias)
        value: Facet value; compared case-insensitively
        now: Reference time for date buckets (default: read at evaluation)

    Raises:
        TaxonomyError: unknown field, empty value, or a value outside a
            closed enumeration (media kind, aspect ratio, status, date bucket)
    """
    resolved = _require_field(field)
    if not isinstance(value, str) or not value.strip():
        raise TaxonomyError(f"Empty value for facet field {resolved.value!r}", identifiers=[resolved.value])
    if resolved is FacetField.CREATOR:
        return _creator_predicate(value)
    if resolved is FacetField.TAG:
        return _tag_predicate(value)
    if resolved is FacetField.MEDIA_KIND:
        return _media_kind_predicate(value)
    if resolved is FacetField.ASPECT_RATIO:
        return _aspect_ratio_predicate(value)
    if resolved is FacetField.REVIEW_STATUS:
        return _review_status_predicate(value)
    return _date_bucket_predicate(value, now)


@dataclass(frozen=True)
class FacetValue:
    value: str
    label: str


@dataclass(frozen=True)
class FacetDefinition:
    """One facet group: a field, its display label and the selectable values."""

    field: FacetField
    label: str
    values: tuple[FacetValue, ...]

    def keys(self) -> list[FacetKey]:
        return [(self.field.value, v.value) for v in self.values]


def _coerce_values(raw: Iterable[Any]) -> tuple[FacetValue, ...]:
    values: list[FacetValue] = []
    for item in raw or ():
        if isinstance(item, FacetValue):
            values.append(item)
        elif isinstance(item, Mapping):
            value = str(item.get("value") or "")
            values.append(FacetValue(value=value, label=str(item.get("label") or value)))
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            values.append(FacetValue(value=str(item[0]), label=str(item[1])))
        else:
            values.append(FacetValue(value=str(item), label=str(item)))
    return tuple(values)


class FacetTaxonomy:
    """
    Validated, immutable set of facet definitions.

    Construction checks every ``(field, value)`` pair against the predicate
    registry and fails fast with `TaxonomyError` on unknown fields, unknown
    closed-enumeration values, repeated fields or repeated values.
    """

    def __init__(self, definitions: Iterable[FacetDefinition]):
        defs: list[FacetDefinition] = []
        seen_fields: set[FacetField] = set()
        for definition in definitions:
            field = _require_field(definition.field)
            if field in seen_fields:
                raise TaxonomyError(f"Facet field registered twice: {field.value}", identifiers=[field.value])
            seen_fields.add(field)
            seen_values: set[str] = set()
            for facet_value in definition.values:
                build_predicate(field, facet_value.value)
                key = fold(facet_value.value)
                if key in seen_values:
                    raise TaxonomyError(
                        f"Facet value registered twice: {field.value}:{facet_value.value}",
                        identifiers=[f"{field.value}:{facet_value.value}"],
                    )
                seen_values.add(key)
            defs.append(FacetDefinition(field=field, label=definition.label, values=tuple(definition.values)))
        self._definitions: tuple[FacetDefinition, ...] = tuple(defs)
        self._registered: set[tuple[FacetField, str]] = {
            (d.field, fold(v.value)) for d in self._definitions for v in d.values
        }

    @classmethod
    def from_config(cls, config: Iterable[Mapping[str, Any]]) -> "FacetTaxonomy":
        """
        Build a taxonomy from plain data, e.g. a parsed JSON document::

            [{"field": "mediaKind", "label": "Content Type",
              "values": [{"value": "image", "label": "Image"}]}]
        """
        definitions = []
        for entry in config or ():
            field = _require_field(entry.get("field"))
            definitions.append(
                FacetDefinition(
                    field=field,
                    label=str(entry.get("label") or FIELD_LABELS.get(field, field.value)),
                    values=_coerce_values(entry.get("values") or ()),
                )
            )
        return cls(definitions)

    @property
    def definitions(self) -> tuple[FacetDefinition, ...]:
        return self._definitions

    def __iter__(self) -> Iterator[FacetDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def definition(self, field: Union[FacetField, str]) -> Optional[FacetDefinition]:
        resolved = coerce_facet_field(field)
        for definition in self._definitions:
            if definition.field is resolved:
                return definition
        return None

    def keys(self) -> list[FacetKey]:
        """Every registered ``(field, value)`` pair in definition order."""
        return [key for d in self._definitions for key in d.keys()]

    def is_registered(self, field: Union[FacetField, str], value: str) -> bool:
        resolved = coerce_facet_field(field)
        return resolved is not None and (resolved, fold(value)) in self._registered

    def predicate(self, field: Union[FacetField, str], value: str, *, now: Optional[datetime.datetime] = None) -> Predicate:
        """Predicate for a registered pair; unregistered pairs raise `TaxonomyError`."""
        if not self.is_registered(field, value):
            raise TaxonomyError(f"Facet value not in taxonomy: {field}:{value}", identifiers=[f"{field}:{value}"])
        return build_predicate(field, value, now=now)

    def label_for(self, field: Union[FacetField, str], value: str) -> str:
        definition = self.definition(field)
        if definition is not None:
            for facet_value in definition.values:
                if fold(facet_value.value) == fold(value):
                    return facet_value.label
        return value


def default_taxonomy(
    creators: Iterable[tuple[str, str]] = (),
    tags: Iterable[Union[str, tuple[str, str]]] = (),
) -> FacetTaxonomy:
    """
    The console's standard facet groups.

    Args:
        creators: ``(creator_id, label)`` pairs for the creator facet
        tags: Tag values, or ``(value, label)`` pairs, for the tag facet
    """
    definitions = []
    creator_values = _coerce_values(creators)
    if creator_values:
        definitions.append(FacetDefinition(FacetField.CREATOR, FIELD_LABELS[FacetField.CREATOR], creator_values))
    definitions.append(FacetDefinition(FacetField.MEDIA_KIND, FIELD_LABELS[FacetField.MEDIA_KIND], _coerce_values(MEDIA_KIND_LABELS)))
    definitions.append(FacetDefinition(FacetField.DATE_BUCKET, FIELD_LABELS[FacetField.DATE_BUCKET], _coerce_values(DATE_BUCKET_LABELS)))
    definitions.append(FacetDefinition(FacetField.ASPECT_RATIO, FIELD_LABELS[FacetField.ASPECT_RATIO], _coerce_values(ASPECT_RATIO_LABELS)))
    definitions.append(FacetDefinition(FacetField.REVIEW_STATUS, FIELD_LABELS[FacetField.REVIEW_STATUS], _coerce_values(REVIEW_STATUS_LABELS)))
    tag_values = _coerce_values(tags)
    if tag_values:
        definitions.append(FacetDefinition(FacetField.TAG, FIELD_LABELS[FacetField.TAG], tag_values))
    return FacetTaxonomy(definitions)


def derive_taxonomy(corpus: "Corpus") -> FacetTaxonomy:
    """Standard taxonomy whose creator and tag values are taken from the corpus."""
    creators: dict[str, tuple[str, str]] = {}
    tags: dict[str, str] = {}
    for record in corpus:
        key = fold(record.creator_id)
        if key and key not in creators:
            creators[key] = (record.creator_id, record.creator_name or record.creator_id)
        for tag in record.tags:
            tags.setdefault(fold(tag), tag)
    creator_pairs = sorted(creators.values(), key=lambda pair: fold(pair[1]))
    tag_values = [tags[key] for key in sorted(tags)]
    logger.debug("Derived taxonomy: %d creators, %d tags", len(creator_pairs), len(tag_values))
    return default_taxonomy(creators=creator_pairs, tags=tag_values)
