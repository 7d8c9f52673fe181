"""
Asset records and the in-memory corpus the search engine scans.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from ...shared import AspectRatio, CorpusValidationError, ErrorCode, MediaKind, ReviewStatus, coerce_media_kind, get_logger

logger = get_logger(__name__)


def _first(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _parse_datetime(value: Any, asset_id: str) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(float(value))
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.datetime.fromisoformat(text)
        except ValueError:
            pass
    raise CorpusValidationError(
        f"Asset {asset_id!r} has an invalid createdAt value: {value!r}",
        identifiers=[asset_id],
        code=ErrorCode.INVALID_INPUT,
    )


def _parse_enum(enum_cls, value: Any, field_name: str, asset_id: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise CorpusValidationError(
            f"Asset {asset_id!r} has an invalid {field_name}: {value!r}",
            identifiers=[asset_id],
            code=ErrorCode.INVALID_INPUT,
        ) from None


@dataclass(frozen=True)
class AssetRecord:
    """One media item. Never mutated after corpus load."""

    id: str
    display_name: str
    creator_id: str
    creator_name: str
    media_kind: MediaKind
    created_at: datetime.datetime
    aspect_ratio: AspectRatio
    review_status: ReviewStatus
    tags: tuple[str, ...] = ()
    container_id: Optional[str] = None
    file_size: Optional[str] = None
    dimensions: Optional[str] = None
    duration: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags or ()))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AssetRecord":
        """
        Build a record from a presentation-layer payload.

        Accepts camelCase keys (``displayName``, ``creatorId``, ``createdAt``)
        as well as snake_case and the older fixture names (``name``,
        ``creator``, ``type``, ``dateCreated``, ``aspect``, ``status``).

        Raises:
            CorpusValidationError: when a required field is missing or an
                enumerated field carries an unknown value
        """
        asset_id = str(_first(payload, "id", default="") or "").strip()
        if not asset_id:
            raise CorpusValidationError("Asset payload is missing an id", code=ErrorCode.INVALID_INPUT)

        raw_kind = _first(payload, "mediaKind", "media_kind", "type", "kind")
        kind = coerce_media_kind(raw_kind)
        if kind is None:
            raise CorpusValidationError(
                f"Asset {asset_id!r} has an invalid mediaKind: {raw_kind!r}",
                identifiers=[asset_id],
                code=ErrorCode.INVALID_INPUT,
            )

        tags = _first(payload, "tags", default=()) or ()
        if isinstance(tags, str):
            tags = [tags]

        return cls(
            id=asset_id,
            display_name=str(_first(payload, "displayName", "display_name", "name", default="")),
            creator_id=str(_first(payload, "creatorId", "creator_id", default="")),
            creator_name=str(_first(payload, "creatorName", "creator_name", "creator", default="")),
            media_kind=kind,
            created_at=_parse_datetime(_first(payload, "createdAt", "created_at", "dateCreated"), asset_id),
            aspect_ratio=_parse_enum(AspectRatio, _first(payload, "aspectRatio", "aspect_ratio", "aspect"), "aspectRatio", asset_id),
            review_status=_parse_enum(ReviewStatus, _first(payload, "reviewStatus", "review_status", "status"), "reviewStatus", asset_id),
            tags=tuple(tags),
            container_id=_first(payload, "containerId", "container_id"),
            file_size=_first(payload, "fileSize", "file_size"),
            dimensions=_first(payload, "dimensions"),
            duration=_first(payload, "duration"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys presentation code expects."""
        return {
            "id": self.id,
            "displayName": self.display_name,
            "creatorId": self.creator_id,
            "creatorName": self.creator_name,
            "mediaKind": self.media_kind.value,
            "createdAt": self.created_at.isoformat(),
            "aspectRatio": self.aspect_ratio.value,
            "reviewStatus": self.review_status.value,
            "tags": list(self.tags),
            "containerId": self.container_id,
            "fileSize": self.file_size,
            "dimensions": self.dimensions,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class Corpus:
    """
    Ordered, read-only collection of asset records.

    Build it with `load_corpus()`, which validates id uniqueness. Insertion
    order is preserved and used as the final tie-breaker when ordering results.
    """

    records: tuple[AssetRecord, ...] = ()
    _by_id: dict[str, AssetRecord] = field(default_factory=dict, repr=False, compare=False)
    _position: dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[AssetRecord]:
        return iter(self.records)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._by_id

    def get(self, asset_id: str) -> Optional[AssetRecord]:
        return self._by_id.get(asset_id)

    def position(self, asset_id: str) -> int:
        """Insertion index of an asset; unknown ids sort last."""
        return self._position.get(asset_id, len(self.records))

    def ids(self) -> list[str]:
        return [r.id for r in self.records]


def _find_duplicates(records: Sequence[AssetRecord]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for record in records:
        if record.id in seen and record.id not in duplicates:
            duplicates.append(record.id)
        seen.add(record.id)
    return duplicates


def _validate_record(record: AssetRecord) -> None:
    if not record.id:
        raise CorpusValidationError("Asset record has an empty id", code=ErrorCode.INVALID_INPUT)
    for tag in record.tags:
        if not isinstance(tag, str) or not tag.strip():
            raise CorpusValidationError(
                f"Asset {record.id!r} has an empty or non-string tag",
                identifiers=[record.id],
                code=ErrorCode.INVALID_INPUT,
            )


def load_corpus(records: Iterable[AssetRecord | Mapping[str, Any]]) -> Corpus:
    """
    Validate asset records and build a corpus.

    Args:
        records: AssetRecord instances or payload dicts (see `AssetRecord.from_dict`)

    Returns:
        Corpus preserving the given order

    Raises:
        CorpusValidationError: duplicate ids (code DUPLICATE_ID, all duplicates
            listed), or a malformed record (code INVALID_INPUT)
    """
    items: list[AssetRecord] = []
    for item in records or ():
        record = item if isinstance(item, AssetRecord) else AssetRecord.from_dict(item)
        _validate_record(record)
        items.append(record)

    duplicates = _find_duplicates(items)
    if duplicates:
        raise CorpusValidationError(
            f"Duplicate asset ids: {', '.join(duplicates)}",
            identifiers=duplicates,
            code=ErrorCode.DUPLICATE_ID,
        )

    by_id = {r.id: r for r in items}
    position = {r.id: i for i, r in enumerate(items)}
    logger.debug("Loaded corpus with %d assets", len(items))
    return Corpus(records=tuple(items), _by_id=by_id, _position=position)
