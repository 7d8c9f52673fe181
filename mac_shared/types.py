"""
Shared types, enums, and constants.
"""
from enum import Enum
from typing import Final, Optional


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    DUPLICATE_ID = "DUPLICATE_ID"
    UNKNOWN_FACET = "UNKNOWN_FACET"

    # Session lifecycle
    SUPERSEDED = "SUPERSEDED"
    CANCELLED = "CANCELLED"

    # Evaluation
    SEARCH_FAILED = "SEARCH_FAILED"


class MediaKind(str, Enum):
    """Media kinds an asset can carry."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"


class AspectRatio(str, Enum):
    """Closed set of supported aspect ratios."""

    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    STANDARD = "4:3"


class ReviewStatus(str, Enum):
    """Review workflow states."""

    APPROVED = "approved"
    PENDING = "pending"
    DRAFT = "draft"


class FacetField(str, Enum):
    """Facet fields known to the engine. Adding one is a code change."""

    CREATOR = "creator"
    MEDIA_KIND = "mediaKind"
    ASPECT_RATIO = "aspectRatio"
    REVIEW_STATUS = "reviewStatus"
    TAG = "tag"
    DATE_BUCKET = "dateBucket"


# Historical naming used by several console variants ("Photo" pill, "photo" type).
MEDIA_KIND_ALIASES: Final[dict[str, MediaKind]] = {
    "photo": MediaKind.IMAGE,
}

# Field names accepted from older UI payloads.
FACET_FIELD_ALIASES: Final[dict[str, FacetField]] = {
    "type": FacetField.MEDIA_KIND,
    "kind": FacetField.MEDIA_KIND,
    "aspect": FacetField.ASPECT_RATIO,
    "status": FacetField.REVIEW_STATUS,
    "tags": FacetField.TAG,
    "date": FacetField.DATE_BUCKET,
}


def coerce_media_kind(value) -> Optional[MediaKind]:
    """
    Resolve a media kind from an enum member or a case-insensitive string.

    Args:
        value: MediaKind, string ("image", "Photo", ...) or anything else

    Returns:
        The matching MediaKind, or None when the value is not recognized
    """
    if isinstance(value, MediaKind):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if text in MEDIA_KIND_ALIASES:
        return MEDIA_KIND_ALIASES[text]
    try:
        return MediaKind(text)
    except ValueError:
        return None


def coerce_facet_field(value) -> Optional[FacetField]:
    """Resolve a facet field from its canonical name, a legacy alias, or an enum member."""
    if isinstance(value, FacetField):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    for field in FacetField:
        if field.value.lower() == text.lower():
            return field
    return FACET_FIELD_ALIASES.get(text.lower())
