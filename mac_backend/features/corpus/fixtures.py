"""
Seeded demo catalog for local exploration of the search engine.

The catalog content is illustrative only; nothing in the engine depends on
these names, creators or tags.
"""
from __future__ import annotations

import datetime
import random
from typing import Optional

from ...shared import AspectRatio, MediaKind, ReviewStatus, local_now
from .models import AssetRecord, Corpus, load_corpus

DEMO_CREATORS = (
    ("john", "John Smith"),
    ("jane", "Jane Doe"),
    ("alex", "Alex Johnson"),
)

DEMO_NAMES: dict[MediaKind, tuple[str, ...]] = {
    MediaKind.IMAGE: (
        "Hero Banner Spring Campaign",
        "Product Shot - Blue Sneakers",
        "Team Photo 2024",
        "Logo Variation Dark",
        "Social Post Background",
        "Email Header Design",
        "Instagram Story Template",
        "Facebook Cover Photo",
        "Product Lifestyle Shot",
        "Brand Pattern Tile",
        "Icon Set Preview",
        "Mockup Phone Display",
        "Billboard Design Draft",
        "Newsletter Banner",
        "Landing Page Hero",
    ),
    MediaKind.VIDEO: (
        "Brand Anthem 60s",
        "Product Demo Reel",
        "Customer Testimonial - Sarah",
        "Behind the Scenes Footage",
        "Social Teaser 15s",
        "Tutorial How-To Guide",
        "Event Highlight Reel",
        "Animated Logo Intro",
    ),
    MediaKind.DOCUMENT: (
        "Brand Guidelines 2024",
        "Press Kit PDF",
        "Product Spec Sheet",
        "Campaign Brief Q2",
        "Style Guide Update",
        "Presentation Deck",
    ),
    MediaKind.AUDIO: (
        "Podcast Episode 42",
        "Radio Spot 30s",
        "Brand Jingle Master",
        "Interview Raw Audio",
    ),
}

DEMO_TAG_SETS = (
    ("marketing", "social"),
    ("product", "brand"),
    ("social", "brand"),
    ("marketing", "product"),
    ("brand",),
    ("marketing",),
    ("product",),
    ("social",),
    ("marketing", "brand", "product"),
    ("social", "product"),
)

_EXTENSIONS = {
    MediaKind.IMAGE: (".png", ".jpg", ".webp"),
    MediaKind.VIDEO: (".mp4", ".mov"),
    MediaKind.DOCUMENT: (".pdf", ".pptx"),
    MediaKind.AUDIO: (".mp3", ".wav"),
}

_FILE_SIZES = {
    MediaKind.IMAGE: ("1.2 MB", "2.4 MB", "856 KB", "3.1 MB", "1.8 MB"),
    MediaKind.VIDEO: ("45 MB", "120 MB", "28 MB", "250 MB", "85 MB"),
    MediaKind.DOCUMENT: ("2.1 MB", "5.4 MB", "890 KB", "1.5 MB"),
    MediaKind.AUDIO: ("8 MB", "15 MB", "4.2 MB", "22 MB"),
}

_DIMENSIONS = {
    AspectRatio.SQUARE: ("1080x1080", "2048x2048", "512x512"),
    AspectRatio.LANDSCAPE: ("1920x1080", "3840x2160", "1280x720"),
    AspectRatio.PORTRAIT: ("1080x1920", "720x1280"),
    AspectRatio.STANDARD: ("1600x1200", "2048x1536", "1024x768"),
}

_DURATIONS = ("0:15", "0:30", "1:00", "2:30", "5:00", "10:15")

_CONTAINERS = ("gallery-1", "gallery-2", "gallery-3", None)


def _demo_asset(rng: random.Random, index: int, reference: datetime.datetime) -> AssetRecord:
    kind = rng.choice(list(DEMO_NAMES))
    creator_id, creator_name = rng.choice(DEMO_CREATORS)
    aspect = rng.choice(list(AspectRatio))
    age = datetime.timedelta(days=rng.randrange(365), hours=rng.randrange(24), minutes=rng.randrange(60))
    created = (reference - age).replace(second=0, microsecond=0)
    has_frame = kind in (MediaKind.IMAGE, MediaKind.VIDEO)
    has_duration = kind in (MediaKind.VIDEO, MediaKind.AUDIO)
    return AssetRecord(
        id=f"asset-{index}",
        display_name=f"{rng.choice(DEMO_NAMES[kind])}{rng.choice(_EXTENSIONS[kind])}",
        creator_id=creator_id,
        creator_name=creator_name,
        media_kind=kind,
        created_at=created,
        aspect_ratio=aspect,
        review_status=rng.choice(list(ReviewStatus)),
        tags=rng.choice(DEMO_TAG_SETS),
        container_id=rng.choice(_CONTAINERS),
        file_size=rng.choice(_FILE_SIZES[kind]),
        dimensions=rng.choice(_DIMENSIONS[aspect]) if has_frame else None,
        duration=rng.choice(_DURATIONS) if has_duration else None,
    )


def generate_demo_corpus(count: int = 80, *, seed: int = 42, reference: Optional[datetime.datetime] = None) -> Corpus:
    """
    Generate a reproducible demo corpus.

    Args:
        count: Number of assets (ids are ``asset-1`` .. ``asset-<count>``)
        seed: Seed for the private random generator
        reference: "Now" for creation dates, which fall within the previous year

    Returns:
        A validated Corpus
    """
    rng = random.Random(seed)
    ref = reference or local_now()
    return load_corpus(_demo_asset(rng, i + 1, ref) for i in range(max(0, int(count))))
