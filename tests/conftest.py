import datetime
import sys

import pytest

from .factories import NOW, make_asset
from .repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_corpus():
    from mac_backend import load_corpus

    return load_corpus(
        [
            make_asset(
                "a1",
                displayName="Hero Banner Spring Campaign.png",
                creatorId="john",
                creatorName="John Smith",
                mediaKind="image",
                createdAt=NOW - datetime.timedelta(hours=2),
                aspectRatio="16:9",
                reviewStatus="approved",
                tags=["marketing", "social"],
                containerId="gallery-1",
            ),
            make_asset(
                "a2",
                displayName="Product Demo Reel.mp4",
                creatorId="jane",
                creatorName="Jane Doe",
                mediaKind="video",
                createdAt=NOW - datetime.timedelta(days=3),
                aspectRatio="16:9",
                reviewStatus="pending",
                tags=["product", "brand"],
                containerId="gallery-2",
            ),
            make_asset(
                "a3",
                displayName="Brand Guidelines 2024.pdf",
                creatorId="alex",
                creatorName="Alex Johnson",
                mediaKind="document",
                createdAt=NOW - datetime.timedelta(days=20),
                aspectRatio="4:3",
                reviewStatus="approved",
                tags=["brand"],
            ),
            make_asset(
                "a4",
                displayName="Podcast Episode 42.mp3",
                creatorId="jane",
                creatorName="Jane Doe",
                mediaKind="audio",
                createdAt=NOW - datetime.timedelta(days=200),
                aspectRatio="1:1",
                reviewStatus="draft",
                tags=["marketing", "product"],
            ),
            make_asset(
                "a5",
                displayName="Team Photo 2024.jpg",
                creatorId="john",
                creatorName="John Smith",
                mediaKind="photo",
                createdAt=NOW - datetime.timedelta(days=8),
                aspectRatio="1:1",
                reviewStatus="approved",
                tags=["social", "brand"],
                containerId="gallery-1",
            ),
        ]
    )


@pytest.fixture
def demo_corpus():
    from mac_backend.features.corpus import generate_demo_corpus

    return generate_demo_corpus(80, seed=7, reference=NOW)
