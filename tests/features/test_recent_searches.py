from mac_backend.features.search.history import RecentSearches


def test_most_recent_first_and_deduped():
    recent = RecentSearches(max_items=5)
    for text in ("lebron", "nike", "LeBron", "gatorade"):
        recent.add(text)
    assert recent.items() == ["gatorade", "LeBron", "nike"]


def test_bounded():
    recent = RecentSearches(max_items=3)
    for text in ("a", "b", "c", "d"):
        recent.add(text)
    assert recent.items() == ["d", "c", "b"]
    assert len(recent) == 3


def test_blank_is_ignored_and_clear():
    recent = RecentSearches()
    assert recent.add("   ") is False
    assert recent.add("  spring   campaign ") is True
    assert list(recent) == ["spring campaign"]
    recent.clear()
    assert recent.items() == []
    assert recent.max_items == 5
