"""
Utility helpers shared across backend modules.
"""
from __future__ import annotations

import os
from typing import Any, Iterable

BOOL_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "enabled"})
BOOL_FALSE_VALUES = frozenset({"0", "false", "no", "off", "disabled"})


def parse_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in BOOL_TRUE_VALUES:
            return True
        if normalized in BOOL_FALSE_VALUES:
            return False
        try:
            return bool(float(normalized))
        except ValueError:
            pass
    return default


def env_bool(name: str, default: bool) -> bool:
    if not name:
        return default
    raw = os.environ.get(name)
    if raw is None:
        return default
    return parse_bool(raw, default)


def fold(value: Any) -> str:
    """Case-folded, trimmed text for case-insensitive comparisons."""
    if value is None:
        return ""
    return str(value).strip().casefold()


def dedupe_folded(values: Iterable[str]) -> list[str]:
    """Keep the first occurrence of each value, comparing case-insensitively."""
    out: list[str] = []
    seen: set[str] = set()
    for value in values:
        key = fold(value)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(value)
    return out
