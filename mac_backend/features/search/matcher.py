"""
Fuzzy text matcher.

Scores how well a free-text query matches an asset's searchable fields:
display name, creator name and tags. Scores live in [0, 1] where 0 is an
exact (substring) match in any field and lower is better; ``None`` means
no match. Field weights only push inexact matches toward 1; the weight of
the winning field is reported so rankers can order equal scores.

Matching is approximate substring search: the query may match anywhere in a
field with up to ``threshold * len(query)`` insertions, deletions,
substitutions or adjacent transpositions. Where the match sits inside the
field does not affect the score.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ...config import (
    SEARCH_FUZZY_ENABLED,
    SEARCH_FUZZY_THRESHOLD,
    SEARCH_MAX_QUERY_LENGTH,
    SEARCH_MAX_TOKENS,
    SEARCH_MIN_FUZZY_LENGTH,
    SEARCH_WEIGHT_CREATOR,
    SEARCH_WEIGHT_NAME,
    SEARCH_WEIGHT_TAGS,
)

if TYPE_CHECKING:
    from ..corpus.models import AssetRecord

NEUTRAL_SCORE = 0.0

FIELD_NAME = "displayName"
FIELD_CREATOR = "creatorName"
FIELD_TAGS = "tags"


@dataclass(frozen=True)
class MatcherOptions:
    """Tuning for the fuzzy matcher; defaults come from config."""

    threshold: float = SEARCH_FUZZY_THRESHOLD
    min_fuzzy_length: int = SEARCH_MIN_FUZZY_LENGTH
    fuzzy: bool = SEARCH_FUZZY_ENABLED
    name_weight: float = SEARCH_WEIGHT_NAME
    creator_weight: float = SEARCH_WEIGHT_CREATOR
    tags_weight: float = SEARCH_WEIGHT_TAGS
    max_tokens: int = SEARCH_MAX_TOKENS

    def max_edits(self, query_length: int) -> int:
        return int(self.threshold * query_length)


DEFAULT_OPTIONS = MatcherOptions()


@dataclass(frozen=True)
class MatchDetail:
    """Best field match for a record: combined score, field name and matched text."""

    score: float
    field: str
    value: str
    edits: int
    weight: float = 1.0


def normalize_query(text: Optional[str]) -> str:
    """Trim, collapse whitespace, case-fold and bound the length of a query."""
    if not text:
        return ""
    collapsed = " ".join(str(text).split())
    return collapsed[:SEARCH_MAX_QUERY_LENGTH].casefold()


def substring_distance(pattern: str, text: str, max_edits: int) -> Optional[int]:
    """
    Smallest edit distance between `pattern` and any substring of `text`.

    Optimal-string-alignment distance (adjacent transpositions cost one
    edit) with a free start and end in `text`. Returns None as soon as no
    alignment can stay within `max_edits`.
    """
    m = len(pattern)
    if m == 0:
        return 0
    if pattern in text:
        return 0
    n = len(text)
    if m - n > max_edits:
        return None

    before: Optional[list[int]] = None
    prev = [0] * (n + 1)
    for i in range(1, m + 1):
        cur = [i] + [0] * n
        p_char = pattern[i - 1]
        for j in range(1, n + 1):
            cost = 0 if p_char == text[j - 1] else 1
            best = min(prev[j] + 1, cur[j - 1] + 1, prev[j - 1] + cost)
            if (
                before is not None
                and j > 1
                and p_char == text[j - 2]
                and pattern[i - 2] == text[j - 1]
            ):
                best = min(best, before[j - 2] + 1)
            cur[j] = best
        # Row minima never decrease, so the search can stop early.
        if min(cur) > max_edits:
            return None
        before, prev = prev, cur

    distance = min(prev)
    return distance if distance <= max_edits else None


def field_distance(pattern: str, text: str, options: MatcherOptions = DEFAULT_OPTIONS) -> Optional[int]:
    """Edits needed to find `pattern` in `text`; both are expected case-folded."""
    if not pattern or not text:
        return None
    if not options.fuzzy or len(pattern) < options.min_fuzzy_length:
        return 0 if pattern in text else None
    return substring_distance(pattern, text, options.max_edits(len(pattern)))


def _weighted(raw: float, weight: float, top_weight: float) -> float:
    if raw <= 0.0:
        return 0.0
    # Lighter fields are pushed toward 1 in proportion to their weight deficit.
    penalty = 1.0 - (weight / top_weight) if top_weight > 0 else 0.0
    return raw + (1.0 - raw) * penalty


def _candidates(record: "AssetRecord", options: MatcherOptions) -> list[tuple[str, str, float]]:
    fields = [
        (FIELD_NAME, record.display_name, options.name_weight),
        (FIELD_CREATOR, record.creator_name, options.creator_weight),
    ]
    fields.extend((FIELD_TAGS, tag, options.tags_weight) for tag in record.tags)
    return fields


def _best_for_pattern(record: "AssetRecord", pattern: str, options: MatcherOptions) -> Optional[MatchDetail]:
    top = max(options.name_weight, options.creator_weight, options.tags_weight)
    best: Optional[MatchDetail] = None
    for field, value, weight in _candidates(record, options):
        edits = field_distance(pattern, (value or "").casefold(), options)
        if edits is None:
            continue
        score = _weighted(min(1.0, edits / len(pattern)), weight, top)
        if best is None or (score, -weight) < (best.score, -best.weight):
            best = MatchDetail(score=score, field=field, value=value, edits=edits, weight=weight)
    return best


def best_match(record: "AssetRecord", query: Optional[str], options: Optional[MatcherOptions] = None) -> Optional[MatchDetail]:
    """
    Best-scoring field match for `query` on `record`.

    The whole query is tried first. A multi-word query that does not match
    as a whole falls back to per-word matching: every word must match some
    field, and the score is the mean of the per-word scores.
    """
    opts = options or DEFAULT_OPTIONS
    pattern = normalize_query(query)
    if not pattern:
        return None

    whole = _best_for_pattern(record, pattern, opts)
    if whole is not None:
        return whole

    words = pattern.split()[: opts.max_tokens]
    if len(words) < 2:
        return None
    details: list[MatchDetail] = []
    for word in words:
        detail = _best_for_pattern(record, word, opts)
        if detail is None:
            return None
        details.append(detail)
    lead = min(details, key=lambda d: (d.score, -d.weight))
    mean = sum(d.score for d in details) / len(details)
    return MatchDetail(
        score=mean,
        field=lead.field,
        value=lead.value,
        edits=sum(d.edits for d in details),
        weight=min(d.weight for d in details),
    )


def match(record: "AssetRecord", query: Optional[str], options: Optional[MatcherOptions] = None) -> Optional[float]:
    """
    Score `record` against a free-text query.

    Returns:
        NEUTRAL_SCORE for an empty query, a score in [0, 1] (lower is better)
        for a match, or None when no field is within the distance threshold
    """
    if not normalize_query(query):
        return NEUTRAL_SCORE
    detail = best_match(record, query, options)
    return None if detail is None else detail.score
