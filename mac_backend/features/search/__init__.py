"""
Search feature - fuzzy matching, facets, filtering and the async search session.
"""
from .combinator import filter_corpus
from .facets import FacetCounts, count_facets, drill_down_counts
from .history import RecentSearches
from .matcher import MatcherOptions, best_match, match
from .query import (
    DateRange,
    QueryDescriptor,
    SelectedFacet,
    SortKey,
    StructuredFilters,
    parse_inline_filters,
)
from .service import SearchOutcome, Suggestion, search, suggest
from .session import SearchSession, SessionHandle, SessionState
from .taxonomy import (
    FacetDefinition,
    FacetTaxonomy,
    FacetValue,
    build_predicate,
    default_taxonomy,
    derive_taxonomy,
)

__all__ = [
    "filter_corpus",
    "FacetCounts",
    "count_facets",
    "drill_down_counts",
    "RecentSearches",
    "MatcherOptions",
    "best_match",
    "match",
    "DateRange",
    "QueryDescriptor",
    "SelectedFacet",
    "SortKey",
    "StructuredFilters",
    "parse_inline_filters",
    "SearchOutcome",
    "Suggestion",
    "search",
    "suggest",
    "SearchSession",
    "SessionHandle",
    "SessionState",
    "FacetDefinition",
    "FacetTaxonomy",
    "FacetValue",
    "build_predicate",
    "default_taxonomy",
    "derive_taxonomy",
]
