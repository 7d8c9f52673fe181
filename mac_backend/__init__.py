"""
Search, filter and facet engine for the media asset console.
"""
from .features.corpus import AssetRecord, Corpus, load_corpus
from .features.search import (
    FacetCounts,
    FacetTaxonomy,
    QueryDescriptor,
    SearchOutcome,
    SearchSession,
    StructuredFilters,
    count_facets,
    default_taxonomy,
    filter_corpus,
    search,
    suggest,
)

__all__ = [
    "AssetRecord",
    "Corpus",
    "load_corpus",
    "FacetCounts",
    "FacetTaxonomy",
    "QueryDescriptor",
    "SearchOutcome",
    "SearchSession",
    "StructuredFilters",
    "count_facets",
    "default_taxonomy",
    "filter_corpus",
    "search",
    "suggest",
]
