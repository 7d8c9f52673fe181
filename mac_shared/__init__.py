"""Shared utilities for the media asset console search engine."""
from .errors import CorpusValidationError, EngineConfigError, TaxonomyError
from .log import get_logger, log_structured, search_id_var
from .result import Result
from .time import calendar_days_between, local_now, ms, start_of_day, timer
from .types import AspectRatio, ErrorCode, FacetField, MediaKind, ReviewStatus

__all__ = [
    "Result",
    "get_logger",
    "log_structured",
    "search_id_var",
    "ms",
    "local_now",
    "start_of_day",
    "calendar_days_between",
    "timer",
    "ErrorCode",
    "MediaKind",
    "AspectRatio",
    "ReviewStatus",
    "FacetField",
    "EngineConfigError",
    "CorpusValidationError",
    "TaxonomyError",
]
