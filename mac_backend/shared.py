"""Backend-facing alias for shared utilities."""

from __future__ import annotations

import mac_shared as _root_shared
from mac_shared.time import as_local, local_date
from mac_shared.types import coerce_facet_field, coerce_media_kind

Result = _root_shared.Result
ErrorCode = _root_shared.ErrorCode
get_logger = _root_shared.get_logger
log_structured = _root_shared.log_structured
search_id_var = _root_shared.search_id_var
timer = _root_shared.timer
ms = _root_shared.ms
local_now = _root_shared.local_now
start_of_day = _root_shared.start_of_day
calendar_days_between = _root_shared.calendar_days_between
MediaKind = _root_shared.MediaKind
AspectRatio = _root_shared.AspectRatio
ReviewStatus = _root_shared.ReviewStatus
FacetField = _root_shared.FacetField
CorpusValidationError = _root_shared.CorpusValidationError
TaxonomyError = _root_shared.TaxonomyError

__all__ = _root_shared.__all__ + ["as_local", "local_date", "coerce_facet_field", "coerce_media_kind"]
