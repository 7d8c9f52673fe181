"""
Configuration errors raised while building a corpus or a facet taxonomy.

These are programming errors, not retryable conditions: the engine refuses
to build a usable object and reports which identifiers collided.
"""
from __future__ import annotations

from typing import Iterable

from .types import ErrorCode


class EngineConfigError(ValueError):
    """Base class for fatal construction-time errors."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, *, identifiers: Iterable[str] = (), code: ErrorCode | None = None):
        super().__init__(message)
        self.identifiers: tuple[str, ...] = tuple(identifiers)
        if code is not None:
            self.code = code


class CorpusValidationError(EngineConfigError):
    """Raised by `load_corpus` for duplicate ids or malformed records."""

    code = ErrorCode.DUPLICATE_ID

    @property
    def duplicate_ids(self) -> tuple[str, ...]:
        if self.code != ErrorCode.DUPLICATE_ID:
            return ()
        return self.identifiers


class TaxonomyError(EngineConfigError):
    """Raised when a facet taxonomy registers an unknown field or value."""

    code = ErrorCode.UNKNOWN_FACET
