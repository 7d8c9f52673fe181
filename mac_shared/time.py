"""
Time utilities for timestamps, calendar-day arithmetic and performance measurement.
"""
from __future__ import annotations

import datetime
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager


def ms() -> int:
    """Get current timestamp in milliseconds (int)."""
    return int(time.time() * 1000)


def local_now() -> datetime.datetime:
    """Current wall-clock time as a naive local datetime."""
    return datetime.datetime.now()


def as_local(value: datetime.datetime) -> datetime.datetime:
    """
    Express a datetime as naive local time.

    Aware values are converted to the local zone; naive values are assumed
    to already be local.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def start_of_day(value: datetime.datetime) -> datetime.datetime:
    """Truncate a datetime to local midnight."""
    return as_local(value).replace(hour=0, minute=0, second=0, microsecond=0)


def local_date(value: datetime.datetime | datetime.date) -> datetime.date:
    """Calendar date of a datetime in local time (dates pass through)."""
    if isinstance(value, datetime.datetime):
        return as_local(value).date()
    return value


def calendar_days_between(earlier: datetime.datetime, later: datetime.datetime) -> int:
    """
    Number of calendar days from `earlier` to `later`.

    Both values are truncated to local midnight first, so 23:59 yesterday and
    00:01 today are one day apart. Negative when `earlier` is in the future.
    """
    return (start_of_day(later) - start_of_day(earlier)).days


@contextmanager
def timer(label: str, logger: logging.Logger | None = None) -> Iterator[None]:
    """
    Context manager for timing operations.

    Usage:
        with timer("search evaluation", logger):
            filter_corpus(corpus, query)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        msg = f"{label} took {elapsed:.3f}s"
        if logger:
            logger.debug(msg)
        else:
            print(msg)
