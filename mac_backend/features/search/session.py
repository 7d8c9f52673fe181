"""
Search session - overlapping asynchronous searches where only the latest wins.

Each `submit()` takes the next sequence number and schedules an evaluation
after a simulated backend delay. When an evaluation finishes it is delivered
only if its sequence number is still the latest; older evaluations resolve
their handle with a SUPERSEDED result and never reach the listener, whatever
order they complete in.
"""
from __future__ import annotations

import asyncio
import datetime
import inspect
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from ...config import SEARCH_LATENCY_MAX_MS, SEARCH_LATENCY_MIN_MS
from ...shared import ErrorCode, Result, get_logger, log_structured, ms, search_id_var
from .history import RecentSearches
from .matcher import MatcherOptions
from .query import QueryDescriptor
from .service import QueryLike, SearchOutcome, coerce_query, search
from .taxonomy import FacetTaxonomy, derive_taxonomy

if TYPE_CHECKING:
    from ..corpus.models import Corpus

logger = get_logger(__name__)

ResultListener = Callable[[SearchOutcome], Any]


class SessionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    PENDING_SUPERSEDED = "pending_superseded"


@dataclass(frozen=True)
class SessionHandle:
    """Ticket for one submitted query; `future` resolves to a Result."""

    seq: int
    query: QueryDescriptor
    future: "asyncio.Future[Result[SearchOutcome]]"

    def done(self) -> bool:
        return self.future.done()

    async def wait(self) -> Result[SearchOutcome]:
        return await asyncio.shield(self.future)

    def __await__(self):
        return self.wait().__await__()


class SearchSession:
    """
    Owns the request sequence for one console search surface.

    Must be used from a running event loop. The corpus and taxonomy are
    read only; the sequence number and the recent-search list are the only
    state the session mutates.
    """

    def __init__(
        self,
        corpus: "Corpus",
        taxonomy: Optional[FacetTaxonomy] = None,
        *,
        on_result: Optional[ResultListener] = None,
        latency: Optional[tuple[float, float]] = None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime.datetime] = None,
        options: Optional[MatcherOptions] = None,
        recent: Optional[RecentSearches] = None,
    ):
        """
        Args:
            corpus: Records to search
            taxonomy: Facets to count (default: derived from the corpus)
            on_result: Called with the outcome of the latest query only
            latency: (min, max) simulated delay in seconds
            rng: Source of the delay; anything with ``uniform(a, b)``
            now: Fixed reference time for date buckets (default: read per search)
            options: Fuzzy matcher tuning
            recent: Recent-search list to record submitted text into
        """
        self._corpus = corpus
        self._taxonomy = taxonomy if taxonomy is not None else derive_taxonomy(corpus)
        self._on_result = on_result
        if latency is None:
            latency = (SEARCH_LATENCY_MIN_MS / 1000.0, SEARCH_LATENCY_MAX_MS / 1000.0)
        low, high = (max(0.0, float(v)) for v in latency)
        self._latency = (low, max(low, high))
        self._rng = rng or random.Random()
        self._now = now
        self._options = options
        self._recent = recent if recent is not None else RecentSearches()
        self._seq = 0
        self._last_outcome: Optional[SearchOutcome] = None
        self._inflight: dict[int, tuple[asyncio.Task[None], asyncio.Future[Result[SearchOutcome]]]] = {}

    @property
    def sequence(self) -> int:
        return self._seq

    @property
    def state(self) -> SessionState:
        pending = [seq for seq, (task, _) in self._inflight.items() if not task.done()]
        if self._seq not in pending:
            return SessionState.IDLE
        if len(pending) > 1:
            return SessionState.PENDING_SUPERSEDED
        return SessionState.PENDING

    @property
    def last_outcome(self) -> Optional[SearchOutcome]:
        """Most recently delivered outcome, if any."""
        return self._last_outcome

    @property
    def recent_searches(self) -> RecentSearches:
        return self._recent

    @property
    def recent_queries(self) -> list[str]:
        return self._recent.items()

    def submit(self, query: QueryLike) -> SessionHandle:
        """Schedule a search and return immediately."""
        descriptor = coerce_query(query)
        self._seq += 1
        seq = self._seq
        self._recent.add(descriptor.free_text)

        loop = asyncio.get_running_loop()
        future: asyncio.Future[Result[SearchOutcome]] = loop.create_future()
        task = asyncio.create_task(self._run(seq, descriptor, future))
        self._inflight[seq] = (task, future)
        task.add_done_callback(lambda t, s=seq: self._forget(s, t))
        logger.debug("Submitted search #%d (%d in flight)", seq, len(self._inflight))
        return SessionHandle(seq=seq, query=descriptor, future=future)

    def _forget(self, seq: int, task: "asyncio.Task[None]") -> None:
        entry = self._inflight.get(seq)
        if entry is not None and entry[0] is task:
            del self._inflight[seq]

    def _delay(self) -> float:
        low, high = self._latency
        if high <= 0:
            return 0.0
        return max(0.0, float(self._rng.uniform(low, high)))

    async def _run(
        self,
        seq: int,
        query: QueryDescriptor,
        future: "asyncio.Future[Result[SearchOutcome]]",
    ) -> None:
        token = search_id_var.set(str(seq))
        started = ms()
        try:
            await asyncio.sleep(self._delay())
            if seq != self._seq:
                log_structured(logger, logging.DEBUG, "search discarded", seq=seq, latest=self._seq, elapsed_ms=ms() - started)
                _resolve(future, Result.Err(ErrorCode.SUPERSEDED, f"Search #{seq} superseded by #{self._seq}", seq=seq))
                return
            try:
                outcome = search(
                    self._corpus,
                    query,
                    taxonomy=self._taxonomy,
                    now=self._now,
                    options=self._options,
                )
            except Exception as exc:
                logger.error("Search #%d failed: %s", seq, exc, exc_info=True)
                _resolve(future, Result.Err(ErrorCode.SEARCH_FAILED, str(exc) or type(exc).__name__, seq=seq))
                return
            self._last_outcome = outcome
            log_structured(logger, logging.DEBUG, "search delivered", seq=seq, total=outcome.total, elapsed_ms=ms() - started)
            _resolve(future, Result.Ok(outcome, seq=seq))
            await self._notify(seq, outcome)
        except asyncio.CancelledError:
            _resolve(future, Result.Err(ErrorCode.CANCELLED, f"Search #{seq} cancelled", seq=seq))
            raise
        finally:
            search_id_var.reset(token)

    async def _notify(self, seq: int, outcome: SearchOutcome) -> None:
        if self._on_result is None:
            return
        try:
            ret = self._on_result(outcome)
            if inspect.isawaitable(ret):
                await ret
        except Exception as exc:
            logger.warning("Result listener failed for search #%d: %s", seq, exc)

    async def wait_idle(self) -> None:
        """Wait until every submitted search has resolved."""
        while self._inflight:
            tasks = [task for task, _ in self._inflight.values()]
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding searches and reset the sequence."""
        inflight = list(self._inflight.values())
        self._inflight.clear()
        for task, _ in inflight:
            if not task.done():
                task.cancel()
        if inflight:
            await asyncio.gather(*(task for task, _ in inflight), return_exceptions=True)
        for _, future in inflight:
            _resolve(future, Result.Err(ErrorCode.CANCELLED, "Search session closed"))
        if inflight:
            logger.debug("Search session closed with %d search(es) outstanding", len(inflight))
        self._seq = 0

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _resolve(future: "asyncio.Future[Result[SearchOutcome]]", result: Result[SearchOutcome]) -> None:
    if not future.done():
        future.set_result(result)
