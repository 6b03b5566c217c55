"""Bounded-concurrency, fail-fast dispatch of one unit per work item.

# ─── HOW A UNIT RUNS ──────────────────────────────────────────────────
#
#   (a) wait for an admission slot      ← cancellable
#   (b) wait for a rate-limiter permit  ← cancellable
#   (c) process(item): fetch + parse    ← not interrupted
#   (d) send the record into the funnel ← cancellable
#   (e) release the admission slot      (always, in ``finally``)
#
# Every unit is an asyncio task created up front; the semaphore keeps at
# most N of them past step (a) at any instant.  A unit that fails wraps its
# error in ItemProcessingError; the FIRST such error cancels the shared
# CancelScope, and every other unit aborts at its next cancellable wait.
# Units already inside step (c) finish that call first; nothing is
# force-killed.  ``run`` returns only after every unit has settled.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from typing import Awaitable, Callable

import structlog

from genremap.models.genre import GenreRecord
from genremap.models.report import DispatchReport
from genremap.pipeline.funnel import ResultFunnel
from genremap.pipeline.rate_limiter import TokenBucketRateLimiter
from genremap.utils.concurrency import CancelScope
from genremap.utils.errors import ItemProcessingError, PipelineCancelledError
from genremap.utils.logging import get_logger

# Enrichment step for one work item: fetch, parse and return the record.
ProcessFn = Callable[[GenreRecord], Awaitable[GenreRecord]]


class TaskDispatcher:
    """Run one unit per work item behind an admission gate of size N.

    Parameters
    ----------
    limiter:
        Global rate limiter every unit waits on before fetching.
    funnel:
        Channel that receives each completed record.
    scope:
        Run-wide cancel scope; cancelled by the first failing unit.
    concurrency:
        Admission-gate size N.  ``None`` means ``os.cpu_count()``.
    progress_log_every:
        Emit a progress log line every this many completed units.
    """

    def __init__(
        self,
        limiter: TokenBucketRateLimiter,
        funnel: ResultFunnel,
        scope: CancelScope,
        concurrency: int | None = None,
        progress_log_every: int = 100,
    ) -> None:
        if concurrency is None:
            concurrency = os.cpu_count() or 1
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._limiter = limiter
        self._funnel = funnel
        self._scope = scope
        self._concurrency = concurrency
        self._progress_every = max(1, progress_log_every)
        self._gate = asyncio.Semaphore(concurrency)

        self._active = 0
        self._peak_active = 0
        self._succeeded = 0
        self._failed = 0
        self._cancelled = 0
        self._first_error: ItemProcessingError | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def active(self) -> int:
        """Units currently past the admission gate."""
        return self._active

    @property
    def first_error(self) -> ItemProcessingError | None:
        return self._first_error

    async def run(self, items: Sequence[GenreRecord], process: ProcessFn) -> DispatchReport:
        """Dispatch every item and join all units.

        Returns
        -------
        DispatchReport
            Counts of succeeded / failed / cancelled units and the first
            error observed, if any.  Errors are reported, never raised.
        """
        total = len(items)
        self._logger.info(
            "dispatch_started", items=total, concurrency=self._concurrency
        )

        tasks = [
            asyncio.create_task(
                self._run_unit(item, process, total), name=f"genre-unit:{item.name}"
            )
            for item in items
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        # _run_unit records its own outcome; anything surfacing here was
        # cancelled from outside the scope (e.g. interpreter shutdown).
        for item, result in zip(items, results):
            if isinstance(result, BaseException):
                self._cancelled += 1
                self._logger.warning(
                    "unit_aborted", genre=item.name, error=repr(result)
                )

        first_error = self._first_error
        report = DispatchReport(
            total=total,
            succeeded=self._succeeded,
            failed=self._failed,
            cancelled=self._cancelled,
            peak_active=self._peak_active,
            first_error=str(first_error) if first_error else self._scope.reason,
            first_error_item=first_error.item_name if first_error else None,
        )
        self._logger.info(
            "dispatch_finished",
            total=report.total,
            succeeded=report.succeeded,
            failed=report.failed,
            cancelled=report.cancelled,
            peak_active=report.peak_active,
        )
        return report

    async def _run_unit(self, item: GenreRecord, process: ProcessFn, total: int) -> None:
        try:
            await self._scope.guard(self._gate.acquire())
        except PipelineCancelledError as exc:
            self._record_failure(item, exc)
            return

        self._active += 1
        self._peak_active = max(self._peak_active, self._active)
        try:
            await self._limiter.acquire(self._scope)
            record = await process(item)
            await self._funnel.send(record, self._scope)
        except Exception as exc:
            self._record_failure(item, exc)
            return
        finally:
            self._active -= 1
            self._gate.release()

        self._succeeded += 1
        if self._succeeded % self._progress_every == 0 or self._succeeded == total:
            self._logger.info("dispatch_progress", processed=self._succeeded, total=total)

    def _record_failure(self, item: GenreRecord, exc: Exception) -> None:
        error = ItemProcessingError(item.name, exc)
        if error.cancelled:
            self._cancelled += 1
            self._logger.debug("unit_cancelled", genre=item.name)
            return

        self._failed += 1
        self._logger.error("unit_failed", genre=item.name, error=str(exc))
        if self._first_error is None:
            self._first_error = error
            self._scope.cancel(reason=str(error))
