"""Shared cancellation primitive for the scrape pipeline.

Every suspension point of a dispatched unit (admission slot, rate-limiter
wait, funnel send) is wrapped in :meth:`CancelScope.guard`, which races the
operation against one run-wide cancel signal.  This gives the pipeline
*cooperative* cancellation:

1. **Nothing is force-killed** -- a unit that is already inside a network
   call finishes that call; it only notices the cancellation at its next
   guarded wait.
2. **Completed operations win** -- if the guarded operation finished before
   the cancel signal was observed, its result is returned, so a slot that was
   acquired or a record that was enqueued is never silently lost.
3. **One signal, many observers** -- the scope wraps a single
   ``asyncio.Event``; cancelling it wakes every guarded waiter at once.

The scope is constructed per pipeline run and passed explicitly to the
dispatcher, rate limiter and funnel; it is never a module global.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, TypeVar

import structlog

from genremap.utils.errors import PipelineCancelledError
from genremap.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class CancelScope:
    """Run-wide cancellation signal with cancellable waits.

    The first call to :meth:`cancel` wins and records its reason; later calls
    are no-ops and return ``False``.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """Set the cancel signal.  Returns ``True`` only for the first caller."""
        if self._event.is_set():
            return False
        self._reason = reason
        self._event.set()
        _logger.warning("cancel_scope_cancelled", reason=reason)
        return True

    def raise_if_cancelled(self) -> None:
        """Raise :class:`PipelineCancelledError` if the scope is cancelled."""
        if self._event.is_set():
            raise PipelineCancelledError(f"run cancelled: {self._reason}")

    async def guard(self, awaitable: Awaitable[_T]) -> _T:
        """Await *awaitable* unless the scope is cancelled first.

        Parameters
        ----------
        awaitable:
            The suspension-point operation, e.g. ``semaphore.acquire()``,
            ``asyncio.sleep(delay)`` or ``queue.put(item)``.

        Returns
        -------
        _T
            The operation's result.  An operation that completed before the
            cancel signal was observed keeps its result.

        Raises
        ------
        PipelineCancelledError
            If the scope was cancelled before or while waiting and the
            operation did not complete.
        """
        if self._event.is_set():
            # Close a bare coroutine so it does not warn about never being awaited.
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        operation = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait(
                {operation, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            # The calling task itself was cancelled (e.g. Ctrl-C): do not
            # leave the inner operation running behind our back.
            operation.cancel()
            raise
        finally:
            watcher.cancel()

        if not operation.done():
            operation.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await operation

        if operation.cancelled():
            raise PipelineCancelledError(f"run cancelled: {self._reason}")
        return operation.result()
