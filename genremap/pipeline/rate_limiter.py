"""Global token-bucket rate limiter shared by every dispatched unit.

All outbound requests of a run go through one limiter instance, so the
request rate seen by the remote site is bounded no matter how many units
are in flight.  The default policy (one permit per 50 ms, burst 1) is a
strict minimum spacing between consecutive requests.

Implementation: generic cell-rate algorithm (GCRA), the scheduling form of
a token bucket.  The limiter tracks a *theoretical arrival time* (TAT);
each caller synchronously reserves the next conforming slot and advances
the TAT by one interval, then sleeps until its slot.  Because reservation
happens without awaiting, slots are handed out in call order and are never
closer than ``interval`` once the burst allowance is used up.

A caller whose wait is cancelled keeps its reservation consumed; the run is
aborting at that point and handing the slot back could let a later caller
overlap a slot that is still pending.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from genremap.utils.concurrency import CancelScope
from genremap.utils.logging import get_logger

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


class TokenBucketRateLimiter:
    """Token bucket admitting one permit per *interval* with capacity *burst*.

    Parameters
    ----------
    interval:
        Seconds per permit refill (default 0.05 → 20 requests/second).
    burst:
        Bucket capacity: how many permits may be granted back-to-back after
        an idle period (default 1 → no bursts).
    clock / sleep:
        Injectable time source and sleeper, for deterministic tests.
    """

    def __init__(
        self,
        interval: float = 0.05,
        burst: int = 1,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if burst < 1:
            raise ValueError("burst must be >= 1")
        self._interval = interval
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tat: float | None = None
        self._granted = 0
        self._logger = get_logger(__name__)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def burst(self) -> int:
        return self._burst

    @property
    def granted(self) -> int:
        """Number of permits handed out so far."""
        return self._granted

    def _reserve(self) -> float:
        """Claim the next conforming slot and return its time."""
        now = self._clock()
        tat = now if self._tat is None else self._tat
        slot = max(now, tat - (self._burst - 1) * self._interval)
        self._tat = max(tat, slot) + self._interval
        return slot

    async def acquire(self, scope: CancelScope | None = None) -> float:
        """Wait for a permit.

        Parameters
        ----------
        scope:
            Run-wide cancel scope; the wait aborts as soon as it is cancelled.

        Returns
        -------
        float
            The clock time of the granted permit.  Permits of successive
            callers are at least ``interval`` apart once the burst is spent.

        Raises
        ------
        PipelineCancelledError
            If *scope* is cancelled before the permit time is reached.
        """
        if scope is not None:
            scope.raise_if_cancelled()

        slot = self._reserve()
        wait = slot - self._clock()
        if wait > 0:
            self._logger.debug("rate_limit_wait", wait_seconds=round(wait, 4))

        # Loop: a timer may fire marginally before the slot on coarse clocks.
        while True:
            delay = slot - self._clock()
            if delay <= 0:
                break
            if scope is None:
                await self._sleep(delay)
            else:
                await scope.guard(self._sleep(delay))

        self._granted += 1
        return slot
