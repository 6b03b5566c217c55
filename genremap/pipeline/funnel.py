"""Bounded fan-in channel from dispatched units to the batch writer.

Many producers (one per in-flight unit) send enriched records; exactly one
consumer (the BatchWriter) receives them.  The channel is bounded, so when
the writer falls behind, ``send`` blocks and the producers slow down
instead of piling records up in memory.

Closing protocol:
    The orchestrator calls :meth:`close` only after the dispatcher has
    joined every unit.  ``close`` enqueues an end-of-stream marker *behind*
    all records already sent, so the consumer drains everything before it
    sees the end.  Sending after close is a programming error.
"""

from __future__ import annotations

import asyncio

from genremap.models.genre import GenreRecord
from genremap.utils.concurrency import CancelScope
from genremap.utils.errors import PipelineError

# End-of-stream marker; never leaves this module.
_END_OF_STREAM = object()


class ResultFunnel:
    """Bounded multi-producer / single-consumer queue of GenreRecords.

    Parameters
    ----------
    capacity:
        Maximum number of records buffered before ``send`` blocks.
        Defaults to the batch threshold (250).
    """

    def __init__(self, capacity: int = 250) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._sent = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sent(self) -> int:
        """Number of records successfully enqueued."""
        return self._sent

    def pending(self) -> int:
        """Number of items currently buffered (including the end marker)."""
        return self._queue.qsize()

    async def send(self, record: GenreRecord, scope: CancelScope | None = None) -> None:
        """Enqueue *record*, blocking while the funnel is full.

        Raises
        ------
        PipelineCancelledError
            If *scope* is cancelled before room becomes available.
        PipelineError
            If the funnel has already been closed.
        """
        if self._closed:
            raise PipelineError(message=f"send on closed funnel: {record.name!r}")
        if scope is None:
            await self._queue.put(record)
        else:
            await scope.guard(self._queue.put(record))
        self._sent += 1

    async def close(self) -> None:
        """Mark the end of the stream.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_END_OF_STREAM)

    async def receive(self) -> GenreRecord | None:
        """Return the next record, or ``None`` once the funnel is closed and drained."""
        item = await self._queue.get()
        if item is _END_OF_STREAM:
            # Put the marker back so later receive() calls also see the end;
            # there is room because nothing is sent after close.
            self._queue.put_nowait(_END_OF_STREAM)
            return None
        return item  # type: ignore[return-value]

    def __aiter__(self) -> ResultFunnel:
        return self

    async def __anext__(self) -> GenreRecord:
        record = await self.receive()
        if record is None:
            raise StopAsyncIteration
        return record
