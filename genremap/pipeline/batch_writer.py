"""Single consumer that drains the funnel into the record sink in batches.

The writer accumulates received records and writes them in one bulk
``write_rows`` call whenever the batch reaches the threshold, plus one
final flush of the remainder when the funnel closes.  Peak memory is
therefore bounded by roughly ``threshold`` buffered records plus the
funnel's own capacity, however many genres the run covers.

Flush failures are best-effort: the error is logged and counted, the batch
is dropped, and the loop keeps consuming so later batches still land.
"""

from __future__ import annotations

import asyncio

import structlog

from genremap.interfaces.record_sink import IRecordSink
from genremap.models.genre import GenreRecord
from genremap.pipeline.funnel import ResultFunnel
from genremap.utils.errors import SinkError
from genremap.utils.logging import get_logger


class BatchWriter:
    """Drain a :class:`ResultFunnel` into an :class:`IRecordSink`.

    Parameters
    ----------
    funnel:
        The channel to consume; the writer must be its only reader.
    sink:
        An already opened sink.
    threshold:
        Batch size that triggers a flush (default 250).
    expected_total:
        Optional number of records the run expects, used only for log lines.
    """

    def __init__(
        self,
        funnel: ResultFunnel,
        sink: IRecordSink,
        threshold: int = 250,
        expected_total: int | None = None,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self._funnel = funnel
        self._sink = sink
        self._threshold = threshold
        self._expected_total = expected_total
        # Only this writer's task touches the batch, so no lock.
        self._batch: list[GenreRecord] = []
        self._received = 0
        self._rows_written = 0
        self._flush_sizes: list[int] = []
        self._flush_failures = 0
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def received(self) -> int:
        return self._received

    @property
    def rows_written(self) -> int:
        return self._rows_written

    @property
    def flush_sizes(self) -> list[int]:
        """Size of every flush performed, in order (the final one may be 0)."""
        return list(self._flush_sizes)

    @property
    def flush_failures(self) -> int:
        return self._flush_failures

    async def run(self) -> int:
        """Consume until the funnel closes; return the number of rows written."""
        async for record in self._funnel:
            self._batch.append(record)
            self._received += 1
            if len(self._batch) >= self._threshold:
                await self._flush(final=False)

        await self._flush(final=True)
        self._logger.info(
            "batch_writer_finished",
            received=self._received,
            rows_written=self._rows_written,
            expected=self._expected_total,
            flushes=len(self._flush_sizes),
            flush_failures=self._flush_failures,
        )
        return self._rows_written

    async def _flush(self, final: bool) -> None:
        size = len(self._batch)
        self._flush_sizes.append(size)
        if size:
            rows = list(self._batch)
            try:
                # File I/O off the event loop; producers keep filling the funnel.
                await asyncio.to_thread(self._sink.write_rows, rows)
            except (SinkError, OSError) as exc:
                self._flush_failures += 1
                self._logger.error(
                    "batch_flush_failed",
                    size=size,
                    final=final,
                    sink=self._sink.location,
                    error=str(exc),
                )
            else:
                self._rows_written += size
                self._logger.info(
                    "final_batch_flushed" if final else "batch_flushed",
                    size=size,
                    total_written=self._rows_written,
                    expected=self._expected_total,
                )
        self._batch.clear()
