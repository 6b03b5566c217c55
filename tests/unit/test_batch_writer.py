"""Unit tests for BatchWriter."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from genremap.interfaces.record_sink import IRecordSink
from genremap.models.genre import GenreRecord
from genremap.pipeline.batch_writer import BatchWriter
from genremap.pipeline.funnel import ResultFunnel
from genremap.utils.errors import SinkError


class MemorySink(IRecordSink):
    """Records every write_rows call; optionally fails selected calls."""

    def __init__(self, fail_calls: set[int] | None = None) -> None:
        self.batches: list[list[str]] = []
        self._fail_calls = fail_calls or set()
        self._calls = 0

    def open(self) -> None:
        pass

    def write_rows(self, records: Sequence[GenreRecord]) -> None:
        call = self._calls
        self._calls += 1
        if call in self._fail_calls:
            raise SinkError(message="disk full", provider_name="memory")
        self.batches.append([r.name for r in records])

    def close(self) -> None:
        pass

    @property
    def location(self) -> str:
        return "memory://"


async def _fill(funnel: ResultFunnel, records: list[GenreRecord]) -> None:
    for record in records:
        await funnel.send(record)
    await funnel.close()


class TestBatchWriter:
    def test_rejects_zero_threshold(self) -> None:
        with pytest.raises(ValueError):
            BatchWriter(ResultFunnel(), MemorySink(), threshold=0)

    @pytest.mark.asyncio
    async def test_five_records_threshold_two(self, make_records) -> None:
        funnel = ResultFunnel(capacity=10)
        sink = MemorySink()
        writer = BatchWriter(funnel, sink, threshold=2)

        await _fill(funnel, make_records(5))
        written = await writer.run()

        assert written == 5
        assert writer.flush_sizes == [2, 2, 1]
        assert [len(batch) for batch in sink.batches] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_exact_multiple_ends_with_empty_final_flush(self, make_records) -> None:
        funnel = ResultFunnel(capacity=10)
        sink = MemorySink()
        writer = BatchWriter(funnel, sink, threshold=2)

        await _fill(funnel, make_records(4))
        await writer.run()

        assert writer.flush_sizes == [2, 2, 0]
        # The empty final flush does not touch the sink.
        assert len(sink.batches) == 2

    @pytest.mark.asyncio
    async def test_no_records_only_final_flush(self) -> None:
        funnel = ResultFunnel(capacity=2)
        sink = MemorySink()
        writer = BatchWriter(funnel, sink, threshold=250)

        await funnel.close()
        assert await writer.run() == 0
        assert writer.flush_sizes == [0]
        assert sink.batches == []

    @pytest.mark.asyncio
    async def test_failed_flush_is_counted_and_writing_continues(self, make_records) -> None:
        funnel = ResultFunnel(capacity=10)
        sink = MemorySink(fail_calls={0})
        writer = BatchWriter(funnel, sink, threshold=2)

        await _fill(funnel, make_records(5))
        written = await writer.run()

        assert writer.flush_failures == 1
        assert written == 3
        assert sink.batches == [["genre-2", "genre-3"], ["genre-4"]]
        assert writer.received == 5

    @pytest.mark.asyncio
    async def test_consumes_concurrently_with_producers(self, make_records) -> None:
        records = make_records(7)
        funnel = ResultFunnel(capacity=1)
        sink = MemorySink()
        writer = BatchWriter(funnel, sink, threshold=3)

        writer_task = asyncio.create_task(writer.run())
        await _fill(funnel, records)
        await asyncio.wait_for(writer_task, timeout=1.0)

        assert writer.flush_sizes == [3, 3, 1]
        assert [name for batch in sink.batches for name in batch] == [
            r.name for r in records
        ]
