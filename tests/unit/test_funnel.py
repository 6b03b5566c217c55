"""Unit tests for ResultFunnel."""

from __future__ import annotations

import asyncio

import pytest

from genremap.models.genre import GenreRecord
from genremap.pipeline.funnel import ResultFunnel
from genremap.utils.concurrency import CancelScope
from genremap.utils.errors import PipelineCancelledError, PipelineError


def _record(name: str) -> GenreRecord:
    return GenreRecord(name=name)


class TestResultFunnel:
    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError):
            ResultFunnel(capacity=0)

    @pytest.mark.asyncio
    async def test_records_arrive_in_send_order(self) -> None:
        funnel = ResultFunnel(capacity=10)
        for name in ("a", "b", "c"):
            await funnel.send(_record(name))
        await funnel.close()

        received = [record.name async for record in funnel]
        assert received == ["a", "b", "c"]
        assert funnel.sent == 3

    @pytest.mark.asyncio
    async def test_receive_after_end_keeps_returning_none(self) -> None:
        funnel = ResultFunnel(capacity=2)
        await funnel.close()
        assert await funnel.receive() is None
        assert await funnel.receive() is None

    @pytest.mark.asyncio
    async def test_send_blocks_while_full(self) -> None:
        funnel = ResultFunnel(capacity=2)
        await funnel.send(_record("a"))
        await funnel.send(_record("b"))

        blocked = asyncio.create_task(funnel.send(_record("c")))
        await asyncio.sleep(0.01)
        assert not blocked.done()
        assert funnel.pending() == 2

        assert (await funnel.receive()).name == "a"
        await asyncio.wait_for(blocked, timeout=1.0)
        assert funnel.sent == 3

    @pytest.mark.asyncio
    async def test_send_after_close_is_an_error(self) -> None:
        funnel = ResultFunnel(capacity=2)
        await funnel.close()
        assert funnel.closed
        with pytest.raises(PipelineError, match="closed funnel"):
            await funnel.send(_record("late"))

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        funnel = ResultFunnel(capacity=2)
        await funnel.send(_record("a"))
        await funnel.close()
        await funnel.close()
        assert [record.name async for record in funnel] == ["a"]

    @pytest.mark.asyncio
    async def test_blocked_send_aborts_on_cancel(self) -> None:
        scope = CancelScope()
        funnel = ResultFunnel(capacity=1)
        await funnel.send(_record("a"), scope)

        blocked = asyncio.create_task(funnel.send(_record("b"), scope))
        await asyncio.sleep(0.01)
        scope.cancel(reason="unit failed")

        with pytest.raises(PipelineCancelledError):
            await asyncio.wait_for(blocked, timeout=1.0)
        assert funnel.sent == 1
        assert funnel.pending() == 1
