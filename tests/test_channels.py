"""
Tests for Closable Queues
"""

import asyncio

import pytest

from rocketterm import ClosableQueue
from rocketterm.errors import ChannelClosed


@pytest.mark.asyncio
async def test_fifo_order():
    queue = ClosableQueue()
    for item in ("a", "b", "c"):
        await queue.put(item)
    assert queue.qsize() == 3
    assert [await queue.get() for _ in range(3)] == ["a", "b", "c"]
    assert queue.empty()


@pytest.mark.asyncio
async def test_items_before_close_are_delivered():
    queue = ClosableQueue("inbound")
    queue.put_nowait("a")
    queue.close()
    assert queue.closed
    assert queue.qsize() == 1
    assert await queue.get() == "a"
    with pytest.raises(ChannelClosed):
        await queue.get()


@pytest.mark.asyncio
async def test_put_after_close_raises():
    queue = ClosableQueue()
    queue.close()
    queue.close()
    with pytest.raises(ChannelClosed):
        queue.put_nowait("a")
    with pytest.raises(ChannelClosed):
        await queue.put("a")


@pytest.mark.asyncio
async def test_close_wakes_every_waiting_consumer():
    queue = ClosableQueue()
    waiters = [asyncio.create_task(queue.get()) for _ in range(3)]
    await asyncio.sleep(0)
    queue.close()
    results = await asyncio.gather(*waiters, return_exceptions=True)
    assert all(isinstance(r, ChannelClosed) for r in results)


@pytest.mark.asyncio
async def test_get_nowait():
    queue = ClosableQueue()
    with pytest.raises(asyncio.QueueEmpty):
        queue.get_nowait()
    queue.put_nowait(1)
    assert queue.get_nowait() == 1
    queue.close()
    with pytest.raises(ChannelClosed):
        queue.get_nowait()
