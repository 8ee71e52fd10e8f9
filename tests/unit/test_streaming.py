"""Tests for the server-push channel and the receiving stream reader."""

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from taskboard.api.streaming import (
    ChunkAssembler,
    StreamChannel,
    StreamState,
    encode_event,
    iter_events,
    read_dashboard_stream,
    split_payload,
)
from taskboard.domain.exceptions import (
    ChunkAssemblyException,
    DepartmentNotFoundException,
    StreamClosedError,
    StreamFailedException,
)


async def collect(channel: StreamChannel, producer) -> list[str]:
    return [event async for event in channel.run(producer)]


def decode(events: list[str]) -> list[dict[str, Any]]:
    frames = []
    for event in events:
        assert event.startswith("data: ")
        assert event.endswith("\n\n")
        frames.append(json.loads(event[len("data: ") :]))
    return frames


async def as_lines(events: list[str]) -> AsyncIterator[str]:
    for line in "".join(events).split("\n"):
        yield line


def big_payload(rows: int = 200) -> dict[str, Any]:
    return {"tasks": [{"id": str(i), "title": f"Task número {i}"} for i in range(rows)]}


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# -- channel --------------------------------------------------------------


async def test_small_payload_is_delivered_inline() -> None:
    payload = {"tasks": [], "stats": {"totalActive": 0}}

    async def producer(channel: StreamChannel) -> None:
        channel.progress("Loading", 50)
        await channel.complete(payload)

    channel = StreamChannel(chunk_threshold=10_000)
    frames = decode(await collect(channel, producer))

    assert [f["type"] for f in frames] == ["progress", "progress", "complete"]
    assert frames[0] == {"type": "progress", "message": "Starting data load", "progress": 0}
    assert frames[-1]["data"] == payload
    assert isinstance(frames[-1]["loadTime"], int)
    assert channel.state is StreamState.COMPLETE


async def test_large_payload_is_chunked_in_order_with_pauses() -> None:
    payload = big_payload()
    sleep = RecordingSleep()

    async def producer(channel: StreamChannel) -> None:
        await channel.complete(payload)

    channel = StreamChannel(chunk_threshold=1000, chunk_size=700, chunk_delay_ms=50, sleep=sleep)
    frames = decode(await collect(channel, producer))

    start = next(f for f in frames if f["type"] == "chunked_start")
    chunks = [f for f in frames if f["type"] == "chunk"]
    text = json.dumps(payload)
    assert start["totalSize"] == len(text)
    assert start["totalChunks"] == len(chunks) == -(-len(text) // 700)
    assert [c["index"] for c in chunks] == list(range(len(chunks)))
    assert [c["isLast"] for c in chunks] == [False] * (len(chunks) - 1) + [True]
    assert "".join(c["data"] for c in chunks) == text
    assert frames[-1]["type"] == "complete"
    assert "data" not in frames[-1]
    assert sleep.calls == [0.05] * (len(chunks) - 1)


async def test_payload_at_threshold_is_chunked() -> None:
    payload = {"k": "x" * 20}
    size = len(json.dumps(payload))

    async def producer(channel: StreamChannel) -> None:
        await channel.complete(payload)

    frames = decode(
        await collect(StreamChannel(chunk_threshold=size, chunk_size=size, chunk_delay_ms=0), producer)
    )
    assert [f["type"] for f in frames] == ["progress", "chunked_start", "chunk", "complete"]


async def test_chunked_stream_round_trips_through_reader() -> None:
    payload = big_payload(500)

    async def producer(channel: StreamChannel) -> None:
        channel.progress("Fetching", 40)
        await channel.complete(payload)

    events = await collect(StreamChannel(chunk_threshold=2000, chunk_size=1024, chunk_delay_ms=0), producer)
    seen: list[int] = []

    outcome = await read_dashboard_stream(as_lines(events), lambda message, pct: seen.append(pct))

    assert outcome.payload == payload
    assert outcome.chunked is True
    assert seen == [0, 40]


async def test_progress_is_monotonic_and_clamped() -> None:
    async def producer(channel: StreamChannel) -> None:
        channel.progress("a", 30)
        channel.progress("b", 20)
        channel.progress("c", 150)
        await channel.complete({})

    frames = decode(await collect(StreamChannel(), producer))
    assert [f["progress"] for f in frames if f["type"] == "progress"] == [0, 30, 30, 100]


async def test_taskboard_error_becomes_error_frame() -> None:
    async def producer(channel: StreamChannel) -> None:
        channel.progress("Resolving", 10)
        raise DepartmentNotFoundException("QA")

    channel = StreamChannel()
    frames = decode(await collect(channel, producer))

    assert frames[-1] == {"type": "error", "error": 'Department "QA" not found'}
    assert [f["type"] for f in frames].count("error") == 1
    assert channel.state is StreamState.ERROR


async def test_unexpected_error_is_reported_generically() -> None:
    async def producer(channel: StreamChannel) -> None:
        raise KeyError("secret internals")

    frames = decode(await collect(StreamChannel(), producer))
    assert frames[-1] == {"type": "error", "error": "Internal server error"}


async def test_producer_returning_without_result_closes_with_error() -> None:
    async def producer(channel: StreamChannel) -> None:
        channel.progress("Nothing", 10)

    frames = decode(await collect(StreamChannel(), producer))
    assert frames[-1]["type"] == "error"


async def test_no_frames_after_terminal_frame() -> None:
    async def producer(channel: StreamChannel) -> None:
        await channel.complete({"ok": True})
        channel.progress("late", 99)

    frames = decode(await collect(StreamChannel(), producer))
    assert frames[-1]["type"] == "complete"
    assert len(frames) == 2


async def test_emit_after_fail_raises() -> None:
    channel = StreamChannel()
    channel.fail("boom")
    assert channel.is_closed
    with pytest.raises(StreamClosedError):
        channel.progress("late", 50)
    with pytest.raises(StreamClosedError):
        channel.fail("again")


async def test_disconnect_cancels_producer() -> None:
    release = asyncio.Event()
    cancelled = asyncio.Event()

    async def producer(channel: StreamChannel) -> None:
        channel.progress("Working", 10)
        try:
            await release.wait()
        except asyncio.CancelledError:
            cancelled.set()
            raise

    channel = StreamChannel()
    stream = channel.run(producer)
    first = await stream.__anext__()
    second = await stream.__anext__()
    await stream.aclose()

    # the producer has already finished unwinding when aclose() returns
    assert cancelled.is_set()
    assert decode([first, second])[1]["progress"] == 10
    assert channel.is_closed
    with pytest.raises(StreamClosedError):
        channel.progress("late", 20)


# -- frames ---------------------------------------------------------------


def test_split_payload_covers_text_exactly() -> None:
    assert split_payload("abcdefg", 3) == ["abc", "def", "g"]
    assert split_payload("", 3) == [""]
    with pytest.raises(ValueError):
        split_payload("abc", 0)


def test_encode_event_wire_form() -> None:
    assert encode_event({"type": "error", "error": "x"}) == 'data: {"type": "error", "error": "x"}\n\n'


# -- reader ---------------------------------------------------------------


async def test_iter_events_skips_comments_and_joins_data_lines() -> None:
    async def lines() -> AsyncIterator[str]:
        for line in [": keepalive", "", "data: {\"a\":", "data: 1}", "", "event: x", "data: {\"b\": 2}"]:
            yield line

    assert [e async for e in iter_events(lines())] == [{"a": 1}, {"b": 2}]


async def test_reader_raises_on_error_frame() -> None:
    events = [encode_event({"type": "progress", "message": "m", "progress": 0}), encode_event({"type": "error", "error": "nope"})]
    with pytest.raises(StreamFailedException) as exc_info:
        await read_dashboard_stream(as_lines(events))
    assert exc_info.value.message == "nope"


async def test_reader_raises_when_stream_ends_early() -> None:
    events = [encode_event({"type": "progress", "message": "m", "progress": 0})]
    with pytest.raises(StreamFailedException):
        await read_dashboard_stream(as_lines(events))


async def test_reader_inline_complete() -> None:
    events = [encode_event({"type": "complete", "data": {"x": 1}, "loadTime": 12})]
    outcome = await read_dashboard_stream(as_lines(events))
    assert (outcome.payload, outcome.load_time_ms, outcome.chunked) == ({"x": 1}, 12, False)


async def test_reader_reports_missing_chunk() -> None:
    events = [
        encode_event({"type": "chunked_start", "totalChunks": 2, "totalSize": 8}),
        encode_event({"type": "chunk", "index": 0, "data": '{"a": 1', "isLast": False}),
        encode_event({"type": "complete", "loadTime": 3}),
    ]
    with pytest.raises(ChunkAssemblyException) as exc_info:
        await read_dashboard_stream(as_lines(events))
    assert exc_info.value.details["missing"] == [1]


class TestChunkAssembler:
    def test_out_of_order_chunks_assemble_by_index(self) -> None:
        assembler = ChunkAssembler(3, 9)
        assembler.add(2, "2]")
        assert assembler.missing == [0, 1]
        assembler.add(0, "[0, ")
        assembler.add(1, "1, ")
        assert assembler.is_complete
        assert assembler.assemble() == [0, 1, 2]

    def test_identical_duplicate_is_ignored(self) -> None:
        assembler = ChunkAssembler(2, 6)
        assembler.add(1, " 2]")
        assembler.add(1, " 2]")
        assembler.add(0, "[1,")
        assert assembler.assemble() == [1, 2]

    def test_size_mismatch(self) -> None:
        assembler = ChunkAssembler(1, 11)
        assembler.add(0, "[0, 1, 2]")
        with pytest.raises(ChunkAssemblyException) as exc_info:
            assembler.assemble()
        assert exc_info.value.details["reason"] == "size mismatch"

    def test_index_out_of_range(self) -> None:
        with pytest.raises(ChunkAssemblyException):
            ChunkAssembler(2, 4).add(2, "x")

    def test_conflicting_duplicate(self) -> None:
        assembler = ChunkAssembler(2, 4)
        assembler.add(0, "ab")
        with pytest.raises(ChunkAssemblyException):
            assembler.add(0, "zz")

    def test_invalid_json(self) -> None:
        assembler = ChunkAssembler(1, 3)
        assembler.add(0, "{x}")
        with pytest.raises(ChunkAssemblyException) as exc_info:
            assembler.assemble()
        assert exc_info.value.details["reason"] == "invalid JSON"

    def test_zero_chunks_rejected(self) -> None:
        with pytest.raises(ChunkAssemblyException):
            ChunkAssembler(0, 0)
