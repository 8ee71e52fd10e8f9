"""Server-push delivery: frame format, producer channel and receiving reader."""

from taskboard.api.streaming.channel import StreamChannel, StreamState
from taskboard.api.streaming.frames import FrameType, encode_event, split_payload
from taskboard.api.streaming.reader import (
    ChunkAssembler,
    StreamOutcome,
    iter_events,
    read_dashboard_stream,
)

__all__ = [
    "ChunkAssembler",
    "FrameType",
    "StreamChannel",
    "StreamOutcome",
    "StreamState",
    "encode_event",
    "iter_events",
    "read_dashboard_stream",
    "split_payload",
]
