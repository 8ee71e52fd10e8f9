"""Receiving side of the dashboard stream.

Parses `data:` events, reports progress, reassembles chunked payloads by
index and returns the final payload. Reassembly problems raise
ChunkAssemblyException, distinct from a stream that reported an error
(StreamFailedException).
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

from taskboard.api.streaming.frames import FrameType
from taskboard.domain.exceptions import ChunkAssemblyException, StreamFailedException


class ChunkAssembler:
    """Collects indexed chunks and rebuilds the JSON payload.

    Chunks may be added in any order; assemble() concatenates them by
    index once all are present.
    """

    def __init__(self, total_chunks: int, total_size: int) -> None:
        if total_chunks <= 0:
            raise ChunkAssemblyException("invalid chunk count", total_chunks=total_chunks)
        self.total_chunks = total_chunks
        self.total_size = total_size
        self._parts: dict[int, str] = {}

    def add(self, index: int, data: str) -> None:
        if not 0 <= index < self.total_chunks:
            raise ChunkAssemblyException(
                "chunk index out of range", index=index, total_chunks=self.total_chunks
            )
        previous = self._parts.get(index)
        if previous is not None and previous != data:
            raise ChunkAssemblyException("conflicting duplicate chunk", index=index)
        self._parts[index] = data

    @property
    def missing(self) -> list[int]:
        return [i for i in range(self.total_chunks) if i not in self._parts]

    @property
    def is_complete(self) -> bool:
        return not self.missing

    def assemble(self) -> Any:
        """Return the parsed payload.

        Raises:
            ChunkAssemblyException: Missing chunks, size mismatch, or invalid JSON.
        """
        missing = self.missing
        if missing:
            raise ChunkAssemblyException("missing chunks", missing=missing)
        text = "".join(self._parts[i] for i in range(self.total_chunks))
        if len(text) != self.total_size:
            raise ChunkAssemblyException(
                "size mismatch", expected=self.total_size, actual=len(text)
            )
        try:
            return json.loads(text)
        except ValueError as e:
            raise ChunkAssemblyException("invalid JSON", error=str(e)) from e


async def iter_events(lines: AsyncIterable[str]) -> AsyncIterator[dict[str, Any]]:
    """Yield decoded JSON envelopes from server-sent event lines.

    Multiple data lines of one event are joined with newlines; comment
    lines and other fields are ignored.
    """
    data: list[str] = []
    async for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            if data:
                yield json.loads("\n".join(data))
                data = []
            continue
        if line.startswith("data:"):
            data.append(line[5:].lstrip(" "))
    if data:
        yield json.loads("\n".join(data))


@dataclass
class StreamOutcome:
    payload: Any
    load_time_ms: int | None
    chunked: bool


async def read_dashboard_stream(
    lines: AsyncIterable[str],
    on_progress: Callable[[str, int], None] | None = None,
) -> StreamOutcome:
    """Consume a dashboard stream until its terminal frame.

    Args:
        lines: Text lines of the response body (e.g. httpx aiter_lines()).
        on_progress: Optional callback for progress frames.

    Raises:
        StreamFailedException: Error frame received, or no terminal frame.
        ChunkAssemblyException: The chunked payload could not be rebuilt.
    """
    assembler: ChunkAssembler | None = None
    async for frame in iter_events(lines):
        kind = frame.get("type")
        if kind == FrameType.PROGRESS.value:
            if on_progress is not None:
                on_progress(frame.get("message", ""), int(frame.get("progress", 0)))
        elif kind == FrameType.CHUNKED_START.value:
            assembler = ChunkAssembler(int(frame["totalChunks"]), int(frame["totalSize"]))
        elif kind == FrameType.CHUNK.value:
            if assembler is None:
                raise ChunkAssemblyException("chunk received before chunked_start")
            assembler.add(int(frame["index"]), frame["data"])
        elif kind == FrameType.COMPLETE.value:
            load_time = frame.get("loadTime")
            if "data" in frame:
                return StreamOutcome(frame["data"], load_time, chunked=False)
            if assembler is None:
                raise ChunkAssemblyException("complete frame without data or chunks")
            return StreamOutcome(assembler.assemble(), load_time, chunked=True)
        elif kind == FrameType.ERROR.value:
            raise StreamFailedException(frame.get("error") or "Unknown stream error")
    raise StreamFailedException("Stream ended before a terminal frame")
