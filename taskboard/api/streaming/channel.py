"""Ordered server-to-client event channel with progress and chunked delivery.

A StreamChannel moves through CONNECTING -> PROGRESS* -> COMPLETE | ERROR.
The producer (the dashboard pipeline) runs as its own task and writes
frames into a queue; the HTTP response drains the queue in order. When
the client disconnects the response generator is closed, which cancels
the producer; any later write raises StreamClosedError, which ends the
producer quietly.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from enum import Enum
from typing import Any

from taskboard.api.streaming.frames import (
    chunk_frame,
    chunked_start_frame,
    complete_frame,
    encode_event,
    error_frame,
    progress_frame,
    serialize_payload,
    split_payload,
)
from taskboard.core.config import Settings
from taskboard.domain.exceptions import StreamClosedError, TaskboardException

logger = logging.getLogger(__name__)

# Fallback message for errors that carry no user-facing text
INTERNAL_ERROR_MESSAGE = "Internal server error"


class StreamState(str, Enum):
    CONNECTING = "connecting"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


_TERMINAL = frozenset({StreamState.COMPLETE, StreamState.ERROR})

Producer = Callable[["StreamChannel"], Awaitable[None]]


class StreamChannel:
    """One server-push stream: progress frames, then exactly one terminal frame."""

    def __init__(
        self,
        *,
        chunk_threshold: int = 50_000,
        chunk_size: int = 32_000,
        chunk_delay_ms: int = 50,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the channel.

        Args:
            chunk_threshold: Payloads of at least this many characters are chunked.
            chunk_size: Characters per chunk frame.
            chunk_delay_ms: Pause between consecutive chunk frames.
            sleep: Awaitable sleep (injectable for tests).
            clock: Seconds source for loadTime.
        """
        self.chunk_threshold = chunk_threshold
        self.chunk_size = chunk_size
        self.chunk_delay_ms = chunk_delay_ms
        self._sleep = sleep
        self._clock = clock
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._started = clock()
        self._last_percent = 0
        self._disconnected = False
        self.state = StreamState.CONNECTING

    @classmethod
    def from_settings(cls, settings: Settings) -> StreamChannel:
        return cls(
            chunk_threshold=settings.stream_chunk_threshold,
            chunk_size=settings.stream_chunk_size,
            chunk_delay_ms=settings.stream_chunk_delay_ms,
        )

    @property
    def is_closed(self) -> bool:
        return self.state in _TERMINAL or self._disconnected

    def _emit(self, frame: dict[str, Any]) -> None:
        if self._disconnected:
            raise StreamClosedError("disconnected")
        if self.state in _TERMINAL:
            raise StreamClosedError(self.state.value)
        self._queue.put_nowait(encode_event(frame))

    def _load_time_ms(self) -> int:
        return int((self._clock() - self._started) * 1000)

    def progress(self, message: str, percent: int) -> None:
        """Emit a progress frame. Percentages never decrease and stay within 0..100."""
        percent = max(self._last_percent, min(100, int(percent)))
        self._emit(progress_frame(message, percent))
        self._last_percent = percent
        self.state = StreamState.PROGRESS

    async def complete(self, payload: Any) -> None:
        """Deliver payload and close the stream.

        Small payloads go inline in the complete frame. Larger ones are
        announced with chunked_start, sent as indexed chunks in order with
        a pause between them, and followed by a complete frame without data.
        """
        text = serialize_payload(payload)
        if len(text) < self.chunk_threshold:
            self._emit(complete_frame(self._load_time_ms(), data=payload))
            self.state = StreamState.COMPLETE
            return

        chunks = split_payload(text, self.chunk_size)
        logger.info(
            "Streaming %s characters in %s chunks of up to %s",
            len(text),
            len(chunks),
            self.chunk_size,
        )
        self._emit(chunked_start_frame(len(chunks), len(text)))
        last = len(chunks) - 1
        for index, data in enumerate(chunks):
            self._emit(chunk_frame(index, data, index == last))
            if index < last and self.chunk_delay_ms:
                await self._sleep(self.chunk_delay_ms / 1000)
        self._emit(complete_frame(self._load_time_ms()))
        self.state = StreamState.COMPLETE

    def fail(self, message: str) -> None:
        """Emit the error frame and close the stream."""
        self._emit(error_frame(message))
        self.state = StreamState.ERROR

    async def _produce(self, producer: Producer) -> None:
        try:
            await producer(self)
            if not self.is_closed:
                self.fail("Stream ended without a result")
        except StreamClosedError as exc:
            logger.info("Stream producer stopped: %s", exc.message)
        except TaskboardException as exc:
            logger.warning("Dashboard stream failed: %s", exc.message)
            with contextlib.suppress(StreamClosedError):
                self.fail(exc.message)
        except Exception:
            logger.exception("Unhandled error in dashboard stream")
            with contextlib.suppress(StreamClosedError):
                self.fail(INTERNAL_ERROR_MESSAGE)
        finally:
            self._queue.put_nowait(None)

    async def run(self, producer: Producer) -> AsyncIterator[str]:
        """Start producer and yield encoded frames until the stream closes.

        The initial 0% progress frame is emitted before the producer starts.
        Closing this generator early (client gone) cancels the producer.
        """
        self.progress("Starting data load", 0)
        task = asyncio.create_task(self._produce(producer))
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    break
                yield event
        finally:
            if not task.done():
                self._disconnected = True
                task.cancel()
                # wait() leaves the producer's CancelledError inside the task
                await asyncio.wait({task})
                logger.info("Client disconnected; dashboard stream producer cancelled")
