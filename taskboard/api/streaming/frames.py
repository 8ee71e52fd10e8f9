"""Server-push frame format.

Each event is one `data: <json>\\n\\n` line carrying an envelope with a
`type` discriminator:

    progress       {message, progress}
    chunked_start  {totalChunks, totalSize}
    chunk          {index, data, isLast}
    complete       {data?, loadTime}    data only for non-chunked delivery
    error          {error}

Payloads are serialized with ASCII escaping, so sizes counted in
characters equal sizes in bytes on the wire.
"""

import json
from enum import Enum
from typing import Any


class FrameType(str, Enum):
    PROGRESS = "progress"
    CHUNKED_START = "chunked_start"
    CHUNK = "chunk"
    COMPLETE = "complete"
    ERROR = "error"


def progress_frame(message: str, percent: int) -> dict[str, Any]:
    return {"type": FrameType.PROGRESS.value, "message": message, "progress": percent}


def chunked_start_frame(total_chunks: int, total_size: int) -> dict[str, Any]:
    return {
        "type": FrameType.CHUNKED_START.value,
        "totalChunks": total_chunks,
        "totalSize": total_size,
    }


def chunk_frame(index: int, data: str, is_last: bool) -> dict[str, Any]:
    return {"type": FrameType.CHUNK.value, "index": index, "data": data, "isLast": is_last}


def complete_frame(load_time_ms: int, data: Any = None) -> dict[str, Any]:
    """Terminal success frame; data is omitted when the payload went out in chunks."""
    frame: dict[str, Any] = {"type": FrameType.COMPLETE.value, "loadTime": load_time_ms}
    if data is not None:
        frame["data"] = data
    return frame


def error_frame(message: str) -> dict[str, Any]:
    return {"type": FrameType.ERROR.value, "error": message}


def serialize_payload(payload: Any) -> str:
    """JSON text of a payload as it is measured and chunked."""
    return json.dumps(payload)


def encode_event(frame: dict[str, Any]) -> str:
    """Wire form of one frame."""
    return f"data: {json.dumps(frame)}\n\n"


def split_payload(text: str, chunk_size: int) -> list[str]:
    """Split text into consecutive pieces of at most chunk_size characters."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)] or [""]
