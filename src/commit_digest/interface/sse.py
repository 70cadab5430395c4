"""Server-Sent Events framing for progress streams."""

from __future__ import annotations

import json
import time

from commit_digest.domain.entities import ProgressEvent
from commit_digest.services.progress import ProgressMarker, StreamItem


def _now_ms() -> int:
    return int(time.time() * 1000)


def format_item(item: StreamItem) -> str:
    """Frame one stream item: ``data:`` for events, named events for markers."""
    if isinstance(item, ProgressEvent):
        payload = json.dumps({"ts": item.timestamp, "msg": item.message})
        return f"data: {payload}\n\n"
    payload = json.dumps({"ts": _now_ms()})
    return f"event: {item.value}\ndata: {payload}\n\n"


def format_ping() -> str:
    """An SSE comment line that keeps idle proxies from closing the stream."""
    return f": ping {_now_ms()}\n\n"
