"""Progress channels — per-request buffered narration with one live subscriber.

The pipeline calls :meth:`ProgressRegistry.send` at fixed checkpoints; a
Server-Sent Events consumer may attach before, during or never.  Events are
kept in a bounded ring so a late subscriber gets the full history replayed.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, Union

from commit_digest.domain.entities import ProgressEvent

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 2000

Progress = Callable[[str], None]


def silent(_message: str) -> None:
    """A :data:`Progress` sink that discards every line."""


class ProgressMarker(str, Enum):
    """Control markers delivered alongside ordinary events."""

    READY = "ready"
    DONE = "done"


StreamItem = Union[ProgressEvent, ProgressMarker]


def _now_ms() -> int:
    return int(time.time() * 1000)


class ProgressSubscription:
    """The live end of a channel, consumed with ``async for``.

    Iteration stops after the ``DONE`` marker.  A subscription that was
    replaced by a newer one simply stops receiving items.
    """

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        self._queue: asyncio.Queue[StreamItem] = asyncio.Queue()

    def push(self, item: StreamItem) -> None:
        self._queue.put_nowait(item)

    async def get(self) -> StreamItem:
        return await self._queue.get()

    def __aiter__(self) -> AsyncIterator[StreamItem]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[StreamItem]:
        while True:
            item = await self._queue.get()
            yield item
            if item is ProgressMarker.DONE:
                return


@dataclass
class _Channel:
    buffer: deque[ProgressEvent]
    subscriber: ProgressSubscription | None = field(default=None)


class ProgressRegistry:
    """Process-wide map of request id → progress channel.

    Channels are created lazily by the first ``send`` or ``subscribe`` and
    removed by ``complete``, or by ``unsubscribe`` when nothing was sent.  Only the map itself is shared between runs, so
    it is the only thing guarded by the lock.
    """

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._lock = threading.Lock()
        self._channels: dict[str, _Channel] = {}
        self._buffer_size = buffer_size

    def _channel(self, request_id: str) -> _Channel:
        channel = self._channels.get(request_id)
        if channel is None:
            channel = _Channel(buffer=deque(maxlen=self._buffer_size))
            self._channels[request_id] = channel
        return channel

    def send(self, request_id: str | None, message: str) -> None:
        """Buffer *message* and push it to the live subscriber, if any."""
        if not request_id:
            return
        event = ProgressEvent(timestamp=_now_ms(), message=str(message))
        with self._lock:
            channel = self._channel(request_id)
            channel.buffer.append(event)
            subscriber = channel.subscriber
        if subscriber is not None:
            subscriber.push(event)

    def subscribe(self, request_id: str) -> ProgressSubscription:
        """Attach a new live subscriber, replacing any previous one.

        The buffered history is replayed first, followed by ``READY``.
        """
        subscription = ProgressSubscription(request_id)
        with self._lock:
            channel = self._channel(request_id)
            if channel.subscriber is not None:
                logger.debug("Replacing progress subscriber for %s", request_id)
            channel.subscriber = subscription
            for event in channel.buffer:
                subscription.push(event)
            subscription.push(ProgressMarker.READY)
        return subscription

    def unsubscribe(self, request_id: str, subscription: ProgressSubscription) -> None:
        """Detach *subscription* if it is still the live one.

        A channel left with neither a subscriber nor buffered events is
        dropped; a later ``send`` recreates it.
        """
        with self._lock:
            channel = self._channels.get(request_id)
            if channel is None or channel.subscriber is not subscription:
                return
            channel.subscriber = None
            if not channel.buffer:
                del self._channels[request_id]

    def complete(self, request_id: str | None) -> None:
        """Send ``DONE`` to the live subscriber and drop the channel."""
        if not request_id:
            return
        with self._lock:
            channel = self._channels.pop(request_id, None)
        if channel is not None and channel.subscriber is not None:
            channel.subscriber.push(ProgressMarker.DONE)

    def buffered(self, request_id: str) -> list[ProgressEvent]:
        """Return a snapshot of the channel's buffer (empty if unknown)."""
        with self._lock:
            channel = self._channels.get(request_id)
            return list(channel.buffer) if channel else []

    def __contains__(self, request_id: object) -> bool:
        with self._lock:
            return request_id in self._channels


class ProgressNarrator:
    """Callable bound to one run: ``progress("Listing commits…")``."""

    def __init__(self, registry: ProgressRegistry, request_id: str | None) -> None:
        self._registry = registry
        self.request_id = request_id

    def __call__(self, message: str) -> None:
        logger.info("[%s] %s", self.request_id or "-", message)
        self._registry.send(self.request_id, message)

    def complete(self) -> None:
        self._registry.complete(self.request_id)
