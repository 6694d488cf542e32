"""Stream Helpers — turn a service's subscription feed into SSE lines.

Invariants:
    - First line is always the current snapshot, so a client never waits for a change
    - Snapshots are forwarded in publish order (queue per connection, FIFO)
    - The subscription is removed when the client disconnects or the generator closes

Design Decisions:
    - Listener is queue.put_nowait: the publisher stays synchronous and never awaits a
      slow client
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SSE headers prevent proxy/browser buffering of streamed events
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def sse_line(event: dict) -> str:
    """Format event as SSE data line."""
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


async def stream_snapshots(
    subscribe: Callable[[Callable[[T], None]], Callable[[], None]],
    current: Callable[[], T],
    to_event: Callable[[T], dict],
    stop_when: Callable[[T], bool] | None = None,
) -> AsyncIterator[str]:
    """Yield SSE lines for the current snapshot and every later one.

    stop_when ends the stream after yielding the first snapshot it accepts.
    """
    queue: asyncio.Queue[T] = asyncio.Queue()
    unsubscribe = subscribe(queue.put_nowait)
    try:
        value = current()
        while True:
            yield sse_line(to_event(value))
            if stop_when is not None and stop_when(value):
                return
            value = await queue.get()
    except asyncio.CancelledError:
        logger.info("Client disconnected from status stream")
        raise
    finally:
        unsubscribe()
