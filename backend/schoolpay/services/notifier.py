"""Notifier — ordered, synchronous fan-out of committed state to subscribers.

Invariants:
    - publish() delivers to every listener before returning, in subscription order
    - Values are delivered in the order they were published (no reordering, no coalescing)
    - A failing listener is logged and skipped; it never blocks the others or the publisher
    - unsubscribe is idempotent

Design Decisions:
    - Synchronous callbacks over asyncio.Queue fan-out: the publisher commits and notifies
      in the same step, so no consumer can observe a stale value after a newer commit.
      Async consumers (SSE) wrap a queue in a listener themselves.
"""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Notifier(Generic[T]):
    """Subscription list for one stream of state snapshots."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register listener; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                logger.error(
                    f"{self.name} listener failed: {e}", exc_info=True,
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
