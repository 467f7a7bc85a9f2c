"""Observer callbacks with deferred delivery.

Graphs, networks and the registry report changes through an
EventEmitter. Callbacks receive the event kind followed by its payload.

Events emitted inside ``emitter.deferred()`` are queued per thread and
delivered when the outermost ``deferred()`` block exits. Owners wrap
their locked sections in ``deferred()`` so that callbacks always run
after the lock has been released and may call back into the owner.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Tuple

EventCallback = Callable[..., None]


class EventEmitter:
    """Thread-safe list of subscribers with per-thread deferred delivery."""

    def __init__(self, name: str = "events") -> None:
        self._subscribers: List[EventCallback] = []
        self._lock = threading.Lock()
        self._local = threading.local()
        self._logger = logging.getLogger(f"{__name__}.{name}")

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback.

        Args:
            callback: Called as ``callback(event, *payload)``.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: EventCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _pending(self) -> List[Tuple[Any, Tuple[Any, ...]]]:
        pending = getattr(self._local, "pending", None)
        if pending is None:
            pending = []
            self._local.pending = pending
            self._local.depth = 0
        return pending

    @contextmanager
    def deferred(self) -> Iterator[None]:
        """Queue events emitted in this block until the outermost exit."""
        pending = self._pending()
        self._local.depth += 1
        try:
            yield
        finally:
            self._local.depth -= 1
            if self._local.depth == 0 and pending:
                batch = list(pending)
                pending.clear()
                self._dispatch(batch)

    def emit(self, event: Any, *payload: Any) -> None:
        """Deliver an event, or queue it inside a deferred block."""
        pending = self._pending()
        if self._local.depth > 0:
            pending.append((event, payload))
            return
        self._dispatch([(event, payload)])

    def _dispatch(self, batch: List[Tuple[Any, Tuple[Any, ...]]]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        if not subscribers:
            return
        for event, payload in batch:
            self._logger.debug("Dispatching event", extra={"event": str(event)})
            for callback in subscribers:
                callback(event, *payload)
