"""Event sinks for decoded frames.

The framer only needs an object with emit(event, payload). EventEmitter fans
events out to registered handlers; CollectingSink just records them.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Tuple

from xbee_io.constants import EVENT_DATA, EVENT_ERROR

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventEmitter:
    """Minimal publish/subscribe sink.

    Usage:
      em = EventEmitter()
      em.on("data", handle_frame)
      framer.ingest(em, chunk)
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> Handler:
        self._handlers[event].append(handler)
        return handler

    def off(self, event: str, handler: Handler) -> None:
        try:
            self._handlers[event].remove(handler)
        except ValueError:
            pass

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def emit(self, event: str, payload: Any) -> None:
        """Call every handler registered for `event`.

        A handler that raises is logged and skipped so the remaining handlers
        (and the framer driving this sink) keep running.
        """
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"Handler {handler!r} for event '{event}' failed: {e}", exc_info=True)


class CollectingSink:
    """Sink that stores every event it receives, in order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def emit(self, event: str, payload: Any) -> None:
        self.events.append((event, payload))

    @property
    def records(self) -> List[Any]:
        return [p for e, p in self.events if e == EVENT_DATA]

    @property
    def errors(self) -> List[Any]:
        return [p for e, p in self.events if e == EVENT_ERROR]

    def clear(self) -> None:
        self.events.clear()
