"""Synchronous publish/subscribe channel for store change events."""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Tuple

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Event = Dict[str, Any]
Listener = Callable[[Event], None]


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    return value


def make_event(event_type: str, **payload: Any) -> Event:
    """Build a JSON-ready event such as ``{"type": "booking:created", "booking": {...}}``."""

    event: Event = {"type": event_type}
    for key, value in payload.items():
        event[key] = _dump(value)
    return event


class EventChannel:
    """Delivers every broadcast to the listeners registered at that moment.

    Delivery is synchronous and follows registration order. A failing
    listener is logged and skipped; the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._listeners: List[Tuple[int, Listener]] = []
        self._tokens = itertools.count()
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        token = next(self._tokens)
        with self._lock:
            self._listeners.append((token, listener))

        def unsubscribe() -> None:
            with self._lock:
                self._listeners = [entry for entry in self._listeners if entry[0] != token]

        return unsubscribe

    def broadcast(self, event: Event) -> None:
        with self._lock:
            listeners = [listener for _, listener in self._listeners]
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s event", listener, event.get("type"))

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
