"""TTL cache for room status lookups, invalidated by store events."""
from __future__ import annotations

from typing import Any, Dict, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class RoomStatusCache(Generic[T]):
    """Caches one value per room id for ``ttl`` seconds.

    Registered as a store listener, it drops a room's entry whenever a
    booking for that room, or the room itself, changes.
    """

    def __init__(self, ttl: int, maxsize: int = 256) -> None:
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get(self, room_id: str) -> Optional[T]:
        return self._cache.get(room_id)

    def set(self, room_id: str, value: T) -> None:
        self._cache[room_id] = value

    def invalidate(self, room_id: str) -> None:
        self._cache.pop(room_id, None)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def handle_event(self, event: Dict[str, Any]) -> None:
        event_type = event.get("type", "")
        if event_type.startswith("booking:"):
            self.invalidate(event["booking"]["room_id"])
            # a booking moved to another room frees the one it left
            if event.get("previous_room_id"):
                self.invalidate(event["previous_room_id"])
        elif event_type.startswith("room:"):
            self.invalidate(event["room"]["id"])
        elif event_type == "recurring:created":
            self.invalidate(event["recurring"]["room_id"])
