"""Unit tests for the room status cache."""
import time

from classroom_common.cache import RoomStatusCache


class TestRoomStatusCache:
    """Test the TTL cache and its event-driven invalidation."""

    def test_cache_set_and_get(self):
        cache = RoomStatusCache[str](ttl=60)

        cache.set("r-101", "available")
        assert cache.get("r-101") == "available"

    def test_cache_get_missing_room(self):
        cache = RoomStatusCache[str](ttl=60)

        assert cache.get("r-404") is None

    def test_cache_ttl_expiration(self):
        """Values expire after the TTL."""
        cache = RoomStatusCache[str](ttl=1)

        cache.set("r-101", "booked")
        time.sleep(1.1)

        assert cache.get("r-101") is None

    def test_invalidate_missing_room_is_silent(self):
        cache = RoomStatusCache[str](ttl=60)

        cache.invalidate("r-404")

    def test_booking_event_invalidates_its_room_only(self):
        cache = RoomStatusCache[str](ttl=60)
        cache.set("r-101", "available")
        cache.set("r-102", "available")

        cache.handle_event({"type": "booking:created", "booking": {"id": "b-1", "room_id": "r-101"}})

        assert cache.get("r-101") is None
        assert cache.get("r-102") == "available"

    def test_moved_booking_invalidates_previous_room(self):
        cache = RoomStatusCache[str](ttl=60)
        cache.set("r-101", "booked")
        cache.set("r-102", "available")
        cache.set("r-103", "available")

        cache.handle_event(
            {"type": "booking:updated", "booking": {"id": "b-1", "room_id": "r-102"}, "previous_room_id": "r-101"}
        )

        assert cache.get("r-101") is None
        assert cache.get("r-102") is None
        assert cache.get("r-103") == "available"

    def test_room_and_recurring_events_invalidate(self):
        cache = RoomStatusCache[str](ttl=60)
        cache.set("r-101", "available")
        cache.set("lab-1", "available")

        cache.handle_event({"type": "room:updated", "room": {"id": "r-101"}})
        cache.handle_event({"type": "recurring:created", "recurring": {"room_id": "lab-1"}, "bookings": []})

        assert len(cache) == 0

    def test_unrelated_events_are_ignored(self):
        cache = RoomStatusCache[str](ttl=60)
        cache.set("r-101", "available")

        cache.handle_event({"type": "notification", "notification": {"id": "n-1"}})
        cache.handle_event({"type": "equipment:created", "equipment": {"id": "eq-1"}})

        assert cache.get("r-101") == "available"

    def test_cache_maxsize(self):
        cache = RoomStatusCache[str](ttl=60, maxsize=2)

        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("c", "3")

        assert len(cache) == 2
        assert cache.get("c") == "3"
