"""Domain errors raised by the store and the reservation workflow."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from .models import Booking, TimeWindow


class NotFoundError(LookupError):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id!r} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidIntervalError(ValueError):
    def __init__(self, start: int, end: int) -> None:
        super().__init__("End time must be after start time")
        self.start = start
        self.end = end


class BookingConflictError(Exception):
    """The requested window overlaps active bookings in the same room."""

    def __init__(self, conflicts: Sequence["Booking"], alternatives: Sequence["TimeWindow"] = ()) -> None:
        super().__init__("Room already booked for that slot")
        self.conflicts: List["Booking"] = list(conflicts)
        self.alternatives: List["TimeWindow"] = list(alternatives)


class RoomInUseError(Exception):
    def __init__(self, room_id: str, booking_ids: Sequence[str]) -> None:
        super().__init__(f"Room {room_id!r} still has active bookings")
        self.room_id = room_id
        self.booking_ids = list(booking_ids)
