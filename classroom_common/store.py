"""In-memory booking store: the single owner of every collection.

The store is a plain object built by the application factory and handed to
request handlers through a dependency, so tests can create isolated
instances. Nothing is persisted; state lives as long as the process.

Reads hand out deep copies. All changes go through the mutation methods,
which are atomic per call. Conflict checking is not done here; see
:mod:`classroom_common.reservations` for the check-and-commit workflow.
"""
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import ExitStack, contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from .errors import NotFoundError
from .events import Event, EventChannel, Listener
from .models import (
    Booking,
    BookingStatus,
    Equipment,
    NotificationItem,
    NotificationKind,
    RecurringBooking,
    Room,
    User,
    default_status_for,
    now_ms,
)
from .schemas import BookingCreate, EquipmentCreate, RecurringBookingCreate, RoomCreate

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _new_id(prefix: str, taken: Dict[str, Any]) -> str:
    while True:
        candidate = f"{prefix}-{uuid.uuid4().hex[:8]}"
        if candidate not in taken:
            return candidate


def _merge(model: M, patch: Dict[str, Any]) -> M:
    data = model.model_dump()
    data.update({key: value for key, value in patch.items() if key != "id"})
    return type(model).model_validate(data)


class BookingStore:
    def __init__(self, channel: Optional[EventChannel] = None) -> None:
        self.channel = channel if channel is not None else EventChannel()
        self._lock = threading.RLock()
        # room id -> [lock, holders and waiters]
        self._room_locks: Dict[str, List[Any]] = {}
        self._rooms: Dict[str, Room] = {}
        self._bookings: Dict[str, Booking] = {}
        self._notifications: List[NotificationItem] = []
        self._users: Dict[str, User] = {}
        self._recurring: Dict[str, RecurringBooking] = {}
        self._equipment: Dict[str, Equipment] = {}

    # -- pub/sub ---------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.channel.subscribe(listener)

    def broadcast(self, event: Event) -> None:
        self.channel.broadcast(event)

    @contextmanager
    def room_lock(self, *room_ids: str) -> Iterator[None]:
        """Hold the locks of the given rooms, taken in sorted order.

        A room's lock lives only while some caller holds or waits on it, so
        the map does not grow with every room id ever booked.
        """

        keys = sorted(set(room_ids))
        with self._lock:
            entries = [self._room_locks.setdefault(room_id, [threading.Lock(), 0]) for room_id in keys]
            for entry in entries:
                entry[1] += 1
        try:
            with ExitStack() as stack:
                for lock, _ in entries:
                    stack.enter_context(lock)
                yield
        finally:
            with self._lock:
                for room_id, entry in zip(keys, entries):
                    entry[1] -= 1
                    if entry[1] == 0:
                        del self._room_locks[room_id]

    # -- bookings --------------------------------------------------------

    def insert_booking(self, candidate: BookingCreate) -> Booking:
        data = candidate.model_dump()
        if data.get("status") is None:
            data["status"] = default_status_for(candidate.role)
        with self._lock:
            booking = Booking(id=_new_id("b", self._bookings), created_at=now_ms(), **data)
            self._bookings[booking.id] = booking
        logger.info("Inserted booking %s for room %s (%s)", booking.id, booking.room_id, booking.status.value)
        return booking.model_copy(deep=True)

    def update_booking(self, booking_id: str, patch: Dict[str, Any]) -> Booking:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                raise NotFoundError("Booking", booking_id)
            updated = _merge(current, patch)
            self._bookings[booking_id] = updated
        logger.info("Updated booking %s fields=%s", booking_id, sorted(patch))
        return updated.model_copy(deep=True)

    def delete_booking(self, booking_id: str) -> Booking:
        with self._lock:
            removed = self._bookings.pop(booking_id, None)
        if removed is None:
            raise NotFoundError("Booking", booking_id)
        logger.info("Deleted booking %s", booking_id)
        return removed

    def get_booking(self, booking_id: str) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None:
                raise NotFoundError("Booking", booking_id)
            return booking.model_copy(deep=True)

    def list_bookings(
        self,
        room_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
        from_ms: Optional[int] = None,
        to_ms: Optional[int] = None,
        q: Optional[str] = None,
    ) -> List[Booking]:
        """Bookings in insertion order, optionally filtered.

        ``from_ms`` keeps bookings ending at or after it, ``to_ms`` keeps
        bookings starting at or before it, ``q`` matches title or requester.
        """

        with self._lock:
            bookings = [booking.model_copy(deep=True) for booking in self._bookings.values()]
        if room_id:
            bookings = [b for b in bookings if b.room_id == room_id]
        if status:
            bookings = [b for b in bookings if b.status == status]
        if from_ms:
            bookings = [b for b in bookings if b.end >= from_ms]
        if to_ms:
            bookings = [b for b in bookings if b.start <= to_ms]
        if q:
            needle = q.lower()
            bookings = [b for b in bookings if needle in b.title.lower() or needle in b.requester.lower()]
        return bookings

    # -- rooms -----------------------------------------------------------

    def insert_room(self, room_in: RoomCreate) -> Room:
        data = room_in.model_dump(exclude={"id"})
        with self._lock:
            room_id = room_in.id or _new_id("r", self._rooms)
            if room_id in self._rooms:
                raise ValueError(f"Room {room_id!r} already exists")
            room = Room(id=room_id, **data)
            self._rooms[room.id] = room
        logger.info("Inserted room %s", room.id)
        return room.model_copy(deep=True)

    def get_room(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                raise NotFoundError("Room", room_id)
            return room.model_copy(deep=True)

    def update_room(self, room_id: str, patch: Dict[str, Any]) -> Room:
        with self._lock:
            current = self._rooms.get(room_id)
            if current is None:
                raise NotFoundError("Room", room_id)
            updated = _merge(current, patch)
            self._rooms[room_id] = updated
        return updated.model_copy(deep=True)

    def delete_room(self, room_id: str) -> Room:
        with self._lock:
            removed = self._rooms.pop(room_id, None)
        if removed is None:
            raise NotFoundError("Room", room_id)
        logger.info("Deleted room %s", room_id)
        return removed

    def list_rooms(
        self,
        building: Optional[str] = None,
        capacity: Optional[int] = None,
        equipment: Optional[Sequence[str]] = None,
    ) -> List[Room]:
        with self._lock:
            rooms = [room.model_copy(deep=True) for room in self._rooms.values()]
        if building:
            rooms = [r for r in rooms if r.building == building]
        if capacity:
            rooms = [r for r in rooms if r.capacity >= capacity]
        if equipment:
            wanted = set(equipment)
            rooms = [r for r in rooms if wanted.issubset(r.equipment)]
        return rooms

    # -- notifications ---------------------------------------------------

    def add_notification(self, message: str, kind: NotificationKind = NotificationKind.SYSTEM) -> NotificationItem:
        with self._lock:
            taken = {item.id: item for item in self._notifications}
            notification = NotificationItem(id=_new_id("n", taken), message=message, kind=kind)
            self._notifications.insert(0, notification)
        return notification.model_copy(deep=True)

    def list_notifications(self) -> List[NotificationItem]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._notifications]

    def mark_notifications(self, ids: Sequence[str], read: bool = True) -> int:
        wanted = set(ids)
        changed = 0
        with self._lock:
            for item in self._notifications:
                if item.id in wanted:
                    item.read = read
                    changed += 1
        return changed

    # -- equipment -------------------------------------------------------

    def insert_equipment(self, equipment_in: EquipmentCreate) -> Equipment:
        with self._lock:
            item = Equipment(id=_new_id("eq", self._equipment), **equipment_in.model_dump())
            self._equipment[item.id] = item
        return item.model_copy(deep=True)

    def get_equipment(self, equipment_id: str) -> Equipment:
        with self._lock:
            item = self._equipment.get(equipment_id)
            if item is None:
                raise NotFoundError("Equipment", equipment_id)
            return item.model_copy(deep=True)

    def update_equipment(self, equipment_id: str, patch: Dict[str, Any]) -> Equipment:
        with self._lock:
            current = self._equipment.get(equipment_id)
            if current is None:
                raise NotFoundError("Equipment", equipment_id)
            updated = _merge(current, patch)
            self._equipment[equipment_id] = updated
        return updated.model_copy(deep=True)

    def delete_equipment(self, equipment_id: str) -> Equipment:
        with self._lock:
            removed = self._equipment.pop(equipment_id, None)
        if removed is None:
            raise NotFoundError("Equipment", equipment_id)
        return removed

    def list_equipment(self) -> List[Equipment]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._equipment.values()]

    # -- recurring templates and users -----------------------------------

    def add_recurring(self, template_in: RecurringBookingCreate) -> RecurringBooking:
        with self._lock:
            template = RecurringBooking(id=_new_id("recurring", self._recurring), **template_in.model_dump())
            self._recurring[template.id] = template
        return template.model_copy(deep=True)

    def list_recurring(self) -> List[RecurringBooking]:
        with self._lock:
            return [item.model_copy(deep=True) for item in self._recurring.values()]

    def insert_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user.model_copy(deep=True)
        return user

    def list_users(self) -> List[User]:
        with self._lock:
            return [user.model_copy(deep=True) for user in self._users.values()]

    def load(
        self,
        rooms: Sequence[Room] = (),
        bookings: Sequence[Booking] = (),
        notifications: Sequence[NotificationItem] = (),
        users: Sequence[User] = (),
        equipment: Sequence[Equipment] = (),
    ) -> None:
        """Bulk-load ready-made records, keeping their ids (seed data)."""

        with self._lock:
            self._rooms.update((room.id, room) for room in rooms)
            self._bookings.update((booking.id, booking) for booking in bookings)
            self._notifications[:0] = list(notifications)
            self._users.update((user.id, user) for user in users)
            self._equipment.update((item.id, item) for item in equipment)
