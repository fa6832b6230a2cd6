"""Unit tests for the in-memory booking store and its event channel."""
import threading

import pytest

from classroom_common import reservations
from classroom_common.errors import NotFoundError
from classroom_common.events import EventChannel, make_event
from classroom_common.models import BookingStatus, NotificationKind, RoleEnum
from classroom_common.schemas import BookingCreate, EquipmentCreate, RoomCreate
from classroom_common.store import BookingStore


def booking_request(at, role=RoleEnum.STUDENT, **overrides):
    data = {"room_id": "r-101", "title": "Study group", "requester": "John Smith", "role": role}
    data.update(overrides)
    data.setdefault("start", at(10))
    data.setdefault("end", at(11))
    return BookingCreate(**data)


class TestBookingPrimitives:
    def test_insert_assigns_id_and_defaults(self, store, at):
        booking = store.insert_booking(booking_request(at))

        assert booking.id.startswith("b-")
        assert booking.status == BookingStatus.PENDING
        assert booking.created_at > 0
        assert store.get_booking(booking.id) == booking

    @pytest.mark.parametrize("role", [RoleEnum.TEACHER, RoleEnum.ADMIN])
    def test_staff_bookings_are_approved_by_default(self, store, at, role):
        assert store.insert_booking(booking_request(at, role=role)).status == BookingStatus.APPROVED

    def test_explicit_status_wins_over_role_default(self, store, at):
        booking = store.insert_booking(booking_request(at, status=BookingStatus.APPROVED))

        assert booking.status == BookingStatus.APPROVED

    def test_ids_are_unique(self, store, at):
        ids = {store.insert_booking(booking_request(at)).id for _ in range(50)}

        assert len(ids) == 50

    def test_insert_does_not_check_conflicts(self, store, at):
        store.insert_booking(booking_request(at))
        store.insert_booking(booking_request(at))

        assert len(store.list_bookings(room_id="r-101")) == 2

    def test_update_merges_patch(self, store, at):
        booking = store.insert_booking(booking_request(at))

        updated = store.update_booking(booking.id, {"status": BookingStatus.APPROVED, "notes": "ok", "id": "other"})

        assert updated.id == booking.id
        assert updated.status == BookingStatus.APPROVED
        assert updated.notes == "ok"
        assert updated.title == booking.title

    def test_update_unknown_booking(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.update_booking("b-missing", {"title": "x"})

        assert exc_info.value.entity == "Booking"

    def test_delete_returns_removed_record(self, store, at):
        booking = store.insert_booking(booking_request(at))

        removed = store.delete_booking(booking.id)

        assert removed.id == booking.id
        with pytest.raises(NotFoundError):
            store.get_booking(booking.id)
        with pytest.raises(NotFoundError):
            store.delete_booking(booking.id)

    def test_reads_are_copies(self, store, at):
        booking = store.insert_booking(booking_request(at))

        snapshot = store.get_booking(booking.id)
        snapshot.title = "changed"
        store.list_bookings()[0].title = "changed too"

        assert store.get_booking(booking.id).title == "Study group"

    def test_list_filters(self, store, at):
        morning = store.insert_booking(booking_request(at, title="Morning Lab", start=at(8), end=at(9)))
        store.insert_booking(booking_request(at, room_id="r-102", requester="Prof. Lee", start=at(13), end=at(14)))
        store.update_booking(morning.id, {"status": BookingStatus.CANCELLED})

        assert len(store.list_bookings()) == 2
        assert [b.room_id for b in store.list_bookings(room_id="r-102")] == ["r-102"]
        assert [b.id for b in store.list_bookings(status=BookingStatus.CANCELLED)] == [morning.id]
        assert [b.room_id for b in store.list_bookings(from_ms=at(10))] == ["r-102"]
        assert [b.id for b in store.list_bookings(to_ms=at(9))] == [morning.id]
        assert [b.id for b in store.list_bookings(q="morning")] == [morning.id]
        assert [b.room_id for b in store.list_bookings(q="lee")] == ["r-102"]


class TestOtherCollections:
    def test_room_crud_and_filters(self, store):
        store.insert_room(RoomCreate(id="r-101", name="Room 101", building="Main", capacity=40, equipment=["Projector", "AC"]))
        generated = store.insert_room(RoomCreate(name="Studio", building="Arts", capacity=20, equipment=["Projector"]))

        assert generated.id.startswith("r-")
        assert [r.id for r in store.list_rooms(building="Main")] == ["r-101"]
        assert [r.id for r in store.list_rooms(capacity=30)] == ["r-101"]
        assert [r.id for r in store.list_rooms(equipment=["Projector", "AC"])] == ["r-101"]
        assert len(store.list_rooms(equipment=["Projector"])) == 2

        assert store.update_room("r-101", {"capacity": 45}).capacity == 45
        store.delete_room("r-101")
        with pytest.raises(NotFoundError):
            store.get_room("r-101")

    def test_duplicate_room_id_rejected(self, store):
        store.insert_room(RoomCreate(id="lab-1", name="Lab", building="Science", capacity=25))

        with pytest.raises(ValueError):
            store.insert_room(RoomCreate(id="lab-1", name="Lab again", building="Science", capacity=25))

    def test_room_equipment_is_deduplicated(self, store):
        room = store.insert_room(RoomCreate(name="Room", building="Main", capacity=10, equipment=["AC", "AC"]))

        assert room.equipment == ["AC"]

    def test_notifications_are_newest_first_and_markable(self, store):
        first = store.add_notification("first")
        second = store.add_notification("second", NotificationKind.REMINDER)

        assert [n.id for n in store.list_notifications()] == [second.id, first.id]
        assert store.mark_notifications([first.id, "n-unknown"]) == 1
        assert [n.read for n in store.list_notifications()] == [False, True]

    def test_equipment_crud(self, store):
        item = store.insert_equipment(EquipmentCreate(name="Projector", type="Projector"))

        assert store.update_equipment(item.id, {"location": "Room 101"}).location == "Room 101"
        assert [e.id for e in store.list_equipment()] == [item.id]
        store.delete_equipment(item.id)
        with pytest.raises(NotFoundError):
            store.get_equipment(item.id)


class TestEventChannel:
    def test_listeners_called_in_registration_order(self):
        channel = EventChannel()
        calls = []
        channel.subscribe(lambda event: calls.append(("first", event["type"])))
        channel.subscribe(lambda event: calls.append(("second", event["type"])))

        channel.broadcast({"type": "booking:created"})

        assert calls == [("first", "booking:created"), ("second", "booking:created")]

    def test_failing_listener_does_not_block_others(self):
        channel = EventChannel()
        received = []

        def broken(_):
            raise RuntimeError("listener down")

        channel.subscribe(broken)
        channel.subscribe(received.append)

        channel.broadcast({"type": "notification"})

        assert received == [{"type": "notification"}]

    def test_unsubscribe_and_late_subscribers(self):
        channel = EventChannel()
        early, late = [], []
        unsubscribe = channel.subscribe(early.append)
        channel.broadcast({"type": "one"})
        channel.subscribe(late.append)
        unsubscribe()
        unsubscribe()
        channel.broadcast({"type": "two"})

        assert early == [{"type": "one"}]
        assert late == [{"type": "two"}]
        assert len(channel) == 1

    def test_same_listener_registered_twice_is_removed_once(self):
        channel = EventChannel()
        received = []
        unsubscribe_first = channel.subscribe(received.append)
        channel.subscribe(received.append)
        unsubscribe_first()

        channel.broadcast({"type": "x"})

        assert received == [{"type": "x"}]

    def test_make_event_serialises_models(self, store, at):
        booking = store.insert_booking(booking_request(at))

        event = make_event("booking:created", booking=booking)

        assert event["type"] == "booking:created"
        assert event["booking"]["id"] == booking.id
        assert event["booking"]["status"] == "pending"

    def test_store_delegates_to_channel(self):
        channel = EventChannel()
        store = BookingStore(channel=channel)
        received = []
        store.subscribe(received.append)

        channel.broadcast({"type": "room:created"})

        assert received == [{"type": "room:created"}]

    def test_store_keeps_an_empty_injected_channel(self):
        channel = EventChannel()

        assert len(channel) == 0
        assert BookingStore(channel=channel).channel is channel


def test_room_lock_serialises_same_room(store):
    inside = threading.Event()
    release = threading.Event()
    order = []

    def holder():
        with store.room_lock("r-101"):
            inside.set()
            release.wait(timeout=5)
            order.append("holder")

    thread = threading.Thread(target=holder)
    thread.start()
    inside.wait(timeout=5)

    with store.room_lock("r-102"):
        order.append("other room")
    release.set()
    with store.room_lock("r-101", "r-102"):
        order.append("same room")
    thread.join(timeout=5)

    assert order == ["other room", "holder", "same room"]


def test_room_locks_are_dropped_after_use(store, at):
    with store.room_lock("r-101", "ghost-room"):
        assert sorted(store._room_locks) == ["ghost-room", "r-101"]

    for room_id in ("ghost-1", "ghost-2", "ghost-3"):
        reservations.create_booking(store, booking_request(at, room_id=room_id))

    assert store._room_locks == {}


def test_room_lock_released_when_body_raises(store):
    with pytest.raises(RuntimeError):
        with store.room_lock("r-101"):
            raise RuntimeError("commit failed")

    assert store._room_locks == {}
    with store.room_lock("r-101"):
        pass
