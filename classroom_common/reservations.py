"""Booking workflows: validate, check for conflicts, commit, notify.

Every check-then-commit sequence runs while holding the lock of the room
being written to, so two concurrent requests for the same slot cannot both
pass the conflict check.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import get_settings
from .errors import BookingConflictError, InvalidIntervalError, RoomInUseError
from .events import make_event
from .models import (
    HOUR_MS,
    MINUTE_MS,
    Booking,
    BookingStatus,
    NotificationKind,
    RecurringBooking,
    Room,
    TimeWindow,
    now_ms,
)
from .recurrence import expand_recurring
from .scheduling import find_conflicts, suggest_alternatives
from .schemas import BookingCreate, RecurringBookingCreate
from .store import BookingStore

logger = logging.getLogger(__name__)

_RESCHEDULE_FIELDS = ("room_id", "start", "end")

_STATUS_NOTIFICATIONS = {
    BookingStatus.APPROVED: NotificationKind.CONFIRMATION,
    BookingStatus.REJECTED: NotificationKind.CANCELLATION,
    BookingStatus.CANCELLED: NotificationKind.CANCELLATION,
}


def validate_interval(start: int, end: int) -> None:
    if end <= start:
        raise InvalidIntervalError(start, end)


def _alternatives(
    store: BookingStore,
    room_id: str,
    start: int,
    end: int,
    limit: Optional[int] = None,
    exclude_id: Optional[str] = None,
) -> List[TimeWindow]:
    settings = get_settings()
    bookings = [b for b in store.list_bookings(room_id=room_id) if b.id != exclude_id]
    return suggest_alternatives(
        bookings,
        room_id,
        start,
        end,
        limit=settings.suggestion_limit if limit is None else limit,
        step_ms=settings.suggestion_step_minutes * MINUTE_MS,
        horizon_ms=settings.suggestion_horizon_hours * HOUR_MS,
    )


def check_availability(
    store: BookingStore,
    room_id: str,
    start: int,
    end: int,
    exclude_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> Tuple[List[Booking], List[TimeWindow]]:
    """Conflicts for a proposed window and, if any, alternatives. Read-only."""

    validate_interval(start, end)
    conflicts = find_conflicts(store.list_bookings(room_id=room_id), room_id, start, end, exclude_id)
    if not conflicts:
        return [], []
    return conflicts, _alternatives(store, room_id, start, end, limit, exclude_id)


def _notify(store: BookingStore, message: str, kind: NotificationKind) -> None:
    notification = store.add_notification(message, kind)
    store.broadcast(make_event("notification", notification=notification))


def create_booking(store: BookingStore, booking_in: BookingCreate, limit: Optional[int] = None) -> Booking:
    validate_interval(booking_in.start, booking_in.end)
    with store.room_lock(booking_in.room_id):
        conflicts = find_conflicts(
            store.list_bookings(room_id=booking_in.room_id), booking_in.room_id, booking_in.start, booking_in.end
        )
        if conflicts:
            logger.info(
                "Rejected booking for room %s: %d conflict(s)", booking_in.room_id, len(conflicts)
            )
            raise BookingConflictError(
                conflicts, _alternatives(store, booking_in.room_id, booking_in.start, booking_in.end, limit)
            )
        booking = store.insert_booking(booking_in)

    store.broadcast(make_event("booking:created", booking=booking))
    _notify(store, f"New booking {booking.title}", NotificationKind.CONFIRMATION)
    return booking


def update_booking(
    store: BookingStore, booking_id: str, patch: Dict[str, Any], limit: Optional[int] = None
) -> Booking:
    """Merge ``patch`` into a booking, re-checking conflicts when it moves.

    The check runs against the prospective record with the booking itself
    excluded. It also runs when a cancelled or rejected booking is brought
    back to an active status.
    """

    while True:
        current = store.get_booking(booking_id)
        target_room = patch.get("room_id") or current.room_id
        with store.room_lock(current.room_id, target_room):
            current = store.get_booking(booking_id)
            if (patch.get("room_id") or current.room_id) != target_room:
                continue  # moved by a concurrent request; lock the new room instead

            prospective = current.model_copy(update=patch)
            validate_interval(prospective.start, prospective.end)
            moved = any(field in patch for field in _RESCHEDULE_FIELDS)
            reactivated = prospective.is_active and not current.is_active
            if prospective.is_active and (moved or reactivated):
                conflicts = find_conflicts(
                    store.list_bookings(room_id=target_room), target_room, prospective.start, prospective.end, booking_id
                )
                if conflicts:
                    logger.info("Rejected update of booking %s: %d conflict(s)", booking_id, len(conflicts))
                    raise BookingConflictError(
                        conflicts,
                        _alternatives(store, target_room, prospective.start, prospective.end, limit, booking_id),
                    )
            updated = store.update_booking(booking_id, patch)
        break

    if updated.room_id != current.room_id:
        store.broadcast(make_event("booking:updated", booking=updated, previous_room_id=current.room_id))
    else:
        store.broadcast(make_event("booking:updated", booking=updated))
    if updated.status != current.status and updated.status in _STATUS_NOTIFICATIONS:
        _notify(store, f"Booking {updated.title} {updated.status.value}.", _STATUS_NOTIFICATIONS[updated.status])
    return updated


def delete_booking(store: BookingStore, booking_id: str) -> Booking:
    removed = store.delete_booking(booking_id)
    store.broadcast(make_event("booking:deleted", booking=removed))
    return removed


def create_recurring(
    store: BookingStore, template_in: RecurringBookingCreate
) -> Tuple[RecurringBooking, List[Booking], List[TimeWindow]]:
    """Store a template and book each occurrence that is still free.

    Occurrences colliding with active bookings are skipped and reported.
    """

    settings = get_settings()
    template = store.add_recurring(template_in)
    created: List[Booking] = []
    skipped: List[TimeWindow] = []
    for candidate in expand_recurring(template, settings.max_recurring_occurrences):
        with store.room_lock(candidate.room_id):
            conflicts = find_conflicts(
                store.list_bookings(room_id=candidate.room_id), candidate.room_id, candidate.start, candidate.end
            )
            if conflicts:
                skipped.append(TimeWindow(start=candidate.start, end=candidate.end))
                continue
            created.append(store.insert_booking(candidate))

    logger.info(
        "Recurring template %s generated %d booking(s), skipped %d", template.id, len(created), len(skipped)
    )
    store.broadcast(make_event("recurring:created", recurring=template, bookings=created))
    return template, created, skipped


def remove_room(store: BookingStore, room_id: str, cascade: bool = False) -> Room:
    """Delete a room that has no upcoming active bookings.

    With ``cascade`` those bookings are cancelled first. Past bookings keep
    pointing at the removed room as history.
    """

    store.get_room(room_id)
    with store.room_lock(room_id):
        now = now_ms()
        blocking = [b for b in store.list_bookings(room_id=room_id) if b.is_active and b.end > now]
        if blocking and not cascade:
            raise RoomInUseError(room_id, [b.id for b in blocking])
        cancelled = [store.update_booking(b.id, {"status": BookingStatus.CANCELLED}) for b in blocking]
        removed = store.delete_room(room_id)

    for booking in cancelled:
        store.broadcast(make_event("booking:updated", booking=booking))
    store.broadcast(make_event("room:deleted", room=removed))
    return removed
