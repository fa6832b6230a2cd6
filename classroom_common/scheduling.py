"""Conflict detection and alternative-slot suggestion.

Both functions are pure: they read a booking collection and never mutate it.
Intervals are half-open, so a booking ending at 12:00 does not collide with
one starting at 12:00. Callers must guarantee ``start < end``.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import HOUR_MS, MINUTE_MS, Booking, TimeWindow

SUGGESTION_STEP_MS = 30 * MINUTE_MS
SUGGESTION_HORIZON_MS = 6 * HOUR_MS


def overlaps(start: int, end: int, other_start: int, other_end: int) -> bool:
    return not (end <= other_start or start >= other_end)


def find_conflicts(
    bookings: Iterable[Booking],
    room_id: str,
    start: int,
    end: int,
    exclude_id: Optional[str] = None,
) -> List[Booking]:
    """Return every active booking of ``room_id`` overlapping ``[start, end)``.

    Cancelled and rejected bookings are ignored, as is the booking whose id
    is ``exclude_id`` (a booking being rescheduled never blocks itself).
    Results keep the order of ``bookings``.
    """

    return [
        booking
        for booking in bookings
        if booking.room_id == room_id
        and booking.id != exclude_id
        and booking.is_active
        and overlaps(start, end, booking.start, booking.end)
    ]


def suggest_alternatives(
    bookings: Iterable[Booking],
    room_id: str,
    start: int,
    end: int,
    limit: int = 3,
    step_ms: int = SUGGESTION_STEP_MS,
    horizon_ms: int = SUGGESTION_HORIZON_MS,
) -> List[TimeWindow]:
    """Find up to ``limit`` free windows of the same length later that day.

    Candidate starts are probed forward from ``start + step_ms`` while they
    stay strictly before ``start + horizon_ms``. Earlier times and other
    rooms are never considered.
    """

    bookings = list(bookings)
    duration = end - start
    suggestions: List[TimeWindow] = []
    cursor = start + step_ms
    while len(suggestions) < limit and cursor < start + horizon_ms:
        if not find_conflicts(bookings, room_id, cursor, cursor + duration):
            suggestions.append(TimeWindow(start=cursor, end=cursor + duration))
        cursor += step_ms
    return suggestions
