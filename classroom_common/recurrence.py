"""Expansion of recurring booking templates into concrete booking requests."""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from typing import List

from .models import MINUTE_MS, RecurrencePattern, RecurringBooking, default_status_for
from .schemas import BookingCreate


def _to_datetime(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day (Jan 31 + 1 month = Feb 28/29)."""

    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def occurrence_starts(template: RecurringBooking, max_occurrences: int = 366) -> List[int]:
    """Start instants from ``start_date`` up to and including ``end_date``.

    Monthly steps are counted from the anchor so a clamped short month does
    not pull later occurrences earlier.
    """

    anchor = _to_datetime(template.start_date)
    starts: List[int] = []
    index = 0
    while len(starts) < max_occurrences:
        if template.pattern == RecurrencePattern.DAILY:
            current = anchor + timedelta(days=index)
        elif template.pattern == RecurrencePattern.WEEKLY:
            current = anchor + timedelta(weeks=index)
        else:
            current = add_months(anchor, index)
        current_ms = _to_ms(current)
        if current_ms > template.end_date:
            break
        starts.append(current_ms)
        index += 1
    return starts


def expand_recurring(template: RecurringBooking, max_occurrences: int = 366) -> List[BookingCreate]:
    duration_ms = template.duration * MINUTE_MS
    status = default_status_for(template.role)
    return [
        BookingCreate(
            room_id=template.room_id,
            title=f"{template.title} (Recurring)",
            requester=template.requester,
            role=template.role,
            start=start,
            end=start + duration_ms,
            status=status,
            notes=f"Generated from recurring booking {template.id}",
        )
        for start in occurrence_starts(template, max_occurrences)
    ]
