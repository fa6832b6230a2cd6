"""In-memory domain models shared by the store, the scheduler and the API."""
from __future__ import annotations

import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""

    return int(time.time() * 1000)


class RoleEnum(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Bookings in these states no longer hold their room.
INACTIVE_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})


def default_status_for(role: RoleEnum) -> BookingStatus:
    """Students request, staff book directly."""

    if role == RoleEnum.STUDENT:
        return BookingStatus.PENDING
    return BookingStatus.APPROVED


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class NotificationKind(str, Enum):
    CONFIRMATION = "confirmation"
    CANCELLATION = "cancellation"
    REMINDER = "reminder"
    SYSTEM = "system"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class EquipmentStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in-use"
    MAINTENANCE = "maintenance"
    BROKEN = "broken"


class Room(BaseModel):
    id: str
    name: str
    building: str
    capacity: int = Field(..., gt=0)
    equipment: List[str] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)

    @field_validator("equipment")
    @classmethod
    def _dedupe_equipment(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))


class Booking(BaseModel):
    """A reservation of one room for the half-open interval ``[start, end)``.

    ``room_id`` is a soft reference: a booking may outlive its room.
    """

    id: str
    room_id: str
    title: str
    purpose: str = ""
    requester: str
    role: RoleEnum
    start: int
    end: int
    status: BookingStatus
    created_at: int = Field(default_factory=now_ms)
    notes: str = ""

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES


class TimeWindow(BaseModel):
    start: int
    end: int


class RecurringBooking(BaseModel):
    id: str
    pattern: RecurrencePattern
    start_date: int
    end_date: int
    room_id: str
    title: str
    requester: str
    role: RoleEnum
    duration: int = Field(..., gt=0, description="Length of each occurrence in minutes")
    created_at: int = Field(default_factory=now_ms)


class NotificationItem(BaseModel):
    id: str
    message: str
    created_at: int = Field(default_factory=now_ms)
    read: bool = False
    kind: NotificationKind = NotificationKind.SYSTEM


class User(BaseModel):
    id: str
    name: str
    email: str
    role: RoleEnum
    department: Optional[str] = None
    phone: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE
    created_at: int = Field(default_factory=now_ms)
    last_active: int = Field(default_factory=now_ms)


class Equipment(BaseModel):
    id: str
    name: str
    type: str
    model: Optional[str] = None
    serial_number: Optional[str] = None
    status: EquipmentStatus = EquipmentStatus.AVAILABLE
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)
    last_maintenance: Optional[int] = None
    notes: Optional[str] = None
