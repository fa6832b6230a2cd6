"""Pydantic request and response schemas for the booking API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .models import (
    Booking,
    BookingStatus,
    EquipmentStatus,
    NotificationKind,
    RecurrencePattern,
    RecurringBooking,
    RoleEnum,
    TimeWindow,
)


class BookingBase(BaseModel):
    room_id: str
    title: str = Field("Classroom Booking", max_length=200)
    purpose: str = ""
    requester: str = "Anonymous"
    role: RoleEnum = RoleEnum.STUDENT
    start: int = Field(..., ge=0, description="Epoch milliseconds")
    end: int = Field(..., ge=0, description="Epoch milliseconds")
    notes: str = ""


class BookingCreate(BookingBase):
    status: Optional[BookingStatus] = None  # defaults by role


class BookingUpdate(BaseModel):
    room_id: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    purpose: Optional[str] = None
    requester: Optional[str] = None
    role: Optional[RoleEnum] = None
    start: Optional[int] = Field(None, ge=0)
    end: Optional[int] = Field(None, ge=0)
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None


class ConflictRead(BaseModel):
    detail: str
    conflicts: List[Booking]
    alternatives: List[TimeWindow]


class AvailabilityRead(BaseModel):
    room_id: str
    available: bool
    conflicts: List[Booking]
    alternatives: List[TimeWindow]


class RoomBase(BaseModel):
    name: str = Field(..., max_length=100)
    building: str = Field(..., max_length=100)
    capacity: int = Field(..., gt=0)
    equipment: List[str] = Field(default_factory=list)


class RoomCreate(RoomBase):
    id: Optional[str] = None


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    building: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, gt=0)
    equipment: Optional[List[str]] = None


class RoomStatusRead(BaseModel):
    room_id: str
    status: str
    checked_at: int
    booking_id: Optional[str] = None


class RecurringBookingCreate(BaseModel):
    pattern: RecurrencePattern
    start_date: int = Field(..., ge=0)
    end_date: int = Field(..., ge=0)
    room_id: str
    title: str = Field("Classroom Booking", max_length=180)
    requester: str = "Anonymous"
    role: RoleEnum = RoleEnum.STUDENT
    duration: int = Field(..., gt=0, description="Minutes")

    @model_validator(mode="after")
    def _check_range(self) -> "RecurringBookingCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RecurringBookingCreated(BaseModel):
    recurring: RecurringBooking
    generated_bookings: int
    bookings: List[Booking]
    skipped: List[TimeWindow]


class NotificationCreate(BaseModel):
    message: str = "System update"
    kind: NotificationKind = NotificationKind.SYSTEM


class NotificationMark(BaseModel):
    ids: List[str] = Field(default_factory=list)
    read: bool = True


class EquipmentBase(BaseModel):
    name: str = Field(..., max_length=100)
    type: str = Field(..., max_length=50)
    model: Optional[str] = None
    serial_number: Optional[str] = None
    status: EquipmentStatus = EquipmentStatus.AVAILABLE
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    last_maintenance: Optional[int] = None
    notes: Optional[str] = None


class EquipmentCreate(EquipmentBase):
    pass


class EquipmentUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    type: Optional[str] = Field(None, max_length=50)
    model: Optional[str] = None
    serial_number: Optional[str] = None
    status: Optional[EquipmentStatus] = None
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    last_maintenance: Optional[int] = None
    notes: Optional[str] = None


class ServicePing(BaseModel):
    status: str
    service: str
