"""Demo data loaded into a fresh store at startup."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from .models import (
    DAY_MS,
    Booking,
    BookingStatus,
    Equipment,
    EquipmentStatus,
    NotificationItem,
    NotificationKind,
    RoleEnum,
    Room,
    User,
    now_ms,
)
from .store import BookingStore


def _today_at(hour: int, reference: datetime) -> int:
    return int(reference.replace(hour=hour, minute=0, second=0, microsecond=0).timestamp() * 1000)


def seed_store(store: BookingStore, reference: Optional[datetime] = None) -> BookingStore:
    """Populate ``store`` with rooms, one approved booking today 10:00-12:00, users and equipment."""

    reference = reference or datetime.now()
    now = now_ms()
    rooms = [
        Room(id="r-101", name="Room 101", building="Main", capacity=40, equipment=["Projector", "AC"], created_at=now),
        Room(id="r-102", name="Room 102", building="Main", capacity=30, equipment=["AC"], created_at=now),
        Room(id="lab-1", name="Science Lab 1", building="Science", capacity=25, equipment=["Projector", "AC"], created_at=now),
        Room(id="studio", name="Studio A", building="Arts", capacity=20, equipment=["Projector"], created_at=now),
    ]
    bookings = [
        Booking(
            id="b-1",
            room_id="r-101",
            title="Exam Review",
            requester="Prof. Lee",
            role=RoleEnum.TEACHER,
            start=_today_at(10, reference),
            end=_today_at(12, reference),
            status=BookingStatus.APPROVED,
            created_at=now,
        )
    ]
    notifications = [
        NotificationItem(id="n-1", message="Booking b-1 confirmed.", created_at=now, kind=NotificationKind.CONFIRMATION)
    ]
    users = [
        User(
            id="u-admin",
            name="Admin User",
            email="admin@school.edu",
            role=RoleEnum.ADMIN,
            department="Administration",
            phone="+1-555-0100",
            created_at=now,
            last_active=now,
        ),
        User(
            id="u-teacher1",
            name="Prof. Sarah Johnson",
            email="s.johnson@school.edu",
            role=RoleEnum.TEACHER,
            department="Computer Science",
            phone="+1-555-0101",
            created_at=now,
            last_active=now,
        ),
        User(
            id="u-student1",
            name="John Smith",
            email="j.smith@student.school.edu",
            role=RoleEnum.STUDENT,
            department="Engineering",
            created_at=now,
            last_active=now,
        ),
    ]
    equipment = [
        Equipment(
            id="eq-1",
            name="Digital Projector",
            type="Projector",
            model="Epson BrightLink Pro 1460Ui",
            serial_number="EPS001234",
            location="Room 101",
            assigned_to="Prof. Johnson",
            created_at=now,
        ),
        Equipment(
            id="eq-2",
            name="Laptop Cart",
            type="Computer",
            model="Dell Mobile Computing Cart",
            serial_number="DELL567890",
            status=EquipmentStatus.IN_USE,
            location="Storage Room B",
            assigned_to="IT Department",
            created_at=now,
        ),
        Equipment(
            id="eq-3",
            name="Sound System",
            type="Speaker",
            model="Bose Professional",
            serial_number="BOSE789123",
            status=EquipmentStatus.MAINTENANCE,
            location="Auditorium",
            created_at=now,
            last_maintenance=now - 7 * DAY_MS,
        ),
        Equipment(
            id="eq-4",
            name="Document Camera",
            type="Camera",
            model="ELMO PX-10",
            serial_number="ELMO123456",
            status=EquipmentStatus.BROKEN,
            location="Room 103",
            created_at=now,
            notes="Power adapter needs replacement",
        ),
    ]
    store.load(rooms=rooms, bookings=bookings, notifications=notifications, users=users, equipment=equipment)
    return store
