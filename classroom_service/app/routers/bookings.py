from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from classroom_common import reservations
from classroom_common.dependencies import get_store
from classroom_common.models import Booking, BookingStatus
from classroom_common.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from classroom_common.schemas import AvailabilityRead, BookingCreate, BookingUpdate, ConflictRead
from classroom_common.store import BookingStore

router = APIRouter(prefix="/bookings", tags=["bookings"])

_CONFLICT_RESPONSE = {status.HTTP_409_CONFLICT: {"model": ConflictRead}}


@router.get("", response_model=List[Booking])
def list_bookings(
    from_ms: Optional[int] = Query(None, alias="from", description="Bookings ending at or after (epoch ms)"),
    to_ms: Optional[int] = Query(None, alias="to", description="Bookings starting at or before (epoch ms)"),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    room_id: Optional[str] = None,
    q: Optional[str] = None,
    store: BookingStore = Depends(get_store),
) -> List[Booking]:
    return store.list_bookings(room_id=room_id, status=status_filter, from_ms=from_ms, to_ms=to_ms, q=q)


@router.get("/availability", response_model=AvailabilityRead)
@limiter.limit(READ_LIMIT)
def check_availability(
    request: Request,
    room_id: str,
    start: int = Query(..., ge=0),
    end: int = Query(..., ge=0),
    exclude_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0, le=12),
    store: BookingStore = Depends(get_store),
) -> AvailabilityRead:
    conflicts, alternatives = reservations.check_availability(store, room_id, start, end, exclude_id, limit)
    return AvailabilityRead(
        room_id=room_id,
        available=not conflicts,
        conflicts=conflicts,
        alternatives=alternatives,
    )


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED, responses=_CONFLICT_RESPONSE)
@limiter.limit(WRITE_LIMIT)
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    store: BookingStore = Depends(get_store),
) -> Booking:
    return reservations.create_booking(store, booking_in)


@router.get("/{booking_id}", response_model=Booking)
def get_booking(booking_id: str, store: BookingStore = Depends(get_store)) -> Booking:
    return store.get_booking(booking_id)


@router.put("/{booking_id}", response_model=Booking, responses=_CONFLICT_RESPONSE)
@limiter.limit(WRITE_LIMIT)
def update_booking(
    request: Request,
    booking_id: str,
    booking_update: BookingUpdate,
    store: BookingStore = Depends(get_store),
) -> Booking:
    """Reschedule, approve, reject or cancel a booking."""

    patch = booking_update.model_dump(exclude_unset=True, exclude_none=True)
    return reservations.update_booking(store, booking_id, patch)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_booking(
    request: Request,
    booking_id: str,
    store: BookingStore = Depends(get_store),
) -> Response:
    reservations.delete_booking(store, booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
