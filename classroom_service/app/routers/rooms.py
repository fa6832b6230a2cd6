from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from classroom_common import reservations
from classroom_common.cache import RoomStatusCache
from classroom_common.dependencies import get_room_status_cache, get_store
from classroom_common.events import make_event
from classroom_common.models import Room, now_ms
from classroom_common.rate_limit import WRITE_LIMIT, limiter
from classroom_common.schemas import RoomCreate, RoomStatusRead, RoomUpdate
from classroom_common.store import BookingStore

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=List[Room])
def list_rooms(
    building: Optional[str] = None,
    capacity: Optional[int] = Query(None, ge=1, description="Minimum capacity"),
    equipment: Optional[List[str]] = Query(default=None),
    store: BookingStore = Depends(get_store),
) -> List[Room]:
    return store.list_rooms(building=building, capacity=capacity, equipment=equipment)


@router.post("", response_model=Room, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def add_room(request: Request, room_in: RoomCreate, store: BookingStore = Depends(get_store)) -> Room:
    try:
        room = store.insert_room(room_in)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    store.broadcast(make_event("room:created", room=room))
    return room


@router.get("/{room_id}", response_model=Room)
def get_room(room_id: str, store: BookingStore = Depends(get_store)) -> Room:
    return store.get_room(room_id)


@router.put("/{room_id}", response_model=Room)
@limiter.limit(WRITE_LIMIT)
def update_room(
    request: Request,
    room_id: str,
    room_update: RoomUpdate,
    store: BookingStore = Depends(get_store),
) -> Room:
    room = store.update_room(room_id, room_update.model_dump(exclude_unset=True, exclude_none=True))
    store.broadcast(make_event("room:updated", room=room))
    return room


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_room(
    request: Request,
    room_id: str,
    cascade: bool = Query(False, description="Cancel upcoming bookings instead of refusing"),
    store: BookingStore = Depends(get_store),
) -> Response:
    reservations.remove_room(store, room_id, cascade=cascade)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{room_id}/status", response_model=RoomStatusRead)
def room_status(
    room_id: str,
    force_refresh: bool = False,
    store: BookingStore = Depends(get_store),
    cache: RoomStatusCache = Depends(get_room_status_cache),
) -> RoomStatusRead:
    store.get_room(room_id)
    if not force_refresh:
        cached = cache.get(room_id)
        if cached is not None:
            return cached

    now = now_ms()
    current = next(
        (b for b in store.list_bookings(room_id=room_id) if b.is_active and b.start <= now < b.end),
        None,
    )
    payload = RoomStatusRead(
        room_id=room_id,
        status="booked" if current else "available",
        checked_at=now,
        booking_id=current.id if current else None,
    )
    cache.set(room_id, payload)
    return payload
