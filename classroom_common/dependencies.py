"""FastAPI dependencies handing out the per-app store and caches."""
from fastapi import Request

from .cache import RoomStatusCache
from .store import BookingStore


def get_store(request: Request) -> BookingStore:
    return request.app.state.store


def get_room_status_cache(request: Request) -> RoomStatusCache:
    return request.app.state.room_status_cache
