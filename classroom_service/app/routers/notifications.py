from typing import Dict, List

from fastapi import APIRouter, Depends, status

from classroom_common.dependencies import get_store
from classroom_common.events import make_event
from classroom_common.models import NotificationItem
from classroom_common.schemas import NotificationCreate, NotificationMark
from classroom_common.store import BookingStore

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationItem])
def list_notifications(store: BookingStore = Depends(get_store)) -> List[NotificationItem]:
    return store.list_notifications()


@router.post("", response_model=NotificationItem, status_code=status.HTTP_201_CREATED)
def create_notification(
    notification_in: NotificationCreate,
    store: BookingStore = Depends(get_store),
) -> NotificationItem:
    notification = store.add_notification(notification_in.message, notification_in.kind)
    store.broadcast(make_event("notification", notification=notification))
    return notification


@router.patch("")
def mark_notifications(marks: NotificationMark, store: BookingStore = Depends(get_store)) -> Dict[str, int]:
    return {"updated": store.mark_notifications(marks.ids, marks.read)}
