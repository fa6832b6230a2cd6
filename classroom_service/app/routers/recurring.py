from typing import List

from fastapi import APIRouter, Depends, Request, status

from classroom_common import reservations
from classroom_common.dependencies import get_store
from classroom_common.models import RecurringBooking
from classroom_common.rate_limit import WRITE_LIMIT, limiter
from classroom_common.schemas import RecurringBookingCreate, RecurringBookingCreated
from classroom_common.store import BookingStore

router = APIRouter(prefix="/recurring-bookings", tags=["recurring"])


@router.get("", response_model=List[RecurringBooking])
def list_recurring(store: BookingStore = Depends(get_store)) -> List[RecurringBooking]:
    return store.list_recurring()


@router.post("", response_model=RecurringBookingCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def create_recurring(
    request: Request,
    template_in: RecurringBookingCreate,
    store: BookingStore = Depends(get_store),
) -> RecurringBookingCreated:
    """Store the template and book every free occurrence; taken slots come back as ``skipped``."""

    template, created, skipped = reservations.create_recurring(store, template_in)
    return RecurringBookingCreated(
        recurring=template,
        generated_bookings=len(created),
        bookings=created,
        skipped=skipped,
    )
