from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from classroom_common.dependencies import get_store
from classroom_common.events import make_event
from classroom_common.models import Equipment
from classroom_common.rate_limit import WRITE_LIMIT, limiter
from classroom_common.schemas import EquipmentCreate, EquipmentUpdate
from classroom_common.store import BookingStore

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("", response_model=List[Equipment])
def list_equipment(store: BookingStore = Depends(get_store)) -> List[Equipment]:
    return store.list_equipment()


@router.post("", response_model=Equipment, status_code=status.HTTP_201_CREATED)
@limiter.limit(WRITE_LIMIT)
def add_equipment(request: Request, item_in: EquipmentCreate, store: BookingStore = Depends(get_store)) -> Equipment:
    item = store.insert_equipment(item_in)
    store.broadcast(make_event("equipment:created", equipment=item))
    return item


@router.get("/{equipment_id}", response_model=Equipment)
def get_equipment(equipment_id: str, store: BookingStore = Depends(get_store)) -> Equipment:
    return store.get_equipment(equipment_id)


@router.put("/{equipment_id}", response_model=Equipment)
@limiter.limit(WRITE_LIMIT)
def update_equipment(
    request: Request,
    equipment_id: str,
    item_update: EquipmentUpdate,
    store: BookingStore = Depends(get_store),
) -> Equipment:
    item = store.update_equipment(equipment_id, item_update.model_dump(exclude_unset=True))
    store.broadcast(make_event("equipment:updated", equipment=item))
    return item


@router.delete("/{equipment_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(WRITE_LIMIT)
def delete_equipment(request: Request, equipment_id: str, store: BookingStore = Depends(get_store)) -> Response:
    removed = store.delete_equipment(equipment_id)
    store.broadcast(make_event("equipment:deleted", equipment=removed))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
