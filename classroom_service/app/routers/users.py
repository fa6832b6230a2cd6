from typing import List

from fastapi import APIRouter, Depends

from classroom_common.dependencies import get_store
from classroom_common.models import User
from classroom_common.store import BookingStore

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[User])
def list_users(store: BookingStore = Depends(get_store)) -> List[User]:
    return store.list_users()
