"""Translate domain errors into JSON error responses."""
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from classroom_common.errors import BookingConflictError, InvalidIntervalError, NotFoundError, RoomInUseError


def not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": f"{exc.entity} not found"})


def invalid_interval_handler(_: Request, exc: InvalidIntervalError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def conflict_handler(_: Request, exc: BookingConflictError) -> JSONResponse:
    content = {"detail": str(exc), "conflicts": exc.conflicts, "alternatives": exc.alternatives}
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=jsonable_encoder(content))


def room_in_use_handler(_: Request, exc: RoomInUseError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "booking_ids": exc.booking_ids},
    )


def apply_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InvalidIntervalError, invalid_interval_handler)
    app.add_exception_handler(BookingConflictError, conflict_handler)
    app.add_exception_handler(RoomInUseError, room_in_use_handler)
