"""Server-sent events feed of every store broadcast."""
import asyncio
import json
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from classroom_common.config import get_settings
from classroom_common.dependencies import get_store
from classroom_common.events import make_event
from classroom_common.models import now_ms
from classroom_common.store import BookingStore

router = APIRouter(tags=["stream"])


def format_sse(event: Dict[str, Any]) -> str:
    return f"data: {json.dumps(event)}\n\n"


async def event_source(request: Request, store: BookingStore, heartbeat_seconds: float) -> AsyncIterator[str]:
    """Yield a ``connected`` hello, then each broadcast, with heartbeats in between.

    Broadcasts arrive on worker threads, so they are handed to this client's
    queue through the event loop. The subscription ends with the generator.
    """

    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def forward(event: Dict[str, Any]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    unsubscribe = store.subscribe(forward)
    try:
        yield format_sse(make_event("connected", t=now_ms()))
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                event = make_event("heartbeat", t=now_ms())
            yield format_sse(event)
    finally:
        unsubscribe()


@router.get("/stream")
async def stream(request: Request, store: BookingStore = Depends(get_store)) -> StreamingResponse:
    return StreamingResponse(
        event_source(request, store, get_settings().stream_heartbeat_seconds),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-transform",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
