import asyncio
import json

from classroom_common.store import BookingStore
from classroom_service.app.routers.stream import event_source, format_sse


class _ConnectedRequest:
    async def is_disconnected(self) -> bool:
        return False


def _decode(chunk: str) -> dict:
    assert chunk.startswith("data: ") and chunk.endswith("\n\n")
    return json.loads(chunk[len("data: "):])


def test_format_sse():
    assert format_sse({"type": "heartbeat", "t": 1}) == 'data: {"type": "heartbeat", "t": 1}\n\n'


def test_event_source_forwards_broadcasts_and_unsubscribes():
    store = BookingStore()

    async def scenario():
        stream = event_source(_ConnectedRequest(), store, heartbeat_seconds=0.05)
        hello = await stream.__anext__()
        store.broadcast({"type": "booking:created", "booking": {"id": "b-1", "room_id": "r-101"}})
        forwarded = await stream.__anext__()
        heartbeat = await stream.__anext__()
        await stream.aclose()
        return hello, forwarded, heartbeat

    hello, forwarded, heartbeat = asyncio.run(scenario())

    assert _decode(hello)["type"] == "connected"
    assert _decode(forwarded)["booking"]["id"] == "b-1"
    assert _decode(heartbeat)["type"] == "heartbeat"
    assert len(store.channel) == 0
