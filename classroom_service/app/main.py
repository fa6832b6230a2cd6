from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from classroom_common.cache import RoomStatusCache
from classroom_common.config import get_settings
from classroom_common.logging_middleware import add_audit_middleware
from classroom_common.messaging import RabbitMQPublisher
from classroom_common.rate_limit import apply_rate_limiter
from classroom_common.schemas import ServicePing
from classroom_common.seed import seed_store
from classroom_common.store import BookingStore

from .handlers import apply_error_handlers
from .routers import bookings, equipment, notifications, recurring, rooms, stream, users


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    settings = get_settings()
    unsubscribe = None
    if settings.rabbitmq_enabled:
        publisher = RabbitMQPublisher(settings.rabbitmq_host, settings.rabbitmq_queue)
        unsubscribe = fastapi_app.state.store.subscribe(publisher)
    yield
    if unsubscribe is not None:
        unsubscribe()


def create_app(store: Optional[BookingStore] = None) -> FastAPI:
    """Build the service around ``store``, or around a fresh (seeded) one."""

    settings = get_settings()
    if store is None:
        store = BookingStore()
        if settings.seed_data:
            seed_store(store)

    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Classroom availability, booking requests and approvals",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.store = store
    fastapi_app.state.room_status_cache = RoomStatusCache(ttl=settings.room_cache_ttl)
    store.subscribe(fastapi_app.state.room_status_cache.handle_event)

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "classroom")
    apply_error_handlers(fastapi_app)
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)

    for module in (bookings, rooms, recurring, notifications, equipment, users, stream):
        fastapi_app.include_router(module.router)

    @fastapi_app.get("/health", response_model=ServicePing, tags=["health"])
    def health() -> ServicePing:
        return ServicePing(status="ok", service="classroom")

    return fastapi_app


app = create_app()
