import os
from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("SEED_DATA", "false")
os.environ.setdefault("RABBITMQ_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./logs-test")

from classroom_common.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from classroom_common.store import BookingStore  # noqa: E402
from classroom_service.app.main import create_app  # noqa: E402

# Monday 2 March 2026, 00:00 UTC.
DAY_START_MS = int(datetime(2026, 3, 2, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture()
def store() -> BookingStore:
    return BookingStore()


@pytest.fixture()
def client(store: BookingStore) -> Generator[TestClient, None, None]:
    with TestClient(create_app(store=store)) as test_client:
        yield test_client


@pytest.fixture()
def at():
    """Epoch milliseconds for a wall-clock time on the test day."""

    def _at(hour: int, minute: int = 0) -> int:
        return DAY_START_MS + (hour * 60 + minute) * 60 * 1000

    return _at
