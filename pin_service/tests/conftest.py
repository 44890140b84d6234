from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pin_service.app import create_app
from pin_service.config import PinSettings
from pin_service.database import Database
from pin_service.lifecycle import PinLifecycle
from pin_service.store import PinStore

ADMIN_TOKEN = "test-admin-token"


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def temp_settings(tmp_path: Path) -> PinSettings:
    return PinSettings(
        _env_file=None,
        admin_token=ADMIN_TOKEN,
        database_url=f"sqlite:///{tmp_path / 'pins.db'}",
    )


@pytest.fixture
def db(temp_settings):
    database = Database(temp_settings)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def store(db) -> PinStore:
    return PinStore(db)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def lifecycle(temp_settings, store, clock) -> PinLifecycle:
    return PinLifecycle(temp_settings, store, clock=clock)


@pytest.fixture
def client(temp_settings, lifecycle):
    app = create_app(temp_settings, lifecycle=lifecycle)
    app.testing = True
    return app.test_client()


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
