"""Pytest configuration and fixtures.

SIT tests run the real transport, API and session layers against
``FakeBackend``, an in-memory implementation of the REST surface.
"""
from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src" / "python"

for path in (SRC_DIR, ROOT_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from finsync.api import FinanceAPI  # noqa: E402
from finsync.events import InvalidationBus  # noqa: E402
from finsync.schema import TOKEN_KEY  # noqa: E402
from finsync.session import SessionManager  # noqa: E402
from finsync.store import MemoryStore  # noqa: E402
from finsync.transport import TransportClient  # noqa: E402
from tests.utils.accounts import USER_EMAIL, USER_NAME, USER_PASSWORD  # noqa: E402
from tests.utils.fake_backend import FakeBackend  # noqa: E402


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def account(backend: FakeBackend) -> dict:
    """A registered user with a valid token."""
    user, token = backend.add_user(
        USER_EMAIL,
        USER_PASSWORD,
        USER_NAME,
        age=31,
        profile={"monthlyIncome": 5000, "financialGoals": "Reserva", "spendingLimit": 3000},
    )
    return {"user": user, "token": token, "password": USER_PASSWORD}


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def bus() -> InvalidationBus:
    return InvalidationBus()


@pytest.fixture()
def transport(backend: FakeBackend, store: MemoryStore, bus: InvalidationBus) -> TransportClient:
    return TransportClient(
        token_provider=lambda: store.get(TOKEN_KEY),
        bus=bus,
        timeout_seconds=5,
        session=backend,
    )


@pytest.fixture()
def api(transport: TransportClient) -> FinanceAPI:
    return FinanceAPI(transport)


@pytest.fixture()
def manager(api: FinanceAPI, store: MemoryStore, bus: InvalidationBus) -> SessionManager:
    session_manager = SessionManager(api, store, bus)
    yield session_manager
    session_manager.close()


@pytest.fixture()
def logged_in(manager: SessionManager, account: dict) -> SessionManager:
    """A session manager authenticated as the fixture account."""
    manager.login(USER_EMAIL, USER_PASSWORD)
    return manager


@pytest.fixture()
def sample_user_payload() -> dict:
    return {
        "_id": "64f1c0ffee",
        "email": "bruno@example.com",
        "full_name": "Bruno Lima",
        "age": "42",
        "is_active": False,
        "created_at": "2024-03-01T10:00:00.000Z",
        "updated_at": "2024-03-02T10:00:00.000Z",
        "monthlyIncome": 4200.5,
        "profile": {"financial_goals": "Viajar", "spendingLimit": "1500"},
    }
