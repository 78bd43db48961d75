# tests/conftest.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from taskapp.core import dependencies
from taskapp.core.dependencies import build_session_context, get_session_context, get_storage
from taskapp.database.supabase_client import get_service_supabase, get_supabase
from taskapp.main import app
from taskapp.modules.notifications.service import NotificationService
from taskapp.modules.profiles.service import ProfileService
from taskapp.modules.storage.service import StorageService, SupabaseStorage
from taskapp.modules.tasks.service import AssignmentService, GeneratedTaskService

from .fakes import FakeSupabase, FixedClock


@pytest.fixture(autouse=True)
def _clear_caches():
    dependencies._SESSION_CACHE.clear()
    yield
    dependencies._SESSION_CACHE.clear()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def db(clock: FixedClock) -> FakeSupabase:
    """Fake database with two players who have finished their profiles and one who has not."""
    fake = FakeSupabase(clock=clock)
    fake.add_profile("alice", "Alice")
    fake.add_profile("bob", "Bob")
    fake.add_profile("carol")
    return fake


@pytest.fixture()
def storage(db: FakeSupabase) -> StorageService:
    return StorageService(SupabaseStorage(db))


@pytest.fixture()
def notifications(db: FakeSupabase) -> NotificationService:
    return NotificationService(db)


@pytest.fixture()
def assignments(db, storage, notifications, clock) -> AssignmentService:
    return AssignmentService(
        db, profiles=ProfileService(db), notifications=notifications, storage=storage, clock=clock
    )


@pytest.fixture()
def generated(db, storage, notifications, clock) -> GeneratedTaskService:
    return GeneratedTaskService(
        db, profiles=ProfileService(db), notifications=notifications, storage=storage, clock=clock
    )


class Caller:
    """Who the test client is signed in as."""

    def __init__(self, user_id: str = "alice") -> None:
        self.user_id = user_id


@pytest.fixture()
def caller() -> Caller:
    return Caller()


@pytest.fixture()
def client(db: FakeSupabase, storage: StorageService, caller: Caller):
    def session_override():
        user = {"id": caller.user_id, "email": f"{caller.user_id}@example.com"}
        return build_session_context(user, ProfileService(db))

    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_session_context] = session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
