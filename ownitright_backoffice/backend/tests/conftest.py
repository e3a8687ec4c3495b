# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile

# settings are read at import time, so the test database has to be chosen first
_DB_DIR = tempfile.mkdtemp(prefix="ownitright-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ["AUTH_MODE"] = "dev"
os.environ["RERA_AUTO_SYNC_MODE"] = "inline"
os.environ.pop("SUREPASS_API_KEY", None)
os.environ.pop("RERA_API_KEY", None)

from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from app.clients.rera_registry import ReraRegistryError, ReraRegistryResponse
from app.db import Base, SessionLocal, engine, init_db
from app.models import Property

init_db()


ADMIN_HEADERS = {"X-Admin-Email": "admin@ownitright.test", "X-Admin-Role": "admin"}
EDITOR_HEADERS = {"X-Admin-Email": "editor@ownitright.test", "X-Admin-Role": "editor"}
VIEWER_HEADERS = {"X-Admin-Email": "viewer@ownitright.test", "X-Admin-Role": "viewer"}


@pytest.fixture(autouse=True)
def _clean_tables():
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def app():
    from app.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_property(db):
    def _make(**overrides: Any) -> Property:
        data = {
            "name": "Prestige Lakeside Habitat",
            "type": "apartment",
            "developer": "Prestige Group",
            "status": "active",
            "area": "Varthur",
            "zone": "east",
            "address": "Varthur, East Bengaluru, Karnataka",
            "price": 145,
        }
        data.update(overrides)
        row = Property(**data)
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    return _make


class FakeReraClient:
    """Stands in for the registry: ids in `projects` verify, ids in `errors` raise."""

    def __init__(
        self,
        projects: Optional[dict[str, dict[str, Any]]] = None,
        errors: Optional[dict[str, str]] = None,
    ) -> None:
        self.projects = projects or {}
        self.errors = errors or {}
        self.calls: list[str] = []

    def enabled(self) -> bool:
        return True

    def verify(self, rera_id: str) -> ReraRegistryResponse:
        self.calls.append(rera_id)
        if rera_id in self.errors:
            raise ReraRegistryError(self.errors[rera_id])
        if rera_id not in self.projects:
            raise ReraRegistryError("RERA verification failed: project not found")
        data = {"rera_id": rera_id, **self.projects[rera_id]}
        raw = {"status": True, "message": "ok", "data": data}
        return ReraRegistryResponse(status=True, message="ok", data=data, raw=raw)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def registry_project(name: str, **extra: Any) -> dict[str, Any]:
    data = {
        "project_name": name,
        "promoter_name": "Prestige Estates Projects Ltd",
        "location": "Varthur",
        "district": "Bengaluru Urban",
        "project_type": "Residential Apartment",
        "project_status": "Under Construction",
        "compliance_status": "Active",
        "total_units": "412",
    }
    data.update(extra)
    return data
