from __future__ import annotations

import io
import itertools
from datetime import datetime, timedelta

import pytest

from filamenthub import create_app
from filamenthub.auth.jwt import encode
from filamenthub.config import TestConfig
from filamenthub.domain.profile import Profile

_ids = itertools.count(1)


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig(STORAGE_LOCAL_PATH=str(tmp_path / "storage")))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth(app):
    def _headers(user_id: str) -> dict:
        with app.app_context():
            token = encode({"sub": user_id})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def upload(client, auth):
    """Upload a profile through the API and return its JSON body."""
    def _upload(name: str, user: str = "alice", producer: str = "Acme", material: str = "PLA",
                printers: str = "", content: bytes = b'{"filament_type": ["PLA"]}', filename: str = "profile.json"):
        resp = client.post(
            "/api/profiles/",
            data={
                "name": name,
                "producer": producer,
                "material": material,
                "description": f"{name} settings",
                "printers": printers,
                "file": (io.BytesIO(content), filename),
            },
            headers=auth(user),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]
    return _upload


@pytest.fixture
def make_profile():
    base = datetime(2025, 1, 1, 12, 0, 0)

    def _make(profile_id: str | None = None, **fields) -> Profile:
        n = next(_ids)
        fields.setdefault("name", f"Profile {n}")
        fields.setdefault("producer", "Acme")
        fields.setdefault("material", "PLA")
        fields.setdefault("uploaded_at", base + timedelta(minutes=n))
        return Profile(id=profile_id or f"p{n}", **fields)
    return _make
