import os
import tempfile

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="portal-uploads-"))
os.environ.setdefault("BACKUP_INTERVAL_HOURS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from portal.core.db import SqliteStore, set_store
from portal.core.schema import ensure_schema
from portal.main import app


@pytest.fixture()
def store():
    store = SqliteStore(":memory:")
    ensure_schema(store)
    set_store(store)
    try:
        yield store
    finally:
        set_store(None)
        store.dispose()


@pytest.fixture()
def db_session(store):
    db = store.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(store):
    yield TestClient(app)


@pytest.fixture()
def submit(client):
    def _submit(user_email="user@example.com", type="E-Stamp", data=None, files=None):
        form = {"userEmail": user_email, "type": type, "data": data or "{}"}
        resp = client.post("/api/submit-form", data=form, files=files)
        assert resp.status_code == 200, resp.text
        return resp.json()["id"]

    return _submit
