import re

import pytest

from adminnotices.models import Settings
from adminnotices.notices import NoticeQueue
from adminnotices.server import create_app
from adminnotices.store import MemoryStore

_NONCE_RE = re.compile(r'"nonce": "([^"]+)"')


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def queue(store):
    return NoticeQueue(store, "admin_notices")


@pytest.fixture()
def app(store):
    app = create_app(Settings(secret_key="test-secret"), store=store)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def app_queue(app):
    return app.extensions["admin_notices"].get_queue(app)


@pytest.fixture()
def nonce(client):
    """Load the dashboard once so the session holds a nonce uid, and return the nonce."""
    resp = client.get("/")
    match = _NONCE_RE.search(resp.get_data(as_text=True))
    assert match, "dashboard did not embed a nonce"
    return match.group(1)
