"""
RepoCerti - test configuration and fixtures
"""
import itertools
from datetime import datetime, timedelta

import pytest

from app import create_app
from extensions import db
from services import store


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel; replies are queued per test."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def generate_content(self, contents, generation_config=None):
        self.calls.append({"contents": contents, "generation_config": generation_config})
        reply = self.replies.pop(0) if self.replies else "{}"
        if isinstance(reply, Exception):
            raise reply
        return FakeResponse(reply)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SEED_DEMO_USERS": False,
        "RATELIMIT_ENABLED": False,
        "GOOGLE_API_KEY": None,
        "CLOUD_UPLOAD_URL": "https://tmpfiles.org/api/v1/upload",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_model(app):
    model = FakeModel()
    app.config["AI_MODEL"] = model
    app.config["AI_ENABLED"] = True
    return model


@pytest.fixture
def clock(monkeypatch):
    """Strictly increasing creation timestamps so newest-first order is deterministic."""
    ticks = itertools.count()
    start = datetime(2024, 1, 1, 9, 0, 0)
    monkeypatch.setattr("services.store.utcnow", lambda: start + timedelta(seconds=next(ticks)))


@pytest.fixture
def make_user(ctx):
    def _make(name, role="student", designation=None, password="password123"):
        return store.create_user(name.title(), f"{name}@demo.com", password, role, designation, user_id=name)
    return _make


@pytest.fixture
def org(make_user):
    """One user per role/designation."""
    return {
        "student": make_user("student"),
        "student2": make_user("student2"),
        "faculty": make_user("faculty", "staff", "faculty"),
        "hod": make_user("hod", "staff", "hod"),
        "dean": make_user("dean", "staff", "dean"),
        "principal": make_user("principal", "staff", "principal"),
    }


@pytest.fixture
def login(client):
    def _login(email, password="password123"):
        return client.post("/api/auth/login", json={"email": email, "password": password})
    return _login
