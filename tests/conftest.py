import time

import pytest
from werkzeug.security import generate_password_hash

from app.riel import create_app
from app.riel.auth import _login_attempts
from app.riel.db import session_scope
from app.riel.mailer import Mailer
from app.riel.models import Base, User


class RecordingMailer(Mailer):
    """Keeps every message instead of logging it."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, *, to: str, subject: str, html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


@pytest.fixture(autouse=True)
def _reset_login_rate_limit():
    _login_attempts.clear()
    yield
    _login_attempts.clear()


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("CSRF_ENABLED", "0")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setenv("CAMPAIGN_DELIVERY_MODE", "inline")
    monkeypatch.setenv("SITE_URL", "https://rielfilms.test")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    app.extensions["mailer"] = RecordingMailer()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        s.add_all(
            [
                User(name="Ada Admin", email="admin@example.com", password_hash=generate_password_hash("pw"), role="admin"),
                User(name="Ed Editor", email="editor@example.com", password_hash=generate_password_hash("pw"), role="editor"),
            ]
        )
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, email="admin@example.com", password="pw"):
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.json
    return r.json


def user_id(app, email):
    with session_scope(app) as s:
        return s.query(User).filter(User.email == email).one().id


@pytest.fixture()
def admin(app):
    c = app.test_client()
    login(c)
    return c


@pytest.fixture()
def editor(app):
    c = app.test_client()
    login(c, "editor@example.com")
    return c


@pytest.fixture()
def user_ids(app):
    return {
        "admin": user_id(app, "admin@example.com"),
        "editor": user_id(app, "editor@example.com"),
    }


@pytest.fixture()
def new_york_tz(monkeypatch):
    """Runs the test with a non-UTC local clock."""
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
