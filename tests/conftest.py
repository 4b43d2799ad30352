"""Shared fixtures: isolated in-memory database and a recording dispatcher."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db, init_db
from app.main import create_app
from app.services.notifications import Connection, ConnectionClosed, NotificationDispatcher


class RecordingConnection(Connection):
    """Connection handle that keeps every message it is sent."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []
        self.closed = False

    def send(self, message: Dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionClosed("closed")
        self.messages.append(message)

    def events(self, event_type: str) -> List[Dict[str, Any]]:
        return [m["data"] for m in self.messages if m["event"] == event_type]


class BrokenConnection(Connection):
    """Connection handle whose transport fails on every send."""

    def __init__(self):
        self.attempts = 0

    def send(self, message: Dict[str, Any]) -> None:
        self.attempts += 1
        raise RuntimeError("transport failure")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher():
    return NotificationDispatcher()


@pytest.fixture
def connect(dispatcher):
    """Bind a recording connection to a user id, as a join frame would."""
    def _connect(user_id: int) -> RecordingConnection:
        connection = RecordingConnection()
        dispatcher.registry.add(connection)
        dispatcher.registry.bind(connection, user_id)
        return connection
    return _connect


@pytest.fixture
def app(session_factory, dispatcher):
    app = create_app(dispatcher)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register through the API; returns (user dict, token)."""
    counter = {"n": 0}

    def _register(user_type: str, name: str = None, email: str = None):
        counter["n"] += 1
        name = name or f"{user_type.title()} {counter['n']}"
        email = email or f"{user_type}{counter['n']}@example.com"
        response = client.post("/api/auth/register", json={
            "name": name,
            "email": email,
            "password": "s3cret-pass",
            "userType": user_type,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], body["token"]

    return _register


@pytest.fixture
def auth():
    """Build the bearer header for a token."""
    def _auth(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
    return _auth
