"""Pytest configuration and fixtures."""
import os

# Set test environment before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_JWT_PUBLIC_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["GEMINI_API_KEY"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["STRIPE_TEST_WEBHOOK_ENABLED"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend import app
from mockview.database import Base, get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models import User
from mockview.services import llm

USER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_USER_ID = "22222222-2222-4222-8222-222222222222"


class FakeLLM:
    """Stands in for ``llm.generate_text``; replies are queued per test."""

    def __init__(self):
        self.replies = []
        self.prompts = []

    def queue(self, *replies):
        self.replies.extend(replies)

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("Unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def db():
    """A fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def user(db):
    row = User(id=USER_ID, email="candidate@example.com", full_name="Casey Candidate", credits=5)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def other_user(db):
    row = User(id=OTHER_USER_ID, email="other@example.com", full_name="Other Person", credits=0)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def anon_client(db):
    """Client with the test database but real token checking."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def client(db, user):
    """Client authenticated as ``user``."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        credits=user.credits,
        access_token="test-token",
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(llm, "generate_text", fake)
    return fake
