import os

# Settings are read at import time, so the environment must be set first.
os.environ["ENV"] = "test"
os.environ["API_KEY"] = "test-api-key"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.db import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import create_app  # noqa: E402

from tests.fixtures.conversation_fixtures import *  # noqa: E402,F401,F403
from tests.fixtures.message_fixtures import *  # noqa: E402,F401,F403

API_KEY = os.environ["API_KEY"]


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test on the in-memory engine."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """TestClient sharing the test session and sending a valid x-api-key."""
    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"x-api-key": API_KEY}) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def anonymous_client(db):
    """TestClient without any API key header."""
    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
