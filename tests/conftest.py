import os
from typing import Generator

# The app's own engine (used by startup table creation) must not touch a file DB
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from nextrade.config import Settings, get_settings
from nextrade.db import Base
from nextrade.main import app, get_db

TEST_SETTINGS = Settings(
    database_url="sqlite://",
    jwt_secret="test-secret",
    token_ttl_seconds=60 * 60 * 24,
    razorpay_key_id="rzp_test_key",
    razorpay_key_secret="rzp_test_secret",
    razorpay_base_url="https://razorpay.test/v1",
    currency="INR",
    log_level="WARNING",
)

PASSWORD = "s3cret-pass"


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture(scope="function")
def db_session() -> Generator:
    # Use in-memory SQLite with a single connection
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session):
    # Override dependencies to use the same session and fixed settings
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    def _signup(name: str, email: str, role: str, password: str = PASSWORD, **extra) -> dict:
        r = client.post("/api/signup", json={"name": name, "email": email, "password": password, "role": role, **extra})
        assert r.status_code == 201, r.text
        return r.json()["user"]
    return _signup


@pytest.fixture
def auth_headers(client):
    def _login(email: str, password: str = PASSWORD) -> dict:
        r = client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['token']}"}
    return _login
