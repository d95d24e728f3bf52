from __future__ import annotations

import os
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# TestClient connects as "testclient"; treat it as our reverse proxy
os.environ.setdefault("TRUSTED_PROXIES", "testclient")

import stockdrop.models  # noqa: E402,F401
from stockdrop.api.v1.deps import get_current_user  # noqa: E402
from stockdrop.core.database import Base, get_db  # noqa: E402
from stockdrop.main import app  # noqa: E402
from stockdrop.schemas.auth import AuthUser  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def user() -> AuthUser:
    return AuthUser(id=str(uuid.uuid4()), email="trader@example.com")


@pytest.fixture
def client(db_session, user):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: user
    # Distinct forwarded client per test keeps the shared rate limiter out of the way
    headers = {"X-Forwarded-For": f"10.0.{uuid.uuid4().int % 250}.{uuid.uuid4().int % 250}"}
    try:
        yield TestClient(app, headers=headers)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db_session):
    app.dependency_overrides[get_db] = lambda: db_session
    headers = {"X-Forwarded-For": f"10.1.{uuid.uuid4().int % 250}.{uuid.uuid4().int % 250}"}
    try:
        yield TestClient(app, headers=headers)
    finally:
        app.dependency_overrides.clear()
