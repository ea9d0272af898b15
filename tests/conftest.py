import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from poker_tracker.main import app
from poker_tracker.runtime import get_service
from poker_tracker.service import SessionService
from poker_tracker.storage import models  # noqa: F401
from poker_tracker.storage.database import Base
from poker_tracker.storage.repository import SessionRepository


def make_test_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def repo() -> SessionRepository:
    return SessionRepository(make_test_session_factory())


@pytest.fixture
def service(repo: SessionRepository) -> SessionService:
    return SessionService(repo)


@pytest.fixture
def client(service: SessionService):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
