import os
import tempfile
from datetime import date

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUDIT_LOG_DIR", tempfile.mkdtemp(prefix="kapunungan-audit-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import get_db
from app.main import app
from app.models import Base
from app.services.member import create_member
from app.services.period import create_period


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def open_period(db):
    return create_period(db, "JAN 2026", date(2026, 1, 1))


@pytest.fixture
def make_member(db):
    def _make(first_name="Juan", last_name="Dela Cruz", status="active"):
        return create_member(db, first_name, last_name, status)
    return _make


@pytest.fixture
def fail_inserts():
    """Make every INSERT of the given model fail at flush time, like a lost connection."""
    registered = []

    def _fail(model):
        def before_insert(mapper, connection, target):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        event.listen(model, "before_insert", before_insert)
        registered.append((model, before_insert))

    yield _fail
    for model, listener in registered:
        event.remove(model, "before_insert", listener)
