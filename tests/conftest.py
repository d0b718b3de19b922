"""
Shared pytest fixtures.

The API tests run against a throwaway SQLite file. DATABASE_URL has to be
set before health_records.config is imported, so it is done at module level.
"""
import os
import tempfile
from pathlib import Path

_TMP_DIR = tempfile.mkdtemp(prefix="health_records_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from health_records.database import Base, SessionLocal, engine
from health_records.main import app
from health_records.service import HealthRecordService
from health_records.store import InMemoryHealthRecordStore


@pytest.fixture
def reset_db():
    """Fresh, empty tables for every test that touches SQLite."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(reset_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(reset_db):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def memory_store():
    return InMemoryHealthRecordStore()


@pytest.fixture
def service(memory_store):
    return HealthRecordService(memory_store)


@pytest.fixture
def valid_payload():
    return {"name": "Alice", "age": 30, "height": 170, "weight": 65}
