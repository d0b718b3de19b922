"""
Both store implementations are run through the same contract tests.
"""
import datetime as dt

import pytest

from health_records.database import Base, engine
from health_records.errors import RecordNotFoundError, StorageError
from health_records.store import InMemoryHealthRecordStore, SqlAlchemyHealthRecordStore


def _fields(name="Alice", height=170.0, weight=65.0, bmi=22.5, category="Normal weight"):
    return {
        "name": name,
        "age": 30,
        "height": height,
        "weight": weight,
        "bmi": bmi,
        "bmi_category": category,
    }


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request):
    if request.param == "memory":
        return InMemoryHealthRecordStore()
    return SqlAlchemyHealthRecordStore(request.getfixturevalue("db_session"))


def test_insert_assigns_id_and_created_at(store):
    record = store.insert(_fields())
    assert record.id is not None
    assert record.created_at is not None
    assert record.bmi_category == "Normal weight"


def test_find_by_id_returns_stored_record(store):
    created = store.insert(_fields())
    found = store.find_by_id(created.id)
    assert found == created


def test_find_by_id_unknown(store):
    with pytest.raises(RecordNotFoundError):
        store.find_by_id(999)


def test_find_all_newest_first(store):
    first = store.insert(_fields(name="first"))
    second = store.insert(_fields(name="second"))
    third = store.insert(_fields(name="third"))

    ids = [r.id for r in store.find_all()]
    assert ids == [third.id, second.id, first.id]


def test_replace_keeps_identity(store):
    created = store.insert(_fields())
    updated = store.replace(
        created.id, _fields(name="Alice B", height=180.0, weight=90.0, bmi=27.8, category="Overweight")
    )

    assert updated.id == created.id
    assert updated.created_at == created.created_at
    assert updated.name == "Alice B"
    assert updated.bmi == 27.8
    assert store.find_by_id(created.id) == updated


def test_replace_ignores_identity_fields(store):
    created = store.insert(_fields())
    fields = dict(_fields(weight=70.0, bmi=24.2), id=12345, created_at=None)
    updated = store.replace(created.id, fields)
    assert updated.id == created.id
    assert updated.created_at == created.created_at


def test_replace_unknown(store):
    with pytest.raises(RecordNotFoundError):
        store.replace(42, _fields())
    assert store.find_all() == []


def test_remove(store):
    created = store.insert(_fields())
    store.remove(created.id)
    with pytest.raises(RecordNotFoundError):
        store.find_by_id(created.id)
    with pytest.raises(RecordNotFoundError):
        store.remove(created.id)


def test_memory_store_returns_copies():
    store = InMemoryHealthRecordStore()
    created = store.insert(_fields())
    created.bmi = 99.9
    assert store.find_by_id(created.id).bmi == 22.5


def test_sqlalchemy_errors_become_storage_errors(db_session):
    store = SqlAlchemyHealthRecordStore(db_session)
    Base.metadata.drop_all(bind=engine)

    with pytest.raises(StorageError) as exc:
        store.find_all()

    assert exc.value.message == "Failed to fetch health records"
    assert "health_records" in exc.value.details
    assert exc.value.status_code == 500


def test_created_at_is_utc(store):
    record = store.insert(_fields())
    assert record.created_at.utcoffset() == dt.timedelta(0)
    assert store.find_all()[0].created_at.utcoffset() == dt.timedelta(0)
