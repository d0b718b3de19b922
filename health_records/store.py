# health_records/store.py
"""
Persistence for health records.

HealthRecordStore is the contract the service depends on. Two
implementations:

- SqlAlchemyHealthRecordStore: wraps one SQLAlchemy Session (one per request)
- InMemoryHealthRecordStore:   dict-backed, for development and tests

Unknown ids raise RecordNotFoundError; database failures raise StorageError.
"""

import datetime as dt
import itertools
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import RecordNotFoundError, StorageError
from .schemas import HealthRecord

logger = logging.getLogger(__name__)

# Everything except id / created_at, which the store owns.
MUTABLE_FIELDS = ("name", "age", "height", "weight", "bmi", "bmi_category")


class HealthRecordStore(Protocol):
    def insert(self, fields: Mapping[str, Any]) -> HealthRecord: ...
    def find_all(self) -> List[HealthRecord]: ...
    def find_by_id(self, record_id: int) -> HealthRecord: ...
    def replace(self, record_id: int, fields: Mapping[str, Any]) -> HealthRecord: ...
    def remove(self, record_id: int) -> None: ...


def _mutable(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: fields[name] for name in MUTABLE_FIELDS}


def _as_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    # SQLite stores CURRENT_TIMESTAMP (UTC) without an offset
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _to_schema(row: models.HealthRecord) -> HealthRecord:
    return HealthRecord(
        id=row.id,
        name=row.name,
        age=row.age,
        height=row.height,
        weight=row.weight,
        bmi=row.bmi,
        bmi_category=row.bmi_category,
        created_at=_as_utc(row.created_at),
    )


class SqlAlchemyHealthRecordStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error while trying to %s", operation, exc_info=True)
            raise StorageError(operation, str(e)) from e

    def _get_row(self, record_id: int) -> models.HealthRecord:
        row = (
            self.db.query(models.HealthRecord)
            .filter(models.HealthRecord.id == record_id)
            .first()
        )
        if row is None:
            raise RecordNotFoundError(record_id)
        return row

    def insert(self, fields: Mapping[str, Any]) -> HealthRecord:
        with self._guard("create health record"):
            row = models.HealthRecord(**_mutable(fields))
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return _to_schema(row)

    def find_all(self) -> List[HealthRecord]:
        with self._guard("fetch health records"):
            rows = (
                self.db.query(models.HealthRecord)
                .order_by(models.HealthRecord.created_at.desc(), models.HealthRecord.id.desc())
                .all()
            )
            return [_to_schema(r) for r in rows]

    def find_by_id(self, record_id: int) -> HealthRecord:
        with self._guard("fetch health record"):
            return _to_schema(self._get_row(record_id))

    def replace(self, record_id: int, fields: Mapping[str, Any]) -> HealthRecord:
        with self._guard("update health record"):
            row = self._get_row(record_id)
            for name, value in _mutable(fields).items():
                setattr(row, name, value)
            self.db.commit()
            self.db.refresh(row)
            return _to_schema(row)

    def remove(self, record_id: int) -> None:
        with self._guard("delete health record"):
            row = self._get_row(record_id)
            self.db.delete(row)
            self.db.commit()


class InMemoryHealthRecordStore:
    """
    Keeps records in a dict. Data is lost when the process stops.
    Copies go in and out so callers cannot mutate stored state.
    """

    def __init__(self) -> None:
        self._records: Dict[int, HealthRecord] = {}
        self._ids = itertools.count(1)

    def insert(self, fields: Mapping[str, Any]) -> HealthRecord:
        record = HealthRecord(
            id=next(self._ids),
            created_at=dt.datetime.now(dt.timezone.utc),
            **_mutable(fields),
        )
        self._records[record.id] = record
        return record.model_copy()

    def find_all(self) -> List[HealthRecord]:
        records = sorted(
            self._records.values(),
            key=lambda r: (r.created_at, r.id),
            reverse=True,
        )
        return [r.model_copy() for r in records]

    def find_by_id(self, record_id: int) -> HealthRecord:
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record.model_copy()

    def replace(self, record_id: int, fields: Mapping[str, Any]) -> HealthRecord:
        current = self.find_by_id(record_id)
        updated = current.model_copy(update=_mutable(fields))
        self._records[record_id] = updated
        return updated.model_copy()

    def remove(self, record_id: int) -> None:
        if record_id not in self._records:
            raise RecordNotFoundError(record_id)
        del self._records[record_id]
