# health_records/service.py
"""
Health record lifecycle.

    API (main.py) -> HealthRecordService -> HealthRecordStore -> database

Every write goes validate -> compute BMI/category -> store, so a stored
record's bmi and bmi_category always match its height and weight. Reads
trust the stored values and never recompute them.

Existence checks and writes are separate store calls with no transaction or
lock around them: concurrent writes to the same id are last-writer-wins.
"""

import logging
from typing import Any, List, Mapping

from .errors import RecordNotFoundError, ValidationError
from .rules import (
    classify_bmi,
    compute_bmi,
    health_status,
    ideal_weight_range,
    recommend,
)
from .schemas import (
    HealthAnalysis,
    HealthRecord,
    HealthRecordInput,
    HealthRecordWithAnalysis,
    IdealWeightRange,
    MessageResponse,
    RecordAnalysis,
)
from .store import HealthRecordStore
from .validation import validate_payload

logger = logging.getLogger(__name__)


def _derive_fields(data: HealthRecordInput) -> dict:
    bmi = compute_bmi(data.height, data.weight)
    return {
        "name": data.name,
        "age": data.age,
        "height": data.height,
        "weight": data.weight,
        "bmi": bmi,
        "bmi_category": classify_bmi(bmi),
    }


def _with_analysis(record: HealthRecord) -> HealthRecordWithAnalysis:
    analysis = RecordAnalysis(
        bmi=record.bmi,
        category=record.bmi_category,
        recommendation=recommend(record.bmi),
    )
    return HealthRecordWithAnalysis(**record.model_dump(), analysis=analysis)


class HealthRecordService:
    def __init__(self, store: HealthRecordStore):
        """
        The store is injected; the service never opens or closes it.
        """
        self.store = store

    def _validate(self, payload: Mapping[str, Any]) -> HealthRecordInput:
        try:
            return validate_payload(payload)
        except ValidationError as e:
            logger.warning("Rejected health record input: %s (%s)", e.message, e.details or "-")
            raise

    def _find(self, record_id: int) -> HealthRecord:
        try:
            return self.store.find_by_id(record_id)
        except RecordNotFoundError:
            logger.warning("Health record %s not found", record_id)
            raise

    def list_records(self) -> List[HealthRecord]:
        return self.store.find_all()

    def get_record(self, record_id: int) -> HealthRecord:
        return self._find(record_id)

    def create_record(self, payload: Mapping[str, Any]) -> HealthRecordWithAnalysis:
        data = self._validate(payload)
        record = self.store.insert(_derive_fields(data))
        logger.info(
            "Created health record %s (bmi=%s, %s)", record.id, record.bmi, record.bmi_category
        )
        return _with_analysis(record)

    def update_record(self, record_id: int, payload: Mapping[str, Any]) -> HealthRecordWithAnalysis:
        # 404 takes precedence over a bad body
        self._find(record_id)
        data = self._validate(payload)
        record = self.store.replace(record_id, _derive_fields(data))
        logger.info(
            "Updated health record %s (bmi=%s, %s)", record.id, record.bmi, record.bmi_category
        )
        return _with_analysis(record)

    def delete_record(self, record_id: int) -> MessageResponse:
        self._find(record_id)
        self.store.remove(record_id)
        logger.info("Deleted health record %s", record_id)
        return MessageResponse(message="Health record deleted successfully")

    def analyze_record(self, record_id: int) -> HealthAnalysis:
        """
        Analysis built from the stored bmi / bmi_category / height.
        bmi is not recomputed from weight here.
        """
        record = self._find(record_id)
        ideal = ideal_weight_range(record.height)
        return HealthAnalysis(
            bmi=record.bmi,
            category=record.bmi_category,
            recommendation=recommend(record.bmi),
            health_status=health_status(record.bmi),
            ideal_weight_range=IdealWeightRange(**ideal),
        )
