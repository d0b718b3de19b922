# health_records/errors.py
"""
Error types shared by the validator, the metrics engine, the stores and the
service. Each one knows the HTTP status it is reported with, so the API
layer only needs a single exception handler.
"""

from typing import Any, Dict, Optional


class HealthRecordError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(HealthRecordError):
    """Missing, non-numeric or non-positive request fields."""

    status_code = 400


class InvalidInput(ValidationError, ValueError):
    """Raised by the metrics engine for physically impossible biometrics."""


class RecordNotFoundError(HealthRecordError):
    status_code = 404

    def __init__(self, record_id: Any):
        super().__init__("Health record not found")
        self.record_id = record_id


class StorageError(HealthRecordError):
    """The persistence layer failed; the underlying message goes to details."""

    status_code = 500

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(f"Failed to {operation}", details)
        self.operation = operation
