# health_records/schemas.py
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Upper bounds keep values inside what the BMI maths and the database can hold.
MAX_AGE = 150
MAX_HEIGHT_CM = 300
MAX_WEIGHT_KG = 1000


class HealthRecordInput(BaseModel):
    """
    Request body for create / update: {name, age, height, weight}.
    Fields are Optional so a missing one can be reported by name instead of
    failing validation; blank strings count as missing.
    """
    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    name: Optional[str] = None
    age: Optional[int] = Field(None, gt=0, le=MAX_AGE, description="Age in years")
    height: Optional[float] = Field(
        None, gt=0, le=MAX_HEIGHT_CM, description="Height in centimetres, e.g. 170"
    )
    weight: Optional[float] = Field(
        None, gt=0, le=MAX_WEIGHT_KG, description="Weight in kg, e.g. 65.0"
    )

    @field_validator("name", "age", "height", "weight", mode="before")
    @classmethod
    def blank_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("age", "height", "weight", mode="before")
    @classmethod
    def reject_bool(cls, value):
        # lax mode would turn true/false into 1/0
        if isinstance(value, bool):
            raise ValueError("must be a number")
        return value


class CamelModel(BaseModel):
    """
    snake_case in Python, camelCase on the wire (bmi_category -> bmiCategory).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthRecord(CamelModel):
    """
    One stored record, as returned by every store implementation.
    """
    id: int
    name: str
    age: int
    height: float = Field(..., description="Height in centimetres, e.g. 170")
    weight: float = Field(..., description="Weight in kg, e.g. 65.0")
    bmi: float
    bmi_category: str
    created_at: Optional[dt.datetime] = None


class RecordAnalysis(CamelModel):
    """
    Short analysis attached to create / update responses
    """
    bmi: float
    category: str
    recommendation: str


class HealthRecordWithAnalysis(HealthRecord):
    analysis: RecordAnalysis


class IdealWeightRange(CamelModel):
    min: float
    max: float


class HealthAnalysis(CamelModel):
    """
    GET /api/health-records/{id}/analysis result
    """
    bmi: float
    category: str
    recommendation: str
    health_status: str
    ideal_weight_range: IdealWeightRange


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
