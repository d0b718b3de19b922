# health_records/validation.py
"""
Validation of incoming biometrics.

JSON bodies are loosely typed ("30", 30, 30.0 ...); HealthRecordInput does
the coercion and this module turns pydantic's errors into the API's
ValidationError messages.
"""

from typing import Any, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .schemas import HealthRecordInput


REQUIRED_FIELDS = ("name", "age", "height", "weight")

POSITIVE_MESSAGE = "Age, height, and weight must be positive numbers"

_NUMBER_ERRORS = {
    "int_type",
    "int_parsing",
    "int_parsing_size",
    "float_type",
    "float_parsing",
    "value_error",
}


def _translate(exc: PydanticValidationError) -> ValidationError:
    """Pick the most useful pydantic error and phrase it for the API."""
    errors = exc.errors()
    # a type / range problem is reported before a plain "not positive"
    for err in errors:
        field = str(err["loc"][0]) if err["loc"] else "input"
        kind = err["type"]
        given = f"Got {err.get('input')!r}"
        if kind == "greater_than":
            continue
        if kind == "string_type":
            return ValidationError(f"{field} must be a string", given)
        if kind == "int_from_float":
            return ValidationError(f"{field} must be a whole number", given)
        if kind == "finite_number":
            return ValidationError(f"{field} must be a finite number", given)
        if kind == "less_than_equal":
            return ValidationError(
                f"{field} is out of range", f"Must be at most {err['ctx']['le']}"
            )
        if kind in _NUMBER_ERRORS:
            return ValidationError(f"{field} must be a number", given)
        return ValidationError(f"{field} is invalid", err.get("msg"))
    return ValidationError(POSITIVE_MESSAGE)


def validate_biometrics(name: Any, age: Any, height: Any, weight: Any) -> HealthRecordInput:
    """
    Check that all four fields are present and physically valid.

    Raises ValidationError:
    - "<field> must be a number" (or "a whole number" / "a finite number")
      for values pydantic cannot coerce
    - "<field> is out of range" above the MAX_* bounds in schemas.py
    - "Age, height, and weight must be positive numbers" for values <= 0
    - "All fields are required ..." when any field is absent or empty
      (details lists the missing ones)
    """
    try:
        data = HealthRecordInput.model_validate(
            {"name": name, "age": age, "height": height, "weight": weight}
        )
    except PydanticValidationError as e:
        raise _translate(e) from None

    missing: List[str] = [f for f in REQUIRED_FIELDS if getattr(data, f) is None]
    if missing:
        raise ValidationError(
            "All fields are required: " + ", ".join(REQUIRED_FIELDS),
            "Missing: " + ", ".join(missing),
        )
    return data


def validate_payload(payload: Mapping[str, Any]) -> HealthRecordInput:
    """Read the four biometric fields out of a JSON object and validate them."""
    return validate_biometrics(
        payload.get("name"),
        payload.get("age"),
        payload.get("height"),
        payload.get("weight"),
    )
