# health_records/rules.py
"""
Rule-based metrics engine:
- BMI from height (cm) + weight (kg)
- BMI category (WHO adult thresholds, obesity classes merged into "Obese")
- Fixed recommendation text and a coarser health status per category
- Ideal weight range for a given height

Everything here is pure: no storage, no logging, no shared state.
"""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict

from .errors import InvalidInput


UNDERWEIGHT = "Underweight"
NORMAL_WEIGHT = "Normal weight"
OVERWEIGHT = "Overweight"
OBESE = "Obese"

RECOMMENDATIONS: Dict[str, str] = {
    UNDERWEIGHT: (
        "Your BMI is below the healthy range. Consider discussing healthy "
        "weight gain with a healthcare provider or dietitian."
    ),
    NORMAL_WEIGHT: (
        "Your BMI is in the healthy range. Maintain it with balanced meals "
        "and regular physical activity."
    ),
    OVERWEIGHT: (
        "Your BMI is above the healthy range. Consider increasing physical "
        "activity and reducing high-calorie foods and sugary drinks."
    ),
    OBESE: (
        "Your BMI is in the obese range. Please consult a healthcare "
        "provider for a personalised weight management plan."
    ),
}

HEALTH_STATUS: Dict[str, str] = {
    UNDERWEIGHT: "Needs attention",
    NORMAL_WEIGHT: "Healthy",
    OVERWEIGHT: "Caution",
    OBESE: "High risk",
}

# Ideal range bounds. The upper one is 24.9, not the 25.0 Overweight cut-off.
IDEAL_BMI_MIN = 18.5
IDEAL_BMI_MAX = 24.9


def round_one_decimal(value: float) -> float:
    """Round half away from zero (Python's round() is banker's rounding)."""
    if not math.isfinite(value):
        raise InvalidInput("Value out of range", f"Got {value!r}")
    try:
        return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # more digits than the decimal context can hold
        raise InvalidInput("Value out of range", f"Got {value!r}") from None


def compute_bmi(height_cm: float, weight_kg: float) -> float:
    if height_cm <= 0 or weight_kg <= 0:
        raise InvalidInput("Height and weight must be positive numbers")

    height_m = height_cm / 100
    try:
        bmi = weight_kg / (height_m ** 2)
    except (OverflowError, ZeroDivisionError):
        raise InvalidInput("BMI is out of range for this height and weight") from None
    if not math.isfinite(bmi):
        raise InvalidInput("BMI is out of range for this height and weight")

    bmi = round_one_decimal(bmi)
    if bmi <= 0:
        raise InvalidInput("BMI is out of range for this height and weight")
    return bmi


def classify_bmi(bmi: float) -> str:
    """
    Map a BMI value to its category. Boundaries belong to the higher
    category: 18.5 is Normal weight, 25.0 Overweight, 30.0 Obese.
    """
    if bmi < 18.5:
        return UNDERWEIGHT
    elif bmi < 25:
        return NORMAL_WEIGHT
    elif bmi < 30:
        return OVERWEIGHT
    else:
        return OBESE


def recommend(bmi: float) -> str:
    return RECOMMENDATIONS[classify_bmi(bmi)]


def health_status(bmi: float) -> str:
    return HEALTH_STATUS[classify_bmi(bmi)]


def ideal_weight_range(height_cm: float) -> Dict[str, float]:
    if height_cm <= 0:
        raise InvalidInput("Height must be a positive number")

    try:
        height_m_sq = (height_cm / 100) ** 2
    except OverflowError:
        raise InvalidInput("Height is out of range") from None
    return {
        "min": round_one_decimal(IDEAL_BMI_MIN * height_m_sq),
        "max": round_one_decimal(IDEAL_BMI_MAX * height_m_sq),
    }
