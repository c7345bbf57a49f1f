"""Semantic validators for clinical field archetypes.

These are not generic schema rules: each knows what a plausible value
looks like for one kind of clinical field.
"""

import re
from typing import Any

from chart_form.core.values import to_number
from chart_form.registry.models import FieldDefinition

# Physiologically plausible ranges keyed by vital-sign name
VITAL_RANGES: dict[str, tuple[float, float]] = {
    "temperature": (35.0, 42.0),
    "heart_rate": (30, 200),
    "systolic_bp": (70, 250),
    "diastolic_bp": (40, 150),
    "respiratory_rate": (8, 40),
    "oxygen_saturation": (70, 100),
}

DOSAGE_PATTERN = re.compile(
    r"^\d+(\.\d+)?\s*(mg|ml|g|tablet|capsule|unit)s?$",
    re.IGNORECASE,
)


def check_vital_sign(value: Any, field: FieldDefinition) -> str | None:
    """Check a vital-sign reading against its plausible range.

    The vital name comes from `vital_type`, falling back to the field id.
    Unknown vital names only need to be numeric.

    Returns:
        A failure reason, or None if the value is acceptable.
    """
    number = to_number(value)
    if number is None:
        return f"The {field.display_name} must be a number."

    vital_type = field.vital_type or field.id
    bounds = VITAL_RANGES.get(vital_type)
    if bounds is None:
        return None

    low, high = bounds
    if not (low <= number <= high):
        return (
            f"The {field.display_name} value {value} is outside the plausible "
            f"{vital_type} range [{low}, {high}]."
        )
    return None


def is_valid_dosage(value: Any) -> bool:
    """Whether a value is a dosage string such as '500mg' or '2.5 ml'."""
    if not isinstance(value, str):
        return False
    return DOSAGE_PATTERN.match(value.strip()) is not None


def check_medication_dosage(value: Any, field: FieldDefinition) -> str | None:
    if not is_valid_dosage(value):
        return (
            f"The {field.display_name} must be a dosage such as '500mg' or '2.5 ml' "
            "(units: mg, ml, g, tablet, capsule, unit)."
        )
    return None


def check_clinical_scale(value: Any, field: FieldDefinition) -> str | None:
    """Check a clinical scale value (e.g., pain 0-10)."""
    number = to_number(value)
    if number is None or not number.is_integer():
        return f"The {field.display_name} must be a whole number."

    if not (field.min_scale <= number <= field.max_scale):
        return (
            f"The {field.display_name} must be between "
            f"{field.min_scale} and {field.max_scale}."
        )
    return None
