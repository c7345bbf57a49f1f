"""Validation layer for form submissions."""

from chart_form.validation.checks import FieldValidator, ValidationResult
from chart_form.validation.semantic import (
    VITAL_RANGES,
    check_clinical_scale,
    check_medication_dosage,
    check_vital_sign,
    is_valid_dosage,
)

__all__ = [
    "FieldValidator",
    "ValidationResult",
    "VITAL_RANGES",
    "check_clinical_scale",
    "check_medication_dosage",
    "check_vital_sign",
    "is_valid_dosage",
]
