"""Coercion of raw field values into typed observation values."""

from chart_form.coercion.coercer import ValueCoercer
from chart_form.coercion.complex import (
    HANDLERS,
    ComplexValueInterpreter,
    Unrecognized,
)

__all__ = [
    "ComplexValueInterpreter",
    "HANDLERS",
    "Unrecognized",
    "ValueCoercer",
]
