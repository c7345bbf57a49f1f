"""Complex value interpreter.

Parses domain-specific encoded values (blood pressure pairs, dosage
strings, timestamped vital readings) into structured records. Handlers
are registered per subtype; a value no handler understands is kept,
wrapped as a single-element list, rather than dropped.
"""

import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from chart_form.registry.models import ComplexSubtype

BLOOD_PRESSURE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
DOSAGE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]+)")


class Unrecognized(Exception):
    """Raised by a handler when a value does not have its expected shape."""

    pass


def wrap(value: Any) -> list | dict:
    """Fallback form: structured values as-is, scalars as a one-element list."""
    if isinstance(value, (list, dict)):
        return value
    return [value]


def parse_blood_pressure(value: Any, now: datetime | None) -> dict[str, Any]:
    if not isinstance(value, str):
        raise Unrecognized
    match = BLOOD_PRESSURE_PATTERN.match(value)
    if not match:
        raise Unrecognized
    return {
        "systolic": int(match.group(1)),
        "diastolic": int(match.group(2)),
        "unit": "mmHg",
    }


def parse_medication_dosage(value: Any, now: datetime | None) -> dict[str, Any]:
    if not isinstance(value, str):
        raise Unrecognized
    match = DOSAGE_PATTERN.match(value)
    if not match:
        raise Unrecognized
    return {
        "amount": float(match.group(1)),
        "unit": match.group(2),
        "original_text": value,
    }


def normalize_vital_signs_set(value: Any, now: datetime | None) -> list[dict[str, Any]]:
    if not isinstance(value, list) or not all(isinstance(entry, Mapping) for entry in value):
        raise Unrecognized
    default_timestamp = now.isoformat() if now is not None else None
    return [
        {
            "value": entry.get("value"),
            "unit": entry.get("unit"),
            "timestamp": entry.get("timestamp") or default_timestamp,
        }
        for entry in value
    ]


Handler = Callable[[Any, datetime | None], Any]

# Subtypes whose input is itself structured; the coercer hands these to the
# interpreter instead of passing the collection through.
STRUCTURED_INPUT_SUBTYPES: set[ComplexSubtype] = {ComplexSubtype.VITAL_SIGNS_SET}

HANDLERS: dict[ComplexSubtype, Handler] = {
    ComplexSubtype.BLOOD_PRESSURE: parse_blood_pressure,
    ComplexSubtype.MEDICATION_DOSAGE: parse_medication_dosage,
    ComplexSubtype.VITAL_SIGNS_SET: normalize_vital_signs_set,
}


class ComplexValueInterpreter:
    """Interprets encoded values according to a complex subtype."""

    def __init__(self, handlers: dict[ComplexSubtype, Handler] | None = None) -> None:
        """Initialize the interpreter.

        Args:
            handlers: Optional subtype -> handler table. Defaults to HANDLERS.
        """
        self.handlers = handlers if handlers is not None else HANDLERS

    def interpret(
        self,
        value: Any,
        subtype: ComplexSubtype | str | None,
        now: datetime | None = None,
    ) -> Any:
        """Parse a raw value into its structured form.

        Args:
            value: The raw value.
            subtype: The complex subtype declared by the field mapping.
            now: Default timestamp for entries that carry none.

        Returns:
            The structured value, or the wrapped raw value when the subtype
            is unknown or the value does not have the expected shape.
        """
        try:
            subtype = ComplexSubtype(subtype) if subtype is not None else None
        except ValueError:
            return wrap(value)

        handler = self.handlers.get(subtype) if subtype is not None else None
        if handler is None:
            return wrap(value)

        try:
            return handler(value, now)
        except Unrecognized:
            return wrap(value)
