"""Value coercer for mapped form fields.

Converts a raw field value into the representation its field mapping
declares. Coercion never raises: a value that cannot be represented comes
back as None so the caller can skip that one observation.
"""

from datetime import datetime
from typing import Any

from chart_form.coercion.complex import STRUCTURED_INPUT_SUBTYPES, ComplexValueInterpreter
from chart_form.core.values import parse_timestamp, to_number
from chart_form.registry.models import FieldMapping, ValueKind


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ValueCoercer:
    """Coerces raw values to typed observation values."""

    def __init__(self, interpreter: ComplexValueInterpreter | None = None) -> None:
        self.interpreter = interpreter or ComplexValueInterpreter()

    def coerce(
        self,
        value: Any,
        kind: ValueKind,
        mapping: FieldMapping | None = None,
        now: datetime | None = None,
    ) -> Any:
        """Coerce a raw value to the given value kind.

        Args:
            value: The raw value from the data bag.
            kind: Target value kind.
            mapping: The field mapping (supplies the complex subtype).
            now: Default timestamp for complex entries without one.

        Returns:
            The typed value, or None if the value cannot be represented.
        """
        if kind in (ValueKind.STRING, ValueKind.TEXT):
            return _stringify(value)

        if kind == ValueKind.NUMBER:
            return to_number(value)

        if kind == ValueKind.TIMESTAMP:
            return parse_timestamp(value)

        if kind == ValueKind.COMPLEX:
            return self._coerce_complex(value, mapping, now)

        return None

    def _coerce_complex(
        self,
        value: Any,
        mapping: FieldMapping | None,
        now: datetime | None,
    ) -> Any:
        subtype = mapping.complex_type if mapping is not None else None

        if isinstance(value, (list, dict)) and subtype not in STRUCTURED_INPUT_SUBTYPES:
            return value

        if subtype is not None:
            return self.interpreter.interpret(value, subtype, now=now)

        return [value]
