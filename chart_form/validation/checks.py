"""Field validation for form submissions.

Builds a rule set per field from the template and applies it to a data
bag. Every field is checked; failures are collected and raised together
as one ValidationError.
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel

from chart_form.core.values import is_empty, is_numeric, parse_timestamp, to_number
from chart_form.errors import FieldError, ValidationError
from chart_form.registry.models import DependsOn, FieldDefinition, FieldType, FormTemplate
from chart_form.validation.semantic import (
    check_clinical_scale,
    check_medication_dosage,
    check_vital_sign,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
BOOLEAN_VALUES = (True, False, 0, 1, "0", "1", "true", "false")

Check = Callable[[Any, FieldDefinition, dict[str, Any]], str | None]


class ValidationResult(BaseModel):
    """Result of validating a data bag against a template."""

    template_id: str
    template_name: str
    validated_data: dict[str, Any]
    validation_rules: dict[str, list[str]]
    field_count: int
    validated_field_count: int


def _check_numeric(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if not is_numeric(value):
        return f"The {field.display_name} must be a number."
    return None


def _check_min(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    number = to_number(value)
    if number is None or number < field.min_value:
        return f"The {field.display_name} must be at least {field.min_value:g}."
    return None


def _check_max(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    number = to_number(value)
    if number is None or number > field.max_value:
        return f"The {field.display_name} must not exceed {field.max_value:g}."
    return None


def _check_max_length(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if len(str(value)) > field.max_length:
        return f"The {field.display_name} must not exceed {field.max_length} characters."
    return None


def _check_email(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
        return f"The {field.display_name} must be a valid email address."
    return None


def _check_date(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if parse_timestamp(value) is None:
        return f"The {field.display_name} must be a valid date."
    return None


def _check_in(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    allowed = field.option_values()
    if field.is_multi_select:
        if not isinstance(value, list):
            return f"The {field.display_name} must be a list of options."
        invalid = [item for item in value if str(item) not in allowed]
        if invalid:
            return f"The {field.display_name} contains invalid options: {invalid}."
        return None
    if str(value) not in allowed:
        return f"The selected {field.display_name} is invalid."
    return None


def _check_boolean(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if isinstance(value, float) or value not in BOOLEAN_VALUES:
        return f"The {field.display_name} field must be true or false."
    return None


def _comparable(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Drop timezones when only one side has one."""
    if (start.tzinfo is None) != (end.tzinfo is None):
        return start.replace(tzinfo=None), end.replace(tzinfo=None)
    return start, end


def _check_date_range(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if not isinstance(value, dict):
        return f"The {field.display_name} must have a start_date and an end_date."

    start = parse_timestamp(value.get("start_date"))
    if start is None:
        return f"The {field.display_name} start_date is required and must be a valid date."
    end = parse_timestamp(value.get("end_date"))
    if end is None:
        return f"The {field.display_name} end_date is required and must be a valid date."

    start, end = _comparable(start, end)
    if end < start:
        return f"The {field.display_name} end_date must be on or after the start_date."
    return None


def _check_time(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        return f"The {field.display_name} must be a time in HH:MM format."
    return None


def _check_url(value: Any, field: FieldDefinition, bag: dict[str, Any]) -> str | None:
    parsed = urlparse(value) if isinstance(value, str) else None
    if parsed is None or not parsed.scheme or not parsed.netloc:
        return f"The {field.display_name} must be a valid URL."
    return None


RULE_CHECKS: dict[str, Check] = {
    "numeric": _check_numeric,
    "min": _check_min,
    "max": _check_max,
    "max_length": _check_max_length,
    "email": _check_email,
    "date": _check_date,
    "in": _check_in,
    "boolean": _check_boolean,
    "date_range": _check_date_range,
    "time": _check_time,
    "url": _check_url,
    "vital_range": lambda value, field, bag: check_vital_sign(value, field),
    "dosage": lambda value, field, bag: check_medication_dosage(value, field),
    "clinical_scale": lambda value, field, bag: check_clinical_scale(value, field),
}

# Type rules applied to every field of a type, before bound/option rules
TYPE_RULES: dict[FieldType, list[str]] = {
    FieldType.NUMBER: ["numeric"],
    FieldType.EMAIL: ["email"],
    FieldType.DATE: ["date"],
    FieldType.CHECKBOX: ["boolean"],
    FieldType.DATE_RANGE: ["date_range"],
    FieldType.TIME: ["time"],
    FieldType.URL: ["url"],
    FieldType.VITAL_SIGNS: ["vital_range"],
    FieldType.MEDICATION_DOSAGE: ["dosage"],
    FieldType.CLINICAL_SCALE: ["clinical_scale"],
}

BOUNDED_TYPES = (FieldType.NUMBER, FieldType.VITAL_SIGNS)
LENGTH_TYPES = (FieldType.TEXT, FieldType.TEXTAREA)
OPTION_TYPES = (FieldType.SELECT, FieldType.MULTI_SELECT)


def _dependency_met(depends_on: DependsOn, data_bag: dict[str, Any]) -> bool:
    """Whether the referenced field currently holds the referenced value."""
    current = data_bag.get(depends_on.field)
    if current is None:
        return False
    if isinstance(current, bool) != isinstance(depends_on.value, bool):
        return False
    return current == depends_on.value


class FieldValidator:
    """Validates data bags against form templates.

    Rules per field:
    1. Presence: `required`, or `required_if` for fields with a dependency
    2. Type: numeric, date, email, options, date range, ...
    3. Bounds: numeric min/max, text length
    4. Archetype: vital-sign range, dosage format, clinical scale

    Rules for one field stop at its first failure; all fields are checked.
    """

    def build_rules(self, template: FormTemplate) -> dict[str, list[str]]:
        """Build the rule set for every field of a template.

        Args:
            template: The form template.

        Returns:
            Dict mapping field id to its ordered rule names.
        """
        rules: dict[str, list[str]] = {}
        for field in template.iter_fields():
            field_rules = self._build_field_rules(field)
            if field_rules:
                rules[field.id] = field_rules
        return rules

    def _build_field_rules(self, field: FieldDefinition) -> list[str]:
        field_rules: list[str] = []

        if field.required:
            field_rules.append("required_if" if field.depends_on else "required")

        field_rules.extend(TYPE_RULES.get(field.type, []))

        if field.type in BOUNDED_TYPES:
            if field.min_value is not None:
                field_rules.append("min")
            if field.max_value is not None:
                field_rules.append("max")

        if field.type in LENGTH_TYPES and field.max_length is not None:
            field_rules.append("max_length")

        if field.type in OPTION_TYPES and field.options:
            field_rules.append("in")

        return field_rules

    def validate(self, template: FormTemplate, data_bag: dict[str, Any]) -> ValidationResult:
        """Validate a data bag against a template.

        Args:
            template: The form template.
            data_bag: Field id -> raw value.

        Returns:
            ValidationResult with the validated subset of the bag.

        Raises:
            ValidationError: If any field fails, listing every failing field.
        """
        rules = self.build_rules(template)
        errors: list[FieldError] = []

        for field in template.iter_fields():
            error = self._validate_field(field, rules.get(field.id, []), data_bag)
            if error is not None:
                errors.append(error)

        if errors:
            logger.info(
                "Submission for template %s rejected: %d failing field(s)",
                template.template_id,
                len(errors),
            )
            raise ValidationError(errors)

        declared = set(template.field_ids)
        validated_data = {
            field_id: value for field_id, value in data_bag.items() if field_id in declared
        }

        return ValidationResult(
            template_id=template.template_id,
            template_name=template.name,
            validated_data=validated_data,
            validation_rules=rules,
            field_count=len(data_bag),
            validated_field_count=len(validated_data),
        )

    def _validate_field(
        self,
        field: FieldDefinition,
        field_rules: list[str],
        data_bag: dict[str, Any],
    ) -> FieldError | None:
        """Apply one field's rules, stopping at the first failure."""
        value = data_bag.get(field.id)

        if is_empty(value):
            required = "required" in field_rules or (
                "required_if" in field_rules
                and field.depends_on is not None
                and _dependency_met(field.depends_on, data_bag)
            )
            if required:
                rule = "required" if "required" in field_rules else "required_if"
                return FieldError(
                    field=field.id,
                    rule=rule,
                    reason=f"The {field.display_name} field is required.",
                )
            return None

        for rule in field_rules:
            check = RULE_CHECKS.get(rule)
            if check is None:
                continue
            reason = check(value, field, data_bag)
            if reason is not None:
                return FieldError(field=field.id, rule=rule, reason=reason)

        return None
