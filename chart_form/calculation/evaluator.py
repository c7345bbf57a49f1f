"""Calculation evaluator for derived observations.

The evaluator is generic - it looks formulas up by name in the formula
registry and reads their inputs from the data bag. No per-form code.
"""

import logging
import math
from typing import Any

from chart_form.calculation.formulas import FORMULAS
from chart_form.core.values import is_empty, to_number

logger = logging.getLogger(__name__)


class CalculationEvaluator:
    """Computes derived values from validated fields.

    A calculation runs only when every required field is present and
    numeric. There is no partial or best-effort result: anything missing
    yields None.
    """

    def evaluate(
        self,
        formula_name: str,
        data_bag: dict[str, Any],
        required_field_ids: list[str] | None = None,
        inputs: dict[str, str] | None = None,
    ) -> float | None:
        """Evaluate a named formula against a data bag.

        Args:
            formula_name: Registered formula name (e.g., "bmi").
            data_bag: Field id -> raw value.
            required_field_ids: Fields that must be present and numeric.
                Defaults to the fields the formula reads.
            inputs: Optional formula role -> field id remapping. Roles not
                listed read the field with the same name.

        Returns:
            The computed value, or None if it cannot be computed.
        """
        formula = FORMULAS.get(formula_name)
        if formula is None:
            logger.warning("Unknown formula: %s", formula_name)
            return None

        inputs = inputs or {}
        role_fields = {role: inputs.get(role, role) for role in formula.inputs}

        if not required_field_ids:
            required_field_ids = list(role_fields.values())

        for field_id in required_field_ids:
            value = data_bag.get(field_id)
            if is_empty(value) or to_number(value) is None:
                logger.debug(
                    "Formula %s skipped: required field %s missing or non-numeric",
                    formula_name,
                    field_id,
                )
                return None

        arguments: dict[str, float] = {}
        for role, field_id in role_fields.items():
            number = to_number(data_bag.get(field_id))
            if number is None:
                logger.debug(
                    "Formula %s skipped: input %s (%s) missing or non-numeric",
                    formula_name,
                    role,
                    field_id,
                )
                return None
            arguments[role] = number

        value = formula.compute(**arguments)
        if value is None or not math.isfinite(value):
            return None
        return value
