"""Calculated observations: formula registry and evaluator."""

from chart_form.calculation.formulas import FORMULAS, Formula, register_formula
from chart_form.calculation.evaluator import CalculationEvaluator

__all__ = [
    "CalculationEvaluator",
    "FORMULAS",
    "Formula",
    "register_formula",
]
