"""Tests for the formula registry and calculation evaluator."""

import pytest

from chart_form.calculation import FORMULAS, CalculationEvaluator, register_formula


@pytest.fixture
def evaluator() -> CalculationEvaluator:
    return CalculationEvaluator()


class TestFormulas:
    """Tests for the built-in formulas."""

    def test_builtin_formulas_registered(self) -> None:
        assert {"bmi", "mean_arterial_pressure", "pulse_pressure"} <= set(FORMULAS)

    def test_bmi(self) -> None:
        assert FORMULAS["bmi"].compute(weight=70, height=170) == 24.22

    def test_bmi_zero_height(self) -> None:
        assert FORMULAS["bmi"].compute(weight=70, height=0) is None

    def test_mean_arterial_pressure(self) -> None:
        assert FORMULAS["mean_arterial_pressure"].compute(systolic_bp=120, diastolic_bp=80) == 93.3

    def test_pulse_pressure(self) -> None:
        assert FORMULAS["pulse_pressure"].compute(systolic_bp=120, diastolic_bp=80) == 40


class TestCalculationEvaluator:
    """Tests for evaluating formulas against data bags."""

    def test_bmi_from_bag(self, evaluator: CalculationEvaluator) -> None:
        value = evaluator.evaluate("bmi", {"weight": 70, "height": 170}, ["weight", "height"])
        assert value == 24.22

    def test_numeric_strings(self, evaluator: CalculationEvaluator) -> None:
        assert evaluator.evaluate("bmi", {"weight": "70", "height": "170"}) == 24.22

    def test_missing_input(self, evaluator: CalculationEvaluator) -> None:
        """Test that a missing input skips the calculation instead of defaulting."""
        assert evaluator.evaluate("bmi", {"height": 170}, ["weight", "height"]) is None

    def test_empty_input(self, evaluator: CalculationEvaluator) -> None:
        assert evaluator.evaluate("bmi", {"weight": "", "height": 170}) is None

    def test_non_numeric_input(self, evaluator: CalculationEvaluator) -> None:
        assert evaluator.evaluate("bmi", {"weight": "heavy", "height": 170}) is None

    def test_required_fields_beyond_inputs(self, evaluator: CalculationEvaluator) -> None:
        """Test that every listed required field must be present."""
        bag = {"systolic_bp": 120, "diastolic_bp": 80}
        required = ["systolic_bp", "diastolic_bp", "heart_rate"]
        assert evaluator.evaluate("pulse_pressure", bag, required) is None

    def test_input_remapping(self, evaluator: CalculationEvaluator) -> None:
        bag = {"sbp_sitting": 130, "dbp_sitting": 85}
        value = evaluator.evaluate(
            "pulse_pressure",
            bag,
            inputs={"systolic_bp": "sbp_sitting", "diastolic_bp": "dbp_sitting"},
        )
        assert value == 45

    def test_unknown_formula(self, evaluator: CalculationEvaluator) -> None:
        assert evaluator.evaluate("egfr", {"creatinine": 1.0}) is None

    def test_zero_height(self, evaluator: CalculationEvaluator) -> None:
        assert evaluator.evaluate("bmi", {"weight": 70, "height": 0}) is None

    def test_non_finite_result(self, evaluator: CalculationEvaluator) -> None:
        """Test that a result overflowing to infinity yields no value."""
        assert evaluator.evaluate("bmi", {"weight": 1e308, "height": 1}) is None

    def test_registered_formula(self, evaluator: CalculationEvaluator) -> None:
        register_formula(
            "shock_index",
            ("heart_rate", "systolic_bp"),
            lambda heart_rate, systolic_bp: round(heart_rate / systolic_bp, 2),
        )
        try:
            value = evaluator.evaluate("shock_index", {"heart_rate": 90, "systolic_bp": 120})
            assert value == 0.75
        finally:
            del FORMULAS["shock_index"]
