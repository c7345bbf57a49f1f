"""Formula registry for calculated observations.

Each formula is a pure function of named numeric inputs. Adding a formula
means adding a registry entry; templates refer to formulas by name.
"""

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class Formula:
    """A named formula and the input roles it reads."""

    name: str
    inputs: tuple[str, ...]
    compute: Callable[..., float | None]


def bmi(weight: float, height: float) -> float | None:
    """Body-mass index from weight in kg and height in cm."""
    height_m = height / 100
    if height_m == 0:
        return None
    return round(weight / (height_m * height_m), 2)


def mean_arterial_pressure(systolic_bp: float, diastolic_bp: float) -> float:
    return round((2 * diastolic_bp + systolic_bp) / 3, 1)


def pulse_pressure(systolic_bp: float, diastolic_bp: float) -> float:
    return systolic_bp - diastolic_bp


FORMULAS: dict[str, Formula] = {}


def register_formula(name: str, inputs: tuple[str, ...], compute: Callable[..., float | None]) -> Formula:
    """Register a formula under a name.

    Args:
        name: Name templates use in `calculation`.
        inputs: Input roles, passed to `compute` as keyword arguments.
        compute: The formula.

    Returns:
        The registered Formula.
    """
    formula = Formula(name=name, inputs=inputs, compute=compute)
    FORMULAS[name] = formula
    return formula


register_formula("bmi", ("weight", "height"), bmi)
register_formula("mean_arterial_pressure", ("systolic_bp", "diastolic_bp"), mean_arterial_pressure)
register_formula("pulse_pressure", ("systolic_bp", "diastolic_bp"), pulse_pressure)
