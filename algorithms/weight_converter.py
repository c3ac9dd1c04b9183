from typing import Literal

from .math_tools import MathTools

WeightUnit = Literal["kg", "lb"]


class WeightConverter:
    """Convert between stored kilograms and the display unit."""

    KG_PER_LB = 0.45359237

    @classmethod
    def to_kg(cls, value: float, unit: WeightUnit) -> float:
        if unit == "lb":
            return value * cls.KG_PER_LB
        return value

    @classmethod
    def from_kg(cls, kg: float, unit: WeightUnit) -> float:
        if unit == "lb":
            return kg / cls.KG_PER_LB
        return kg

    @classmethod
    def format_weight(cls, kg: float, unit: WeightUnit, sep: str = "") -> str:
        """Render ``kg`` in ``unit`` to one decimal, e.g. ``"220.5lb"``."""
        value = MathTools.round_one_decimal(cls.from_kg(kg, unit))
        return f"{MathTools.format_number(value)}{sep}{unit}"
