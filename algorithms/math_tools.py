import math


class MathTools:
    """Numeric helpers shared by the metrics and progression engines."""

    @staticmethod
    def clamp(value: float, low: float, high: float) -> float:
        """Return ``value`` limited to ``low..high``, e.g. a program week."""
        if low > high:
            raise ValueError(f"empty range {low}..{high}")
        return max(low, min(value, high))

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer, sending .5 ties towards +infinity."""
        return int(math.floor(value + 0.5))

    @staticmethod
    def round_to_increment(value: float, increment: float) -> float:
        """Round ``value`` to the nearest multiple of ``increment``."""
        return MathTools.round_half_up(value / increment) * increment

    @staticmethod
    def round_one_decimal(value: float) -> float:
        return MathTools.round_half_up(value * 10) / 10

    @staticmethod
    def format_number(value: float) -> str:
        """Render ``value`` without a trailing ``.0`` for whole numbers."""
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
