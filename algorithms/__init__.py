from .math_tools import MathTools
from .metrics import PRCheck, RecordState, SetLog, StrengthMetrics
from .progression import (
    ProgressionBase,
    ProgressionEngine,
    ProgressionResult,
    ProgressionType,
    RepRange,
    WeekPreview,
)
from .tempo import Tempo, TempoTools
from .weight_converter import WeightConverter, WeightUnit

__all__ = [
    "MathTools",
    "PRCheck",
    "RecordState",
    "SetLog",
    "StrengthMetrics",
    "ProgressionBase",
    "ProgressionEngine",
    "ProgressionResult",
    "ProgressionType",
    "RepRange",
    "WeekPreview",
    "Tempo",
    "TempoTools",
    "WeightConverter",
    "WeightUnit",
]
