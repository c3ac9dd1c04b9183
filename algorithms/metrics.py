import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union

from .math_tools import MathTools

logger = logging.getLogger(__name__)


@dataclass
class SetLog:
    """One logged set as entered during a session."""

    weight: Optional[float] = None
    reps: Optional[int] = None
    completed: bool = False
    rpe: Optional[float] = None
    set_type: str = "WORKING"


@dataclass
class RecordState:
    """Best known performance for one exercise, used as the PR baseline."""

    e1rm: Optional[float] = None
    max_weight: Optional[float] = None
    max_reps_at_weight: Optional[dict[float, int]] = None


@dataclass(frozen=True)
class PRCheck:
    is_e1rm_pr: bool
    is_max_weight_pr: bool
    is_max_reps_pr: bool
    new_e1rm: float


SetLike = Union[SetLog, Mapping]


def _field(entry: SetLike, name: str):
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


class StrengthMetrics:
    """Estimated 1RM, volume load and personal record calculations.

    Epley is used up to five reps and Brzycki above that. Every method
    degrades to ``0``/``False`` on invalid input instead of raising.
    """

    EPL_COEFF: float = 0.0333
    BRZYCKI_NUMERATOR: float = 1.0278
    BRZYCKI_COEFF: float = 0.0278
    EPLEY_MAX_REPS: int = 5

    @classmethod
    def calculate_e1rm(cls, weight: float, reps: float) -> float:
        """Return the estimated one-rep max for ``weight`` x ``reps``."""
        if not weight or not reps or weight <= 0 or reps <= 0:
            return 0
        if reps == 1:
            return weight
        if reps <= cls.EPLEY_MAX_REPS:
            return weight * (1 + cls.EPL_COEFF * reps)
        denominator = cls.BRZYCKI_NUMERATOR - cls.BRZYCKI_COEFF * reps
        if denominator <= 0:
            logger.debug("Brzycki estimate undefined for %s reps", reps)
            return 0.0
        return weight / denominator

    @staticmethod
    def set_volume(weight: float, reps: float) -> float:
        if not weight or not reps:
            return 0
        return weight * reps

    @staticmethod
    def total_volume(sets: Iterable[SetLike]) -> float:
        """Sum weight x reps over completed sets that have both values."""
        total = 0
        for entry in sets:
            weight = _field(entry, "weight")
            reps = _field(entry, "reps")
            if _field(entry, "completed") and weight and reps:
                total += weight * reps
        return total

    @staticmethod
    def progressive_overload(current_volume: float, previous_volume: float) -> float:
        """Percentage change in volume between two sessions."""
        if previous_volume == 0:
            return 0
        return ((current_volume - previous_volume) / previous_volume) * 100

    @staticmethod
    def weight_key(weight: float) -> int:
        """Lookup key for per-weight records: the weight in tenths of a kg."""
        return MathTools.round_half_up(float(weight) * 10)

    @staticmethod
    def _record_state(records: Union[RecordState, Mapping, None]) -> RecordState:
        if records is None:
            return RecordState()
        if isinstance(records, Mapping):
            return RecordState(
                e1rm=records.get("e1rm"),
                max_weight=records.get("max_weight"),
                max_reps_at_weight=records.get("max_reps_at_weight"),
            )
        return records

    @classmethod
    def check_for_pr(
        cls,
        weight: float,
        reps: int,
        current_records: Union[RecordState, Mapping, None] = None,
    ) -> PRCheck:
        """Report which records ``weight`` x ``reps`` would break.

        Nothing is updated; persisting a new best is up to the caller.
        A set without weight or reps never counts as a record.
        """
        if not weight or not reps:
            return PRCheck(
                is_e1rm_pr=False,
                is_max_weight_pr=False,
                is_max_reps_pr=False,
                new_e1rm=0,
            )
        records = cls._record_state(current_records)
        new_e1rm = cls.calculate_e1rm(weight, reps)

        is_max_reps_pr = False
        if records.max_reps_at_weight is not None:
            by_weight: dict[int, int] = {}
            for w, r in records.max_reps_at_weight.items():
                key = cls.weight_key(w)
                by_weight[key] = max(r, by_weight.get(key, r))
            best = by_weight.get(cls.weight_key(weight))
            is_max_reps_pr = not best or reps > best

        return PRCheck(
            is_e1rm_pr=not records.e1rm or new_e1rm > records.e1rm,
            is_max_weight_pr=not records.max_weight or weight > records.max_weight,
            is_max_reps_pr=is_max_reps_pr,
            new_e1rm=new_e1rm,
        )

    @classmethod
    def format_e1rm(cls, weight: float, reps: int) -> str:
        e1rm = cls.calculate_e1rm(weight, reps)
        return f"{MathTools.format_number(MathTools.round_one_decimal(e1rm))}kg"

    @staticmethod
    def intensity_percentage(weight: float, e1rm: float) -> int:
        """Return ``weight`` as a whole percentage of ``e1rm``."""
        if not weight or not e1rm:
            return 0
        return MathTools.round_half_up((weight / e1rm) * 100)

    @classmethod
    def best_e1rm(
        cls, sets: Iterable[SetLike], completed_only: bool = False
    ) -> tuple[float, Optional[SetLike]]:
        """Return the best estimated 1RM in ``sets`` and the set behind it."""
        best = 0
        best_set = None
        for entry in sets:
            if completed_only and not _field(entry, "completed"):
                continue
            weight = _field(entry, "weight")
            reps = _field(entry, "reps")
            if not (weight and reps):
                continue
            est = cls.calculate_e1rm(weight, reps)
            if est > best:
                best = est
                best_set = entry
        return best, best_set
