import datetime
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Union

from .math_tools import MathTools

logger = logging.getLogger(__name__)

DateLike = Union[datetime.date, datetime.datetime, str]


class ProgressionType(str, Enum):
    NONE = "NONE"
    STRENGTH = "STRENGTH"
    HYPERTROPHY = "HYPERTROPHY"
    ENDURANCE = "ENDURANCE"
    LINEAR = "LINEAR"

    @classmethod
    def coerce(cls, value: Union["ProgressionType", str, None]) -> "ProgressionType":
        """Return ``value`` as a member; unknown values fall back to ``NONE``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            logger.warning("Unknown progression type %r, using NONE", value)
            return cls.NONE


@dataclass
class ProgressionBase:
    """Week-one targets for one exercise of a workout block."""

    target_sets: int
    target_reps: str
    target_weight: str = ""
    rest_seconds: int = 90


@dataclass(frozen=True)
class ProgressionResult:
    target_sets: int
    target_reps: str
    target_weight: str
    rest_seconds: int
    progression_note: str
    # absolute target in kg, only when a starting weight is known
    target_weight_kg: Optional[float]
    # relative change such as "+5%", only without a starting weight
    suggested_weight_change: Optional[str]
    target_rpe: Optional[str]


@dataclass(frozen=True)
class WeekPreview:
    week: int
    target_sets: int
    target_reps: str
    target_weight: str
    rest_seconds: int
    progression_note: str


class RepRange(NamedTuple):
    low: float
    high: float


_LEADING_INT = re.compile(r"^[+-]?\d+")


def _range_bound(text: str) -> float:
    """Parse one side of "8-12"; empty or invalid text yields 0."""
    text = text.strip()
    if not text:
        return 0
    try:
        value = float(text)
    except ValueError:
        return 0
    if not math.isfinite(value):
        return 0
    return int(value) if value.is_integer() else value


class ProgressionEngine:
    """Derive week-by-week targets from a base prescription.

    Weight grows linearly from the starting weight (2.5% per elapsed week,
    1% for endurance blocks) and is rounded to the nearest 2.5 kg plate.
    Without a starting weight the growth is shown as a percentage next to
    the template's weight label.
    """

    DEFAULT_REP_RANGE = RepRange(8, 12)
    WEIGHT_INCREASE_PER_WEEK: float = 0.025
    ENDURANCE_WEIGHT_INCREASE_PER_WEEK: float = 0.01
    PLATE_INCREMENT: float = 2.5
    STRENGTH_REP_FLOOR: int = 4
    STRENGTH_REST_BUMP: int = 15
    ENDURANCE_REP_GAIN: int = 6
    ENDURANCE_REST_DROP: int = 30
    ENDURANCE_REST_FLOOR: int = 30

    @classmethod
    def parse_rep_range(cls, reps: str) -> RepRange:
        """Return ``(low, high)`` for ``"8-12"`` or ``"10"`` style text."""
        default_low, default_high = cls.DEFAULT_REP_RANGE
        trimmed = (reps or "").strip()
        if "-" in trimmed:
            parts = trimmed.split("-")
            low = _range_bound(parts[0])
            high = _range_bound(parts[1])
            return RepRange(low or default_low, high or default_high)
        match = _LEADING_INT.match(trimmed)
        if match:
            n = int(match.group(0))
            return RepRange(n, n)
        return cls.DEFAULT_REP_RANGE

    @staticmethod
    def format_rep_range(low: float, high: float) -> str:
        if low == high:
            return MathTools.format_number(low)
        return f"{MathTools.format_number(low)}-{MathTools.format_number(high)}"

    @staticmethod
    def _to_datetime(value: DateLike) -> datetime.datetime:
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time())
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.datetime.fromisoformat(text)

    @classmethod
    def calculate_week_number(
        cls,
        start_date: DateLike,
        total_weeks: int,
        now: Optional[datetime.datetime] = None,
    ) -> int:
        """Return the 1-based program week for ``now``, clamped to the program."""
        try:
            start = cls._to_datetime(start_date)
        except (TypeError, ValueError):
            logger.warning("Unparseable program start date %r", start_date)
            return 1
        # naive values are UTC
        if start.tzinfo is None:
            start = start.replace(tzinfo=datetime.timezone.utc)
        if now is None:
            now = datetime.datetime.now(datetime.timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=datetime.timezone.utc)
        weeks_since_start = math.floor((now - start) / datetime.timedelta(weeks=1))
        return MathTools.clamp(weeks_since_start + 1, 1, max(total_weeks, 1))

    @classmethod
    def apply_progression(
        cls,
        base: ProgressionBase,
        week_number: int,
        progression_type: Union[ProgressionType, str],
        total_weeks: int,
        starting_weight: Optional[float] = None,
    ) -> ProgressionResult:
        """Return the targets for ``week_number`` of a ``total_weeks`` block."""
        p_type = ProgressionType.coerce(progression_type)
        low, high = cls.parse_rep_range(base.target_reps)
        weeks_elapsed = week_number - 1
        halfway_week = math.ceil(total_weeks / 2)
        week_span = max(total_weeks - 1, 1)

        if p_type is ProgressionType.NONE:
            return ProgressionResult(
                target_sets=base.target_sets,
                target_reps=cls.format_rep_range(low, high),
                target_weight=base.target_weight,
                rest_seconds=base.rest_seconds,
                progression_note="",
                target_weight_kg=None,
                suggested_weight_change=None,
                target_rpe=None,
            )

        sets = base.target_sets
        reps_low, reps_high = low, high
        rest = base.rest_seconds
        note = ""
        absolute_weight: Optional[float] = None
        relative_change: Optional[str] = None
        has_baseline = starting_weight is not None and starting_weight > 0
        percent_text = f"{cls.WEIGHT_INCREASE_PER_WEEK * weeks_elapsed * 100:.1f}"

        if p_type in (
            ProgressionType.STRENGTH,
            ProgressionType.HYPERTROPHY,
            ProgressionType.LINEAR,
        ):
            multiplier = 1 + cls.WEIGHT_INCREASE_PER_WEEK * weeks_elapsed
            if has_baseline:
                absolute_weight = MathTools.round_to_increment(
                    starting_weight * multiplier, cls.PLATE_INCREMENT
                )
            else:
                total_percent = float(percent_text)
                if total_percent > 0:
                    relative_change = f"+{MathTools.format_number(total_percent)}%"

        if p_type is ProgressionType.STRENGTH:
            rep_drop = MathTools.round_half_up(
                ((high - cls.STRENGTH_REP_FLOOR) / week_span) * weeks_elapsed
            )
            reps_low = max(cls.STRENGTH_REP_FLOOR, low - rep_drop)
            reps_high = max(cls.STRENGTH_REP_FLOOR, high - rep_drop)
            rest = base.rest_seconds + math.floor(weeks_elapsed / 2) * cls.STRENGTH_REST_BUMP
            note = (
                "Base week"
                if week_number == 1
                else f"Wk {week_number}: heavier weight, fewer reps"
            )
        elif p_type is ProgressionType.HYPERTROPHY:
            if week_number > halfway_week:
                sets = base.target_sets + 1
            note = (
                f"Wk {week_number}: building volume"
                if week_number <= halfway_week
                else f"Wk {week_number}: +1 set, pushing intensity"
            )
        elif p_type is ProgressionType.ENDURANCE:
            rep_gain = MathTools.round_half_up(
                (cls.ENDURANCE_REP_GAIN / week_span) * weeks_elapsed
            )
            reps_low = low + rep_gain
            reps_high = high + rep_gain
            # endurance blocks use their own, slower load model
            absolute_weight = None
            relative_change = None
            if has_baseline:
                absolute_weight = MathTools.round_to_increment(
                    starting_weight
                    * (1 + cls.ENDURANCE_WEIGHT_INCREASE_PER_WEEK * weeks_elapsed),
                    cls.PLATE_INCREMENT,
                )
            rest_decrease = MathTools.round_half_up(
                (cls.ENDURANCE_REST_DROP / week_span) * weeks_elapsed
            )
            rest = max(cls.ENDURANCE_REST_FLOOR, base.rest_seconds - rest_decrease)
            note = (
                "Base week"
                if week_number == 1
                else f"Wk {week_number}: more reps, shorter rest"
            )
        elif p_type is ProgressionType.LINEAR:
            note = (
                "Base week"
                if week_number == 1
                else f"Wk {week_number}: +{percent_text}% weight"
            )

        target_rpe = cls._target_rpe(p_type, weeks_elapsed, week_number, total_weeks)

        display_weight = base.target_weight
        if absolute_weight is not None:
            display_weight = f"{MathTools.format_number(absolute_weight)} kg"
        elif relative_change:
            display_weight = (
                f"{base.target_weight} ({relative_change})"
                if base.target_weight
                else relative_change
            )

        logger.debug(
            "Applied %s progression: week=%s/%s sets=%s reps=%s-%s weight=%s",
            p_type.value,
            week_number,
            total_weeks,
            sets,
            reps_low,
            reps_high,
            display_weight,
        )
        return ProgressionResult(
            target_sets=sets,
            target_reps=cls.format_rep_range(reps_low, reps_high),
            target_weight=display_weight,
            rest_seconds=rest,
            progression_note=note,
            target_weight_kg=absolute_weight,
            suggested_weight_change=relative_change,
            target_rpe=target_rpe,
        )

    @staticmethod
    def _target_rpe(
        p_type: ProgressionType,
        weeks_elapsed: int,
        week_number: int,
        total_weeks: int,
    ) -> Optional[str]:
        progress = weeks_elapsed / (total_weeks - 1) if total_weeks > 1 else 0
        if p_type is ProgressionType.STRENGTH:
            if progress < 0.33:
                return "7-8"
            return "8-9" if progress < 0.66 else "9-10"
        if p_type is ProgressionType.HYPERTROPHY:
            return "7-8" if week_number <= math.ceil(total_weeks / 2) else "8-9"
        if p_type is ProgressionType.ENDURANCE:
            return "6-7" if progress < 0.5 else "7-8"
        if p_type is ProgressionType.LINEAR:
            return "7-8" if progress < 0.5 else "8-9"
        return None

    @classmethod
    def generate_progression_preview(
        cls,
        base: ProgressionBase,
        progression_type: Union[ProgressionType, str],
        total_weeks: int,
        starting_weight: Optional[float] = None,
    ) -> list[WeekPreview]:
        """Return one :class:`WeekPreview` per week of the block."""
        preview: list[WeekPreview] = []
        for week in range(1, total_weeks + 1):
            result = cls.apply_progression(
                base, week, progression_type, total_weeks, starting_weight
            )
            preview.append(
                WeekPreview(
                    week=week,
                    target_sets=result.target_sets,
                    target_reps=result.target_reps,
                    target_weight=result.target_weight,
                    rest_seconds=result.rest_seconds,
                    progression_note=result.progression_note,
                )
            )
        return preview
