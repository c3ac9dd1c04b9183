from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from algorithms import (
    MathTools,
    ProgressionBase,
    ProgressionEngine,
    ProgressionType,
    SetLog,
    WeekPreview,
)
from records import role_weight
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)


@dataclass
class ProgramExercise:
    exercise_id: str
    exercise_name: str
    target_sets: Optional[int] = None
    target_reps: Optional[str] = None
    target_weight: Optional[str] = None
    rest_seconds: Optional[int] = None
    tempo: Optional[str] = None
    # (muscle group, role) pairs
    muscles: list[tuple[str, str]] = field(default_factory=list)

    def base(self) -> ProgressionBase:
        """Week-one targets, filling template gaps with the usual defaults."""
        return ProgressionBase(
            target_sets=self.target_sets if self.target_sets is not None else 3,
            target_reps=self.target_reps if self.target_reps is not None else "8-12",
            target_weight=self.target_weight if self.target_weight is not None else "",
            rest_seconds=self.rest_seconds if self.rest_seconds is not None else 90,
        )


@dataclass
class ProgramAssignment:
    start_date: datetime.date | datetime.datetime | str
    total_weeks: int
    progression_type: ProgressionType | str = ProgressionType.NONE
    active: bool = True
    # exercise id -> starting weight in kg
    baselines: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionContext:
    week_number: Optional[int]
    progression_type: ProgressionType
    total_weeks: int
    baselines: Mapping[str, float]


@dataclass
class LiveExerciseTarget:
    exercise_id: str
    exercise_name: str
    target_sets: int
    target_reps: str
    target_weight: str
    rest_seconds: int
    tempo: Optional[str] = None
    progression_note: Optional[str] = None
    suggested_weight_change: Optional[str] = None
    target_weight_kg: Optional[float] = None
    target_rpe: Optional[str] = None
    sets: list[SetLog] = field(default_factory=list)


class PlannerService:
    """Turns program templates and assignments into concrete weekly targets."""

    def __init__(self, settings: SettingsSchema | None = None) -> None:
        self.settings = settings or SettingsSchema()

    def session_context(
        self,
        assignment: ProgramAssignment | None,
        week_number: int | None = None,
        now: datetime.datetime | None = None,
    ) -> SessionContext:
        """Resolve the week, progression and baselines for a new session."""
        if assignment is None or not assignment.active:
            return SessionContext(
                week_number=week_number,
                progression_type=ProgressionType.NONE,
                total_weeks=self.settings.default_total_weeks,
                baselines={},
            )
        if week_number is None:
            week_number = ProgressionEngine.calculate_week_number(
                assignment.start_date, assignment.total_weeks, now=now
            )
        return SessionContext(
            week_number=week_number,
            progression_type=ProgressionType.coerce(assignment.progression_type),
            total_weeks=assignment.total_weeks,
            baselines=dict(assignment.baselines),
        )

    def live_targets(
        self, exercises: Iterable[ProgramExercise], context: SessionContext
    ) -> list[LiveExerciseTarget]:
        """Return this session's targets with one empty set per target set."""
        targets: list[LiveExerciseTarget] = []
        for ex in exercises:
            base = ex.base()
            target = LiveExerciseTarget(
                exercise_id=ex.exercise_id,
                exercise_name=ex.exercise_name,
                target_sets=base.target_sets,
                target_reps=base.target_reps,
                target_weight=base.target_weight,
                rest_seconds=base.rest_seconds,
                tempo=ex.tempo,
            )
            if (
                context.progression_type is not ProgressionType.NONE
                and context.week_number is not None
            ):
                prog = ProgressionEngine.apply_progression(
                    base,
                    context.week_number,
                    context.progression_type,
                    context.total_weeks,
                    context.baselines.get(ex.exercise_id),
                )
                target.target_sets = prog.target_sets
                target.target_reps = prog.target_reps
                target.target_weight = prog.target_weight
                target.rest_seconds = prog.rest_seconds
                target.progression_note = prog.progression_note
                target.suggested_weight_change = prog.suggested_weight_change
                target.target_weight_kg = prog.target_weight_kg
                target.target_rpe = prog.target_rpe
            target.sets = [
                SetLog(weight=target.target_weight_kg) for _ in range(target.target_sets)
            ]
            targets.append(target)
        return targets

    def preview_grid(
        self,
        exercises: Iterable[ProgramExercise],
        progression_type: ProgressionType | str,
        total_weeks: int,
        baselines: Mapping[str, float] | None = None,
    ) -> list[tuple[str, list[WeekPreview]]]:
        """Return the full-program preview for each exercise."""
        baselines = baselines or {}
        return [
            (
                ex.exercise_name,
                ProgressionEngine.generate_progression_preview(
                    ex.base(),
                    progression_type,
                    total_weeks,
                    baselines.get(ex.exercise_id),
                ),
            )
            for ex in exercises
        ]

    @staticmethod
    def muscle_coverage(exercises: Iterable[ProgramExercise]) -> list[dict]:
        """Return role-weighted weekly set counts per muscle group."""
        coverage: dict[str, dict] = {}
        for ex in exercises:
            target_sets = ex.base().target_sets
            for group, role in ex.muscles:
                entry = coverage.setdefault(group, {"sets": 0.0, "exercises": []})
                entry["sets"] += target_sets * role_weight(role)
                if ex.exercise_name not in entry["exercises"]:
                    entry["exercises"].append(ex.exercise_name)
        result = []
        for name, data in coverage.items():
            sets = data["sets"]
            level = "high" if sets >= 10 else "medium" if sets >= 5 else "low"
            result.append(
                {
                    "name": name,
                    "sets": MathTools.round_one_decimal(sets),
                    "level": level,
                    "exercises": data["exercises"],
                }
            )
        return sorted(result, key=lambda r: r["sets"], reverse=True)

    @staticmethod
    def validate_baselines(entries: Mapping[str, object]) -> dict[str, float]:
        """Return usable starting weights keyed by exercise id.

        Blank and zero weights are dropped; negative or non-numeric weights
        raise ``ValueError``.
        """
        baselines: dict[str, float] = {}
        for exercise_id, raw in entries.items():
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                continue
            try:
                weight = float(raw)
            except (TypeError, ValueError):
                raise ValueError(f"invalid starting weight for {exercise_id}: {raw!r}")
            if weight < 0:
                raise ValueError(f"starting weight for {exercise_id} must be non-negative")
            if weight > 0:
                baselines[exercise_id] = weight
        logger.debug("Accepted %s of %s baselines", len(baselines), len(entries))
        return baselines
