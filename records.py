from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from algorithms import SetLog


class RecordType(str, Enum):
    E1RM = "E1RM"
    MAX_WEIGHT = "MAX_WEIGHT"
    MAX_REPS_AT_WEIGHT = "MAX_REPS_AT_WEIGHT"
    MAX_VOLUME_SESSION = "MAX_VOLUME_SESSION"
    MAX_DURATION = "MAX_DURATION"


class MuscleRole(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    STABILIZER = "STABILIZER"


ROLE_WEIGHTS = {
    MuscleRole.PRIMARY: 1.0,
    MuscleRole.SECONDARY: 0.5,
    MuscleRole.STABILIZER: 0.25,
}


def role_weight(role: MuscleRole | str) -> float:
    """Share of an exercise's work credited to a muscle with ``role``."""
    try:
        return ROLE_WEIGHTS[MuscleRole(role)]
    except ValueError:
        return ROLE_WEIGHTS[MuscleRole.STABILIZER]


@dataclass
class SessionExerciseLog:
    exercise_id: str
    exercise_name: str
    sets: list[SetLog] = field(default_factory=list)
    body_region: str = ""
    # (muscle group, role) pairs
    muscles: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class SessionLog:
    """A logged workout session as supplied by the data-access layer."""

    session_id: str
    started_at: datetime.datetime
    completed_at: Optional[datetime.datetime] = None
    total_volume: Optional[float] = None
    exercises: list[SessionExerciseLog] = field(default_factory=list)
    notes: Optional[str] = None
    week_number: Optional[int] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def all_sets(self) -> list[SetLog]:
        return [s for ex in self.exercises for s in ex.sets]


@dataclass(frozen=True)
class PersonalRecord:
    exercise_id: str
    exercise_name: str
    record_type: RecordType
    value: float
    achieved_at: datetime.datetime
    context: Optional[str] = None
    body_region: str = ""


def as_utc(ts: datetime.datetime) -> datetime.datetime:
    """Return ``ts`` as timezone-aware datetime in UTC; naive values are UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=datetime.timezone.utc)
    return ts.astimezone(datetime.timezone.utc)
