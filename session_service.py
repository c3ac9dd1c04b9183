from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from algorithms import RecordState, StrengthMetrics, WeightConverter
from gamification_service import GamificationService, Streak
from records import PersonalRecord, RecordType, SessionLog, as_utc
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)


@dataclass
class SessionCompletion:
    session: SessionLog
    total_volume: float
    duration: int
    new_records: list[PersonalRecord] = field(default_factory=list)
    streak: Optional[Streak] = None


class SessionService:
    """Handles finishing logged sessions: totals, records and streaks."""

    def __init__(
        self,
        gamification: GamificationService | None = None,
        settings: SettingsSchema | None = None,
    ) -> None:
        self.settings = settings or SettingsSchema()
        self.gamification = gamification or GamificationService(self.settings)

    @staticmethod
    def _best_values(
        records: Iterable[PersonalRecord],
    ) -> dict[tuple[str, RecordType], float]:
        best: dict[tuple[str, RecordType], float] = {}
        for rec in records:
            key = (rec.exercise_id, rec.record_type)
            if key not in best or rec.value > best[key]:
                best[key] = rec.value
        return best

    def _context(self, weight: float, reps: int) -> str:
        shown = WeightConverter.format_weight(weight, self.settings.weight_unit)
        return f"{shown} x {reps} reps"

    def detect_records(
        self,
        session: SessionLog,
        records: Iterable[PersonalRecord],
        achieved_at: datetime.datetime,
    ) -> list[PersonalRecord]:
        """Return the e1RM and max weight records set during ``session``."""
        best = self._best_values(records)
        new_records: list[PersonalRecord] = []
        for ex in session.exercises:
            for s in ex.sets:
                if not (s.completed and s.weight and s.reps):
                    continue
                state = RecordState(
                    e1rm=best.get((ex.exercise_id, RecordType.E1RM)),
                    max_weight=best.get((ex.exercise_id, RecordType.MAX_WEIGHT)),
                )
                check = StrengthMetrics.check_for_pr(s.weight, s.reps, state)
                found = []
                if check.is_e1rm_pr:
                    found.append((RecordType.E1RM, check.new_e1rm))
                if check.is_max_weight_pr:
                    found.append((RecordType.MAX_WEIGHT, s.weight))
                for record_type, value in found:
                    best[(ex.exercise_id, record_type)] = value
                    new_records.append(
                        PersonalRecord(
                            exercise_id=ex.exercise_id,
                            exercise_name=ex.exercise_name,
                            record_type=record_type,
                            value=value,
                            achieved_at=achieved_at,
                            context=self._context(s.weight, s.reps),
                            body_region=ex.body_region,
                        )
                    )
        return new_records

    def complete_session(
        self,
        session: SessionLog,
        records: Iterable[PersonalRecord] = (),
        streak: Streak | None = None,
        notes: str | None = None,
        now: datetime.datetime | None = None,
    ) -> SessionCompletion:
        """Finish ``session`` and return its totals, new records and streak."""
        if session.is_completed:
            raise ValueError(f"session {session.session_id} already completed")
        now = now or datetime.datetime.now()
        volume = StrengthMetrics.total_volume(session.all_sets())
        elapsed = as_utc(now) - as_utc(session.started_at)
        duration = max(0, int(elapsed.total_seconds()))
        finished = replace(
            session,
            completed_at=now,
            total_volume=volume,
            notes=notes if notes is not None else session.notes,
        )
        new_records = self.detect_records(finished, records, now)
        updated_streak = self.gamification.update_streak(streak, now)
        logger.info(
            "Completed session %s: volume=%s duration=%ss records=%s",
            session.session_id,
            volume,
            duration,
            len(new_records),
        )
        return SessionCompletion(
            session=finished,
            total_volume=volume,
            duration=duration,
            new_records=new_records,
            streak=updated_streak,
        )
