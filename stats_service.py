from __future__ import annotations
import datetime
import logging
from typing import Iterable, List, Optional, Dict

import pandas as pd

from algorithms import MathTools, StrengthMetrics
from records import PersonalRecord, RecordType, SessionLog, as_utc, role_weight
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)

PR_TYPE_ORDER = [
    RecordType.E1RM,
    RecordType.MAX_WEIGHT,
    RecordType.MAX_REPS_AT_WEIGHT,
    RecordType.MAX_VOLUME_SESSION,
    RecordType.MAX_DURATION,
]


class StatisticsService:
    """Compute progress statistics from a client's logged sessions."""

    def __init__(
        self,
        sessions: Iterable[SessionLog],
        settings: SettingsSchema | None = None,
    ) -> None:
        self.sessions = list(sessions)
        self.settings = settings or SettingsSchema()

    @staticmethod
    def _week_start(day: datetime.date) -> datetime.date:
        """Monday of the week containing ``day``."""
        return day - datetime.timedelta(days=day.weekday())

    def _completed_since(self, cutoff: datetime.datetime) -> List[SessionLog]:
        cutoff = as_utc(cutoff)
        rows = [
            s
            for s in self.sessions
            if s.completed_at is not None and as_utc(s.completed_at) >= cutoff
        ]
        return sorted(rows, key=lambda s: as_utc(s.completed_at))

    def personal_records(self, records: Iterable[PersonalRecord]) -> List[Dict]:
        """Return records grouped by exercise, keeping the best per type."""
        ordered = sorted(records, key=lambda r: as_utc(r.achieved_at), reverse=True)
        groups: Dict[str, Dict] = {}
        for rec in ordered:
            group = groups.setdefault(
                rec.exercise_id,
                {
                    "exercise_id": rec.exercise_id,
                    "exercise_name": rec.exercise_name,
                    "body_region": rec.body_region,
                    "best": {},
                },
            )
            best = group["best"]
            current = best.get(rec.record_type)
            if current is None or rec.value > current["value"]:
                best[rec.record_type] = {
                    "record_type": rec.record_type.value,
                    "value": rec.value,
                    "context": rec.context,
                    "achieved_at": rec.achieved_at.isoformat(),
                }
        result: List[Dict] = []
        for group in groups.values():
            best = group.pop("best")
            group["records"] = list(best.values())
            result.append(group)
        return result

    def pr_board(self, records: Iterable[PersonalRecord]) -> List[Dict]:
        """Best records per exercise sorted by name and record type."""
        groups = self.personal_records(records)
        for group in groups:
            group["records"].sort(
                key=lambda r: PR_TYPE_ORDER.index(RecordType(r["record_type"]))
            )
        return sorted(groups, key=lambda g: g["exercise_name"].casefold())

    def volume_history(
        self, weeks: Optional[int] = None, now: Optional[datetime.datetime] = None
    ) -> List[Dict]:
        """Return stored session volume bucketed by Monday-start week."""
        weeks = weeks or self.settings.volume_history_weeks
        now = now or datetime.datetime.now()
        sessions = [
            s
            for s in self._completed_since(now - datetime.timedelta(days=weeks * 7))
            if s.total_volume is not None
        ]
        if not sessions:
            return []
        df = pd.DataFrame(
            {
                "week": [
                    self._week_start(s.completed_at.date()).isoformat() for s in sessions
                ],
                "volume": [float(s.total_volume) for s in sessions],
            }
        )
        grouped = df.groupby("week")["volume"].agg(["sum", "count"]).sort_index()
        history: List[Dict] = []
        for week, row in grouped.iterrows():
            count = int(row["count"])
            history.append(
                {
                    "date": week,
                    "volume": MathTools.round_half_up(row["sum"]),
                    "label": f"{count} session{'' if count == 1 else 's'}",
                }
            )
        return history

    def e1rm_history(
        self,
        exercise_id: str,
        months: Optional[int] = None,
        now: Optional[datetime.datetime] = None,
    ) -> List[Dict]:
        """Return the best estimated 1RM of ``exercise_id`` per session."""
        months = months or self.settings.e1rm_history_months
        now = now or datetime.datetime.now()
        cutoff = (pd.Timestamp(now) - pd.DateOffset(months=months)).to_pydatetime()
        points: List[Dict] = []
        for session in self._completed_since(cutoff):
            for ex in session.exercises:
                if ex.exercise_id != exercise_id:
                    continue
                best, best_set = StrengthMetrics.best_e1rm(ex.sets, completed_only=True)
                if best > 0:
                    points.append(
                        {
                            "date": session.completed_at.isoformat(),
                            "e1rm": MathTools.round_one_decimal(best),
                            "weight": best_set.weight,
                            "reps": best_set.reps,
                        }
                    )
        return points

    def activity_data(
        self, months: Optional[int] = None, now: Optional[datetime.datetime] = None
    ) -> List[Dict]:
        """Return the number of completed sessions per day for heatmaps."""
        months = months or self.settings.activity_months
        now = now or datetime.datetime.now()
        cutoff = (pd.Timestamp(now) - pd.DateOffset(months=months)).to_pydatetime()
        days = [s.completed_at.date().isoformat() for s in self._completed_since(cutoff)]
        if not days:
            return []
        counts = pd.Series(days).value_counts().sort_index()
        return [{"date": day, "count": int(count)} for day, count in counts.items()]

    def muscle_group_breakdown(
        self, weeks: Optional[int] = None, now: Optional[datetime.datetime] = None
    ) -> List[Dict]:
        """Return role-weighted training volume per muscle group."""
        weeks = weeks or self.settings.muscle_breakdown_weeks
        now = now or datetime.datetime.now()
        rows: List[tuple[str, float]] = []
        for session in self._completed_since(now - datetime.timedelta(days=weeks * 7)):
            for ex in session.exercises:
                volume = StrengthMetrics.total_volume(ex.sets)
                if volume == 0:
                    continue
                for group, role in ex.muscles:
                    rows.append((group, volume * role_weight(role)))
        if not rows:
            return []
        df = pd.DataFrame(rows, columns=["name", "volume"])
        volumes = df.groupby("name", sort=False)["volume"].sum()
        total = float(volumes.sum())
        breakdown = [
            {
                "name": name,
                "volume": MathTools.round_half_up(volume),
                "percentage": (
                    MathTools.round_half_up(volume / total * 100) if total > 0 else 0
                ),
            }
            for name, volume in volumes.items()
        ]
        return sorted(breakdown, key=lambda b: b["volume"], reverse=True)

    def progress_summary(self, records: Iterable[PersonalRecord]) -> Dict[str, int]:
        completed = [s for s in self.sessions if s.is_completed]
        volume = sum(s.total_volume or 0 for s in completed)
        return {
            "total_sessions": len(completed),
            "total_volume": MathTools.round_half_up(volume),
            "total_prs": len(list(records)),
        }

    def previous_performance(self, exercise_id: str) -> Optional[Dict]:
        """Return the sets of the last completed session with ``exercise_id``."""
        for session in reversed(self._completed_since(datetime.datetime.min)):
            for ex in session.exercises:
                if ex.exercise_id != exercise_id:
                    continue
                best, _ = StrengthMetrics.best_e1rm(ex.sets)
                return {
                    "sets": [
                        {"weight": s.weight, "reps": s.reps, "set_type": s.set_type}
                        for s in ex.sets
                    ],
                    "best_e1rm": best or None,
                }
        return None
