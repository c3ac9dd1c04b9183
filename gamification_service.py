from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional

from algorithms import MathTools
from records import as_utc
from settings_schema import SettingsSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Streak:
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime.datetime] = None
    freezes_used: int = 0
    freezes_allowed: int = 2


@dataclass(frozen=True)
class Achievement:
    achievement_id: str
    name: str
    category: str
    threshold: float
    description: str = ""
    icon: str = ""
    tier: str = "BRONZE"


class GamificationService:
    """Manage workout streaks and achievement progress."""

    def __init__(self, settings: SettingsSchema | None = None) -> None:
        self.settings = settings or SettingsSchema()

    def update_streak(
        self, streak: Streak | None, now: datetime.datetime | None = None
    ) -> Streak:
        """Return ``streak`` advanced by a workout completed at ``now``."""
        now = now or datetime.datetime.now()
        if streak is None:
            return Streak(
                current_streak=1,
                longest_streak=1,
                last_activity_date=now,
                freezes_allowed=self.settings.streak_freezes_allowed,
            )
        if streak.last_activity_date is None:
            return replace(
                streak,
                current_streak=1,
                longest_streak=max(1, streak.longest_streak),
                last_activity_date=now,
            )
        days = (as_utc(now) - as_utc(streak.last_activity_date)).days
        if days <= self.settings.streak_window_days:
            current = streak.current_streak + 1
            return replace(
                streak,
                current_streak=current,
                longest_streak=max(current, streak.longest_streak),
                last_activity_date=now,
            )
        logger.info("Streak broken after %s days without a workout", days)
        return replace(streak, current_streak=1, last_activity_date=now)

    def streak_summary(self, streak: Streak | None) -> dict:
        if streak is None:
            return {
                "current_streak": 0,
                "longest_streak": 0,
                "last_activity_date": None,
                "freezes_used": 0,
                "freezes_allowed": self.settings.streak_freezes_allowed,
            }
        last = streak.last_activity_date
        return {
            "current_streak": streak.current_streak,
            "longest_streak": streak.longest_streak,
            "last_activity_date": last.isoformat() if last else None,
            "freezes_used": streak.freezes_used,
            "freezes_allowed": streak.freezes_allowed,
        }

    @staticmethod
    def achievement_totals(
        session_count: int,
        total_volume: float,
        pr_count: int,
        streak: Streak | None,
    ) -> dict[str, float]:
        """Progress per achievement category."""
        return {
            "sessions": session_count,
            "volume": MathTools.round_half_up(total_volume),
            "prs": pr_count,
            "streak": streak.longest_streak if streak else 0,
        }

    def achievement_progress(
        self,
        achievements: Iterable[Achievement],
        earned: Mapping[str, datetime.datetime],
        progress: Mapping[str, float],
    ) -> list[dict]:
        """Return each achievement with its earned flag and completion."""
        result: list[dict] = []
        for ach in sorted(achievements, key=lambda a: (a.category, a.threshold)):
            earned_at = earned.get(ach.achievement_id)
            value = progress.get(ach.category, 0)
            pct = (
                min(MathTools.round_half_up(value / ach.threshold * 100), 100)
                if ach.threshold > 0
                else 100
            )
            result.append(
                {
                    "id": ach.achievement_id,
                    "name": ach.name,
                    "description": ach.description,
                    "icon": ach.icon,
                    "tier": ach.tier,
                    "category": ach.category,
                    "threshold": ach.threshold,
                    "earned": earned_at is not None,
                    "earned_at": earned_at.isoformat() if earned_at else None,
                    "progress": min(value, ach.threshold),
                    "progress_percentage": pct,
                }
            )
        return result
