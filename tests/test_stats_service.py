import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import SetLog
from records import PersonalRecord, RecordType, SessionExerciseLog, SessionLog
from stats_service import StatisticsService


def bench(*sets: tuple) -> SessionExerciseLog:
    return SessionExerciseLog(
        exercise_id="bench",
        exercise_name="Bench Press",
        sets=[SetLog(weight=w, reps=r, completed=c) for w, r, c in sets],
        body_region="upper",
        muscles=[("Chest", "PRIMARY"), ("Triceps", "SECONDARY")],
    )


class StatisticsServiceTestCase(unittest.TestCase):
    NOW = datetime.datetime(2024, 3, 20, 12, 0)

    def setUp(self) -> None:
        squat = SessionExerciseLog(
            exercise_id="squat",
            exercise_name="Back Squat",
            sets=[SetLog(weight=140, reps=5, completed=True)],
            body_region="lower",
            muscles=[("Legs", "PRIMARY")],
        )
        self.sessions = [
            SessionLog(
                "s1",
                datetime.datetime(2024, 3, 18, 8, 0),
                completed_at=datetime.datetime(2024, 3, 18, 9, 0),
                total_volume=1000,
                exercises=[bench((100, 1, True), (80, 2, True))],
            ),
            SessionLog(
                "s2",
                datetime.datetime(2024, 3, 19, 8, 0),
                completed_at=datetime.datetime(2024, 3, 19, 9, 0),
                total_volume=500.4,
                exercises=[bench((110, 1, True), (120, 1, False))],
            ),
            SessionLog(
                "s3",
                datetime.datetime(2024, 3, 11, 8, 0),
                completed_at=datetime.datetime(2024, 3, 11, 9, 0),
                total_volume=800,
                exercises=[squat],
            ),
            SessionLog(
                "s4",
                datetime.datetime(2024, 3, 20, 8, 0),
                exercises=[bench((130, 1, True))],
            ),
            SessionLog(
                "s5",
                datetime.datetime(2023, 1, 1, 8, 0),
                completed_at=datetime.datetime(2023, 1, 1, 9, 0),
                total_volume=999,
            ),
        ]
        self.service = StatisticsService(self.sessions)

    def test_volume_history_by_week(self) -> None:
        history = self.service.volume_history(now=self.NOW)
        self.assertEqual(
            history,
            [
                {"date": "2024-03-11", "volume": 800, "label": "1 session"},
                {"date": "2024-03-18", "volume": 1500, "label": "2 sessions"},
            ],
        )

    def test_volume_history_empty(self) -> None:
        self.assertEqual(StatisticsService([]).volume_history(now=self.NOW), [])
        self.assertEqual(self.service.volume_history(weeks=1, now=self.NOW)[0]["volume"], 1500)

    def test_e1rm_history_uses_completed_sets(self) -> None:
        points = self.service.e1rm_history("bench", now=self.NOW)
        self.assertEqual([p["e1rm"] for p in points], [100.0, 110.0])
        self.assertEqual((points[1]["weight"], points[1]["reps"]), (110, 1))
        self.assertEqual(points[0]["date"], "2024-03-18T09:00:00")
        self.assertEqual(self.service.e1rm_history("deadlift", now=self.NOW), [])

    def test_activity_data(self) -> None:
        activity = self.service.activity_data(now=self.NOW)
        self.assertEqual(
            activity,
            [
                {"date": "2024-03-11", "count": 1},
                {"date": "2024-03-18", "count": 1},
                {"date": "2024-03-19", "count": 1},
            ],
        )

    def test_muscle_group_breakdown(self) -> None:
        breakdown = self.service.muscle_group_breakdown(now=self.NOW)
        self.assertEqual(
            breakdown,
            [
                {"name": "Legs", "volume": 700, "percentage": 56},
                {"name": "Chest", "volume": 370, "percentage": 29},
                {"name": "Triceps", "volume": 185, "percentage": 15},
            ],
        )

    def test_progress_summary(self) -> None:
        summary = self.service.progress_summary([object(), object()])
        self.assertEqual(
            summary, {"total_sessions": 4, "total_volume": 3299, "total_prs": 2}
        )

    def test_previous_performance(self) -> None:
        prev = self.service.previous_performance("bench")
        self.assertEqual(prev["best_e1rm"], 120)
        self.assertEqual(
            prev["sets"][0], {"weight": 110, "reps": 1, "set_type": "WORKING"}
        )
        self.assertIsNone(self.service.previous_performance("deadlift"))

    def test_pr_board(self) -> None:
        def rec(ex_id, name, r_type, value, day):
            return PersonalRecord(
                ex_id, name, r_type, value, datetime.datetime(2024, 3, day)
            )

        records = [
            rec("bench", "Bench Press", RecordType.MAX_WEIGHT, 110, 19),
            rec("bench", "Bench Press", RecordType.E1RM, 110, 19),
            rec("bench", "Bench Press", RecordType.E1RM, 110, 1),
            rec("bench", "Bench Press", RecordType.E1RM, 100, 18),
            rec("squat", "Back Squat", RecordType.E1RM, 163.3, 11),
        ]
        board = self.service.pr_board(records)
        self.assertEqual([g["exercise_name"] for g in board], ["Back Squat", "Bench Press"])
        bench_records = board[1]["records"]
        self.assertEqual(
            [r["record_type"] for r in bench_records], ["E1RM", "MAX_WEIGHT"]
        )
        self.assertEqual(bench_records[0]["value"], 110)
        self.assertEqual(bench_records[0]["achieved_at"], "2024-03-19T00:00:00")


if __name__ == "__main__":
    unittest.main()
