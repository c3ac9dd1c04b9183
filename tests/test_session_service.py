import os
import sys
import datetime
import unittest
from dataclasses import replace

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import SetLog
from records import PersonalRecord, RecordType, SessionExerciseLog, SessionLog
from session_service import SessionService
from settings_schema import SettingsSchema


class SessionServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.started = datetime.datetime(2024, 3, 18, 9, 0)
        self.now = datetime.datetime(2024, 3, 18, 10, 0)
        self.session = SessionLog(
            "s1",
            self.started,
            exercises=[
                SessionExerciseLog(
                    "bench",
                    "Bench Press",
                    sets=[
                        SetLog(weight=100, reps=5, completed=True),
                        SetLog(weight=105, reps=3, completed=True),
                        SetLog(weight=80, reps=8, completed=False),
                        SetLog(weight=None, reps=5, completed=True),
                    ],
                    body_region="upper",
                )
            ],
        )
        old = datetime.datetime(2024, 1, 1)
        self.records = [
            PersonalRecord("bench", "Bench Press", RecordType.E1RM, 110, old),
            PersonalRecord("bench", "Bench Press", RecordType.MAX_WEIGHT, 100, old),
        ]
        self.service = SessionService()

    def test_complete_session(self) -> None:
        done = self.service.complete_session(
            self.session, self.records, notes="felt strong", now=self.now
        )
        self.assertEqual(done.total_volume, 815)
        self.assertEqual(done.duration, 3600)
        self.assertEqual(done.session.completed_at, self.now)
        self.assertEqual(done.session.total_volume, 815)
        self.assertEqual(done.session.notes, "felt strong")
        self.assertIsNone(self.session.completed_at)
        self.assertEqual(done.streak.current_streak, 1)
        self.assertEqual(done.streak.longest_streak, 1)

    def test_new_records(self) -> None:
        done = self.service.complete_session(self.session, self.records, now=self.now)
        found = {(r.record_type, r.context): r for r in done.new_records}
        self.assertEqual(len(done.new_records), 2)
        e1rm = found[(RecordType.E1RM, "100kg x 5 reps")]
        self.assertAlmostEqual(e1rm.value, 116.65)
        self.assertEqual(e1rm.body_region, "upper")
        weight = found[(RecordType.MAX_WEIGHT, "105kg x 3 reps")]
        self.assertEqual(weight.value, 105)
        self.assertEqual(weight.achieved_at, self.now)

    def test_first_session_sets_records(self) -> None:
        found = self.service.detect_records(self.session, [], self.now)
        types = [r.record_type for r in found]
        self.assertEqual(types.count(RecordType.E1RM), 1)
        self.assertEqual(types.count(RecordType.MAX_WEIGHT), 2)

    def test_duration_never_negative(self) -> None:
        done = self.service.complete_session(
            self.session, now=self.started - datetime.timedelta(minutes=5)
        )
        self.assertEqual(done.duration, 0)

    def test_aware_start_with_naive_clock(self) -> None:
        session = replace(
            self.session,
            started_at=self.started.replace(tzinfo=datetime.timezone.utc),
        )
        done = self.service.complete_session(session, now=self.now)
        self.assertEqual(done.duration, 3600)

    def test_record_context_in_pounds(self) -> None:
        service = SessionService(settings=SettingsSchema(weight_unit="lb"))
        found = service.detect_records(self.session, self.records, self.now)
        contexts = sorted(r.context for r in found)
        self.assertEqual(contexts, ["220.5lb x 5 reps", "231.5lb x 3 reps"])
        self.assertEqual(sorted(r.value for r in found)[0], 105)

    def test_already_completed(self) -> None:
        done = self.service.complete_session(self.session, now=self.now)
        with self.assertRaises(ValueError):
            self.service.complete_session(done.session, now=self.now)


if __name__ == "__main__":
    unittest.main()
