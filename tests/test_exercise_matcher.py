import os
import sqlite3
import tempfile
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock

from workout_generator.errors import CanonicalizationError
from workout_generator.exercise_matcher import (
    create_search_key,
    determine_movement_type,
    extract_equipment,
    find_or_create_exercise,
)
from workout_generator.models import ParsedExercise
from workout_generator.workout_db import WorkoutDB


def _exercise(name, **overrides):
    values = {"name": name, "sets": 3, "reps": 10, "rest_time_seconds": 60, "rationale": ""}
    values.update(overrides)
    return ParsedExercise(**values)


class SearchKeyTests(unittest.TestCase):
    def test_case_and_whitespace(self):
        self.assertEqual(create_search_key("Barbell Bench Press"), "barbell bench press")
        self.assertEqual(create_search_key("  barbell   bench\tpress "), "barbell bench press")

    def test_punctuation(self):
        self.assertEqual(create_search_key("Pull-Up"), "pull up")
        self.assertEqual(create_search_key("Farmer's Carry!"), "farmers carry")
        self.assertEqual(create_search_key("Cable Fly (High/Low)"), "cable fly high low")
        self.assertEqual(create_search_key("EZ-Bar Curl"), create_search_key("ez bar curl"))

    def test_empty(self):
        self.assertEqual(create_search_key(""), "")
        self.assertEqual(create_search_key(None), "")
        self.assertEqual(create_search_key("!!!"), "")


class EquipmentInferenceTests(unittest.TestCase):
    FIXTURES = [
        ("Barbell Back Squat", "barbell"),
        ("Bench Press", "barbell"),
        ("Romanian Deadlift", "barbell"),
        ("Dumbbell Lateral Raise", "dumbbell"),
        ("DB Hammer Curl", "dumbbell"),
        ("Kettlebell Swing", "kettlebell"),
        ("Cable Face Pull", "cable"),
        ("Rope Pressdown", "cable"),
        ("Resistance Band Pull-Apart", "resistance band"),
        ("EZ-Bar Skull Crusher", "ez bar"),
        ("Trap Bar Deadlift", "trap bar"),
        ("Smith Machine Squat", "smith machine"),
        ("Leg Press", "machine"),
        ("Seated Leg Curl", "machine"),
        ("Box Jump", "box"),
        ("Jump Rope", "jump rope"),
        ("Medicine Ball Slam", "medicine ball"),
        ("Push-Up", "bodyweight"),
        ("Plank", "bodyweight"),
    ]

    def test_fixture_table(self):
        for name, expected in self.FIXTURES:
            with self.subTest(name=name):
                self.assertEqual(extract_equipment(name), expected)


class MovementTypeTests(unittest.TestCase):
    FIXTURES = [
        ("Barbell Bench Press", [], "compound"),
        ("Leg Press", [], "compound"),
        ("Romanian Deadlift", [], "compound"),
        ("Pull-Up", [], "compound"),
        ("Bulgarian Split Squat", [], "compound"),
        ("Box Jump", [], "compound"),
        ("Leg Extension", [], "isolation"),
        ("Dumbbell Lateral Raise", [], "isolation"),
        ("Tricep Pushdown", [], "isolation"),
        ("Overhead Triceps Extension", [], "isolation"),
        ("Cable Fly", [], "isolation"),
        ("Standing Calf Raise", [], "isolation"),
        ("Glute Bridge", ["glutes", "hamstrings"], "compound"),
        ("Plank", ["core"], "isolation"),
        ("Plank", [], "isolation"),
    ]

    def test_fixture_table(self):
        for name, muscles, expected in self.FIXTURES:
            with self.subTest(name=name, muscles=muscles):
                self.assertEqual(determine_movement_type(name, muscles), expected)


class FindOrCreateExerciseTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db = WorkoutDB(os.path.join(self.tmpdir.name, "workouts.db"))
        self.db.init_schema()

    def tearDown(self):
        self.db.close()
        self.tmpdir.cleanup()

    def test_same_name_variants_resolve_to_one_record(self):
        first, created_first = find_or_create_exercise(
            self.db, _exercise("Barbell Bench Press", primary_muscles=["chest", "triceps"])
        )
        second, created_second = find_or_create_exercise(self.db, _exercise("barbell   bench press"))

        self.assertTrue(created_first)
        self.assertFalse(created_second)
        self.assertEqual(first["id"], second["id"])
        self.assertEqual(self.db.count_summary()["exercises"], 1)

    def test_existing_record_wins_over_submitted_data(self):
        find_or_create_exercise(
            self.db,
            _exercise("Cable Fly", primary_muscles=["chest"], equipment="cable", movement_type="isolation"),
        )
        record, created = find_or_create_exercise(
            self.db,
            _exercise("cable fly", primary_muscles=["shoulders"], equipment="machine", movement_type="compound"),
        )
        self.assertFalse(created)
        self.assertEqual(record["primary_muscles"], ["chest"])
        self.assertEqual(record["equipment"], "cable")
        self.assertEqual(record["movement_type"], "isolation")

    def test_infers_missing_equipment_and_movement_type(self):
        record, created = find_or_create_exercise(self.db, _exercise("Dumbbell Lateral Raise"))
        self.assertTrue(created)
        self.assertEqual(record["equipment"], "dumbbell")
        self.assertEqual(record["movement_type"], "isolation")
        self.assertEqual(record["search_key"], "dumbbell lateral raise")

    def test_supplied_values_are_kept_on_create(self):
        record, _ = find_or_create_exercise(
            self.db,
            _exercise("Landmine Press", equipment="landmine", movement_type="isolation",
                      secondary_muscles=["triceps"]),
        )
        self.assertEqual(record["equipment"], "landmine")
        self.assertEqual(record["movement_type"], "isolation")
        self.assertEqual(record["secondary_muscles"], ["triceps"])

    def test_concurrent_insert_resolves_to_winner(self):
        winner = self.db.insert_exercise(name="Goblet Squat", search_key="goblet squat")
        racing_db = MagicMock(wraps=self.db)
        # First lookup misses (the other request has not committed yet), the re-read finds the winner.
        racing_db.find_exercise_by_search_key.side_effect = [None, winner]

        record, created = find_or_create_exercise(racing_db, _exercise("Goblet Squat"))

        self.assertFalse(created)
        self.assertEqual(record["id"], winner["id"])

    def test_database_error_is_canonicalization_error(self):
        broken_db = MagicMock()
        broken_db.find_exercise_by_search_key.side_effect = sqlite3.OperationalError("disk I/O error")
        with self.assertRaises(CanonicalizationError):
            find_or_create_exercise(broken_db, _exercise("Push-Up"))

    def test_unusable_name(self):
        exercise = SimpleNamespace(
            name="!!!", primary_muscles=[], secondary_muscles=[], equipment=None, movement_type=None
        )
        with self.assertRaises(CanonicalizationError):
            find_or_create_exercise(self.db, exercise)


if __name__ == "__main__":
    unittest.main()
