"""
SQLite persistence for generated workouts and the canonical exercise library.
"""

import json
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

EXERCISE_JSON_FIELDS = ("primary_muscles", "secondary_muscles")
WORKOUT_JSON_FIELDS = (
    "workout_data",
    "muscle_focus",
    "workout_focus",
    "primary_muscles_targeted",
    "equipment_needed_array",
)

WORKOUT_COLUMNS = (
    "id",
    "user_id",
    "workout_data",
    "total_duration_minutes",
    "muscle_groups_targeted",
    "joint_groups_affected",
    "equipment_needed",
    "raw_ai_response",
    "ai_model",
    "prompt_tokens",
    "completion_tokens",
    "generation_time_ms",
    "parse_attempts",
    "muscle_focus",
    "workout_focus",
    "exercise_count",
    "special_instructions",
    "total_sets",
    "total_exercises",
    "estimated_duration_minutes",
    "primary_muscles_targeted",
    "equipment_needed_array",
    "created_at",
)


def format_timestamp(value):
    """Render a datetime as fixed-width UTC text so string comparison orders correctly."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime(TIMESTAMP_FORMAT)


def utc_now():
    return datetime.now(timezone.utc)


def _decode(row, json_fields):
    if row is None:
        return None
    record = dict(row)
    for field in json_fields:
        if record.get(field) is not None:
            record[field] = json.loads(record[field])
    return record


class WorkoutDB:
    """Small SQLite wrapper for workouts, canonical exercises and profiles."""

    def __init__(self, db_path):
        self.db_path = db_path
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

    def close(self):
        self.conn.close()

    @contextmanager
    def transaction(self):
        """Context manager for atomic write operations."""
        try:
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def init_schema(self):
        """Create core schema if it does not already exist."""
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS profiles (
                user_id TEXT PRIMARY KEY,
                is_admin INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            );

            CREATE TABLE IF NOT EXISTS exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                search_key TEXT NOT NULL UNIQUE,
                primary_muscles TEXT NOT NULL DEFAULT '[]',
                secondary_muscles TEXT NOT NULL DEFAULT '[]',
                equipment TEXT,
                movement_type TEXT CHECK (movement_type IN ('compound', 'isolation')),
                created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
                updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            );

            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                workout_data TEXT NOT NULL,
                total_duration_minutes REAL,
                muscle_groups_targeted TEXT,
                joint_groups_affected TEXT,
                equipment_needed TEXT,
                raw_ai_response TEXT NOT NULL,
                ai_model TEXT NOT NULL,
                prompt_tokens INTEGER,
                completion_tokens INTEGER,
                generation_time_ms INTEGER,
                parse_attempts INTEGER NOT NULL,
                muscle_focus TEXT NOT NULL,
                workout_focus TEXT NOT NULL,
                exercise_count INTEGER NOT NULL,
                special_instructions TEXT,
                total_sets INTEGER,
                total_exercises INTEGER,
                estimated_duration_minutes INTEGER,
                primary_muscles_targeted TEXT,
                equipment_needed_array TEXT,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS workout_exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                workout_id TEXT NOT NULL,
                exercise_id INTEGER NOT NULL,
                order_index INTEGER NOT NULL,
                sets INTEGER NOT NULL,
                reps INTEGER NOT NULL,
                rest_seconds INTEGER NOT NULL,
                rationale TEXT,
                created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
                FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                FOREIGN KEY(exercise_id) REFERENCES exercises(id) ON DELETE RESTRICT,
                UNIQUE(workout_id, order_index)
            );

            CREATE INDEX IF NOT EXISTS idx_workouts_user_created ON workouts(user_id, created_at);
            CREATE INDEX IF NOT EXISTS idx_workout_exercises_workout_id ON workout_exercises(workout_id);
            CREATE INDEX IF NOT EXISTS idx_workout_exercises_exercise_id ON workout_exercises(exercise_id);
            """
        )
        self.conn.commit()

    # -------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------

    def upsert_profile(self, user_id, is_admin=False):
        with self.transaction():
            self.conn.execute(
                """
                INSERT INTO profiles (user_id, is_admin)
                VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET is_admin = excluded.is_admin
                """,
                (user_id, 1 if is_admin else 0),
            )

    def is_admin(self, user_id):
        """Users without a profile row are not admins."""
        row = self.conn.execute(
            "SELECT is_admin FROM profiles WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return bool(row and row["is_admin"])

    # -------------------------------------------------------------------
    # Canonical exercises
    # -------------------------------------------------------------------

    def find_exercise_by_search_key(self, search_key):
        row = self.conn.execute(
            "SELECT * FROM exercises WHERE search_key = ?",
            (search_key,),
        ).fetchone()
        return _decode(row, EXERCISE_JSON_FIELDS)

    def insert_exercise(
        self,
        name,
        search_key,
        primary_muscles=None,
        secondary_muscles=None,
        equipment=None,
        movement_type=None,
    ):
        """
        Insert a canonical exercise and return the stored record.

        Raises sqlite3.IntegrityError if the search key already exists.
        """
        if not search_key:
            raise ValueError("Exercise search key cannot be empty")

        with self.transaction():
            cursor = self.conn.execute(
                """
                INSERT INTO exercises (
                    name,
                    search_key,
                    primary_muscles,
                    secondary_muscles,
                    equipment,
                    movement_type
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    name.strip(),
                    search_key,
                    json.dumps(list(primary_muscles or [])),
                    json.dumps(list(secondary_muscles or [])),
                    equipment,
                    movement_type,
                ),
            )
        row = self.conn.execute(
            "SELECT * FROM exercises WHERE id = ?",
            (cursor.lastrowid,),
        ).fetchone()
        return _decode(row, EXERCISE_JSON_FIELDS)

    # -------------------------------------------------------------------
    # Workouts
    # -------------------------------------------------------------------

    def count_workouts_since(self, user_id, since, until=None):
        """Count a user's workouts with since < created_at <= until."""
        until = until or utc_now()
        row = self.conn.execute(
            """
            SELECT COUNT(*) AS c
            FROM workouts
            WHERE user_id = ? AND created_at > ? AND created_at <= ?
            """,
            (user_id, format_timestamp(since), format_timestamp(until)),
        ).fetchone()
        return int(row["c"])

    def insert_workout(self, workout):
        """
        Insert one workout row (no commit; call inside transaction()).

        `workout` is a dict keyed by WORKOUT_COLUMNS; id and created_at are
        filled in when absent. Returns the workout id.
        """
        record = dict(workout)
        record.setdefault("id", uuid.uuid4().hex)
        created_at = record.get("created_at") or utc_now()
        if isinstance(created_at, datetime):
            created_at = format_timestamp(created_at)
        record["created_at"] = created_at

        for field in WORKOUT_JSON_FIELDS:
            if field in record and record[field] is not None:
                record[field] = json.dumps(record[field])

        unknown = set(record) - set(WORKOUT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown workout columns: {', '.join(sorted(unknown))}")

        columns = [c for c in WORKOUT_COLUMNS if c in record]
        placeholders = ", ".join("?" for _ in columns)
        self.conn.execute(
            f"INSERT INTO workouts ({', '.join(columns)}) VALUES ({placeholders})",
            [record[c] for c in columns],
        )
        return record["id"]

    def insert_workout_exercise(self, workout_id, exercise_id, order_index, sets, reps, rest_seconds, rationale=None):
        """Insert one workout -> exercise link row (no commit)."""
        self.conn.execute(
            """
            INSERT INTO workout_exercises (
                workout_id,
                exercise_id,
                order_index,
                sets,
                reps,
                rest_seconds,
                rationale
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (workout_id, exercise_id, order_index, sets, reps, rest_seconds, rationale),
        )

    def save_workout(self, workout, links):
        """
        Write a workout and its exercise links atomically.

        Args:
            workout: Dict for insert_workout
            links: Iterable of dicts with exercise_id, order_index, sets, reps,
                rest_seconds, rationale

        Returns:
            The new workout id
        """
        with self.transaction():
            workout_id = self.insert_workout(workout)
            for link in links:
                self.insert_workout_exercise(
                    workout_id=workout_id,
                    exercise_id=link["exercise_id"],
                    order_index=link["order_index"],
                    sets=link["sets"],
                    reps=link["reps"],
                    rest_seconds=link["rest_seconds"],
                    rationale=link.get("rationale"),
                )
        return workout_id

    def get_workout(self, workout_id):
        row = self.conn.execute(
            "SELECT * FROM workouts WHERE id = ?",
            (workout_id,),
        ).fetchone()
        return _decode(row, WORKOUT_JSON_FIELDS)

    def get_workout_exercises(self, workout_id):
        """Return link rows joined with their canonical exercise, in workout order."""
        rows = self.conn.execute(
            """
            SELECT
                we.order_index,
                we.sets,
                we.reps,
                we.rest_seconds,
                we.rationale,
                e.id AS exercise_id,
                e.name,
                e.search_key,
                e.primary_muscles,
                e.secondary_muscles,
                e.equipment,
                e.movement_type
            FROM workout_exercises we
            JOIN exercises e ON e.id = we.exercise_id
            WHERE we.workout_id = ?
            ORDER BY we.order_index
            """,
            (workout_id,),
        ).fetchall()
        return [_decode(row, EXERCISE_JSON_FIELDS) for row in rows]

    def count_summary(self):
        """Return high-level row counts for quick sanity checks."""
        counts = {}
        for table in ("exercises", "workouts", "workout_exercises", "profiles"):
            counts[table] = int(self.conn.execute(f"SELECT COUNT(*) AS c FROM {table}").fetchone()["c"])
        return counts
