"""
End-to-end workout generation: validate, check quota, generate, canonicalize, summarize, persist.
"""

import sqlite3

from workout_generator.errors import PersistenceError, WorkoutGenerationError
from workout_generator.exercise_matcher import find_or_create_exercise
from workout_generator.quota import QuotaGuard
from workout_generator.request_validation import validate_generation_request
from workout_generator.summary import calculate_workout_summary
from workout_generator.workout_db import utc_now


class RequestContext:
    """Who is asking and where their data lives, for the duration of one request."""

    def __init__(self, user_id, db, is_admin=False):
        if not user_id:
            raise ValueError("user_id is required")
        self.user_id = user_id
        self.db = db
        self.is_admin = is_admin

    @classmethod
    def for_user(cls, db, user_id):
        """Build a context, reading the admin flag from the user's profile."""
        return cls(user_id=user_id, db=db, is_admin=db.is_admin(user_id))


def canonicalize_exercises(db, workout):
    """
    Resolve every exercise in a ParsedWorkout to its canonical record.

    Stored muscle/equipment/movement data wins over what the model just sent
    for exercises that already exist.

    Returns:
        List of exercise dicts in workout order, each carrying its exercise_id
    """
    resolved = []
    for position, exercise in enumerate(workout.exercises, start=1):
        record, _ = find_or_create_exercise(db, exercise)
        resolved.append({
            "exercise_id": record["id"],
            "name": exercise.name,
            "canonical_name": record["name"],
            "sets": exercise.sets,
            "reps": exercise.reps,
            "rest_time_seconds": exercise.rest_time_seconds,
            "rationale": exercise.rationale,
            "primary_muscles": record["primary_muscles"],
            "secondary_muscles": record["secondary_muscles"],
            "equipment": record["equipment"],
            "movement_type": record["movement_type"],
            "order_index": position,
        })
    return resolved


def build_workout_record(user_id, request, outcome, exercises, summary, created_at):
    """Assemble the workouts row for a successful generation."""
    workout = outcome.workout
    return {
        "user_id": user_id,
        "workout_data": {
            "exercises": exercises,
            "total_duration_minutes": workout.total_duration_minutes,
            "muscle_groups_targeted": workout.muscle_groups_targeted,
            "joint_groups_affected": workout.joint_groups_affected,
            "equipment_needed": workout.equipment_needed,
            "summary": summary,
        },
        "total_duration_minutes": workout.total_duration_minutes,
        "muscle_groups_targeted": workout.muscle_groups_targeted,
        "joint_groups_affected": workout.joint_groups_affected,
        "equipment_needed": workout.equipment_needed,
        "raw_ai_response": outcome.raw_response,
        "ai_model": outcome.model,
        "prompt_tokens": outcome.prompt_tokens,
        "completion_tokens": outcome.completion_tokens,
        "generation_time_ms": outcome.generation_time_ms,
        "parse_attempts": outcome.parse_attempts,
        "muscle_focus": list(request.muscle_focus),
        "workout_focus": list(request.workout_focus),
        "exercise_count": request.exercise_count,
        "special_instructions": request.special_instructions,
        "total_sets": summary["total_sets"],
        "total_exercises": summary["total_exercises"],
        "estimated_duration_minutes": summary["estimated_duration_minutes"],
        "primary_muscles_targeted": summary["primary_muscles_targeted"],
        "equipment_needed_array": summary["equipment_needed"],
        "created_at": created_at,
    }


def _summary_rows(exercises):
    return [
        {
            "primary_muscles": ex["primary_muscles"],
            "equipment": ex["equipment"],
            "sets": ex["sets"],
            "rest_seconds": ex["rest_time_seconds"],
        }
        for ex in exercises
    ]


def _link_rows(exercises):
    return [
        {
            "exercise_id": ex["exercise_id"],
            "order_index": ex["order_index"],
            "sets": ex["sets"],
            "reps": ex["reps"],
            "rest_seconds": ex["rest_time_seconds"],
            "rationale": ex["rationale"],
        }
        for ex in exercises
    ]


def run_generation(context, payload, generator, config=None, now=None):
    """
    Run the full pipeline and return the new workout id.

    Raises:
        WorkoutGenerationError: any stage failed; nothing was written to workouts
    """
    config = config or {}
    request = validate_generation_request(payload, focus_catalog=generator.focus_catalog)

    guard = QuotaGuard(
        context.db,
        exempt_admins=(config.get("quota") or {}).get("exempt_admins", True),
    )
    try:
        used = guard.check(context.user_id, is_admin=context.is_admin, now=now)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Could not check the daily generation limit: {exc}") from exc
    print(f"  Generations in the last 24 hours: {used}/{guard.limit}")

    outcome = generator.generate(request)

    exercises = canonicalize_exercises(context.db, outcome.workout)
    summary = calculate_workout_summary(_summary_rows(exercises))
    record = build_workout_record(
        context.user_id,
        request,
        outcome,
        exercises,
        summary,
        created_at=now or utc_now(),
    )

    try:
        workout_id = context.db.save_workout(record, _link_rows(exercises))
    except sqlite3.Error as exc:
        raise PersistenceError(f"Failed to save workout: {exc}") from exc

    print(f"✓ Workout saved: {workout_id}")
    return workout_id


def generate_workout(context, payload, generator, config=None, now=None):
    """
    Handle one inbound generation request.

    Returns:
        {"success": True, "workoutId": id} or
        {"success": False, "error": message, "errorType": kind}
    """
    try:
        workout_id = run_generation(context, payload, generator, config=config, now=now)
    except WorkoutGenerationError as exc:
        print(f"❌ Workout generation failed ({exc.error_type}): {exc}")
        return {"success": False, "error": str(exc), "errorType": exc.error_type}

    return {"success": True, "workoutId": workout_id}
