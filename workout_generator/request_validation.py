"""
Bounds checking for inbound workout generation requests.

Runs before any quota lookup or model call, so a rejected request has no side effects.
"""

from workout_generator.errors import ValidationError
from workout_generator.focus_catalog import FOCUS_INSTRUCTIONS, MUSCLE_GROUPS
from workout_generator.models import GenerationRequest


MIN_MUSCLE_FOCUS = 1
MAX_MUSCLE_FOCUS = 4
MIN_WORKOUT_FOCUS = 1
MAX_WORKOUT_FOCUS = 3
MIN_EXERCISE_COUNT = 1
MAX_EXERCISE_COUNT = 10
MAX_SPECIAL_INSTRUCTIONS = 140


def _tag_list(value, field_name):
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list of strings")

    tags = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValidationError(f"{field_name} must be a list of non-empty strings")
        tags.append(item.strip().lower())

    if len(set(tags)) != len(tags):
        raise ValidationError(f"{field_name} must not contain duplicates")
    return tags


def validate_generation_request(payload, focus_catalog=None, muscle_groups=MUSCLE_GROUPS):
    """
    Check an inbound request against the input bounds and return a GenerationRequest.

    Args:
        payload: Dict with muscle_focus, workout_focus, exercise_count and
            optional special_instructions
        focus_catalog: Mapping of known workout focus tags (defaults to FOCUS_INSTRUCTIONS)
        muscle_groups: Known muscle focus tags

    Raises:
        ValidationError: with a message suitable for showing to the user verbatim
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")

    focus_catalog = FOCUS_INSTRUCTIONS if focus_catalog is None else focus_catalog

    muscle_focus = _tag_list(payload.get("muscle_focus") or [], "muscle_focus")
    if not MIN_MUSCLE_FOCUS <= len(muscle_focus) <= MAX_MUSCLE_FOCUS:
        raise ValidationError(f"Please select {MIN_MUSCLE_FOCUS}-{MAX_MUSCLE_FOCUS} muscle groups")
    unknown_muscles = [m for m in muscle_focus if m not in muscle_groups]
    if unknown_muscles:
        raise ValidationError(f"Unknown muscle group: {', '.join(unknown_muscles)}")

    workout_focus = _tag_list(payload.get("workout_focus") or [], "workout_focus")
    if len(workout_focus) < MIN_WORKOUT_FOCUS:
        raise ValidationError("Please select a workout focus")
    if len(workout_focus) > MAX_WORKOUT_FOCUS:
        raise ValidationError(f"Please select at most {MAX_WORKOUT_FOCUS} workout focus options")
    unknown_focus = [f for f in workout_focus if f not in focus_catalog]
    if unknown_focus:
        raise ValidationError(f"Unknown workout focus: {', '.join(unknown_focus)}")

    exercise_count = payload.get("exercise_count")
    # bool is an int subclass
    if isinstance(exercise_count, bool) or not isinstance(exercise_count, int):
        raise ValidationError("Exercise count must be a whole number")
    if not MIN_EXERCISE_COUNT <= exercise_count <= MAX_EXERCISE_COUNT:
        raise ValidationError(f"Exercise count must be between {MIN_EXERCISE_COUNT}-{MAX_EXERCISE_COUNT}")

    special_instructions = payload.get("special_instructions")
    if special_instructions is not None:
        if not isinstance(special_instructions, str):
            raise ValidationError("Special instructions must be text")
        if len(special_instructions) > MAX_SPECIAL_INSTRUCTIONS:
            raise ValidationError(
                f"Special instructions must be {MAX_SPECIAL_INSTRUCTIONS} characters or less"
            )
        special_instructions = special_instructions.strip() or None

    return GenerationRequest(
        muscle_focus=muscle_focus,
        workout_focus=workout_focus,
        exercise_count=exercise_count,
        special_instructions=special_instructions,
    )
