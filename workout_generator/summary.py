"""
Derived summary fields for a finished exercise list.
"""

import math


SECONDS_PER_SET = 30


def calculate_workout_summary(exercises):
    """
    Compute aggregate fields for a workout.

    Args:
        exercises: Iterable of dicts with primary_muscles, equipment (optional),
            sets and rest_seconds

    Returns:
        Dict with total_sets, total_exercises, primary_muscles_targeted,
        equipment_needed and estimated_duration_minutes
    """
    exercises = list(exercises)

    total_sets = sum(ex["sets"] for ex in exercises)
    total_rest_seconds = sum(ex["sets"] * ex["rest_seconds"] for ex in exercises)

    muscles = []
    equipment = []
    for ex in exercises:
        for muscle in ex.get("primary_muscles") or []:
            if muscle not in muscles:
                muscles.append(muscle)
        item = ex.get("equipment")
        if item and item not in equipment:
            equipment.append(item)

    return {
        "total_sets": total_sets,
        "total_exercises": len(exercises),
        "primary_muscles_targeted": muscles,
        "equipment_needed": equipment,
        "estimated_duration_minutes": math.ceil((total_sets * SECONDS_PER_SET + total_rest_seconds) / 60),
    }
