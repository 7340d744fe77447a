"""
Prompt construction for workout generation.

Templates are ordered lists of sections:
    Text(template)        - format string; every {slot} must be supplied
    Literal(text)         - emitted verbatim (used for the JSON example, which is full of braces)
    When(key, sections)   - rendered only when values[key] is truthy
"""

import math
import string
from collections import namedtuple


Text = namedtuple("Text", ["template"])
Literal = namedtuple("Literal", ["text"])
When = namedtuple("When", ["key", "sections"])


def required_slots(sections):
    """Return the set of slot names a template needs (including conditional keys)."""
    slots = set()
    formatter = string.Formatter()
    for section in sections:
        if isinstance(section, Text):
            for _, field_name, _, _ in formatter.parse(section.template):
                if field_name:
                    slots.add(field_name)
        elif isinstance(section, When):
            slots.add(section.key)
            slots |= required_slots(section.sections)
    return slots


def render_template(sections, values):
    """
    Render a section list against `values`.

    Raises:
        KeyError: if a Text section references a slot missing from `values`
    """
    parts = []
    for section in sections:
        if isinstance(section, Text):
            parts.append(section.template.format_map(values))
        elif isinstance(section, Literal):
            parts.append(section.text)
        elif isinstance(section, When):
            if values.get(section.key):
                parts.append(render_template(section.sections, values))
        else:
            raise TypeError(f"Unknown template section: {section!r}")
    return "".join(parts)


JSON_RESPONSE_EXAMPLE = """{
  "workout": {
    "exercises": [
      {
        "name": "Barbell Bench Press",
        "sets": 3,
        "reps": 10,
        "rest_time_seconds": 90,
        "primary_muscles": ["chest", "triceps"],
        "secondary_muscles": ["shoulders"],
        "equipment": "barbell",
        "movement_type": "compound",
        "order_index": 1,
        "rationale": "Targets the chest with heavy load for maximum hypertrophy stimulus."
      },
      {
        "name": "Dumbbell Lateral Raise",
        "sets": 3,
        "reps": 12,
        "rest_time_seconds": 60,
        "primary_muscles": ["shoulders"],
        "secondary_muscles": ["traps"],
        "equipment": "dumbbell",
        "movement_type": "isolation",
        "order_index": 2,
        "rationale": "Isolates the lateral deltoids for balanced shoulder development."
      }
    ],
    "total_duration_minutes": 30,
    "muscle_groups_targeted": "Chest, shoulders, triceps",
    "joint_groups_affected": "Shoulders, elbows",
    "equipment_needed": "Barbell, dumbbells"
  }
}"""

WORKOUT_TEMPLATE = [
    Text(
        "You are a professional fitness coach and exercise scientist.\n"
        "Generate a workout for a user based on the following data inputs. Use logic, safety, "
        "goal alignment, biomechanics and sport science understanding.\n"
        "\n"
        "USER REQUIREMENTS:\n"
        "- MUSCLE_FOCUS: {muscle_focus}\n"
        "- WORKOUT_FOCUS: {workout_focus}\n"
        "- EXERCISE_COUNT: {exercise_count}\n"
    ),
    When("special_instructions", [
        Text("- SPECIAL_INSTRUCTIONS: {special_instructions}\n"),
    ]),
    Text(
        "\n"
        "SPECIFIC INSTRUCTIONS FOR {workout_focus_upper} TRAINING:\n"
        "{focus_instructions}\n"
        "\n"
        "------------------------------\n"
        "MANDATORY RULES:\n"
        "- You MUST include EXACTLY {exercise_count} exercises - no more, no less\n"
        "- At least {min_exercises_for_muscle} exercises must directly target the muscles in MUSCLE_FOCUS\n"
        "- Every muscle in MUSCLE_FOCUS must appear in at least one exercise's primary_muscles\n"
        "- All exercises must align with the {workout_focus} training style\n"
    ),
    When("special_instructions", [
        Text("- PRIORITIZE AND INCLUDE THIS USER INSTRUCTION: {special_instructions}\n"),
    ]),
    Text(
        "- If WORKOUT_FOCUS is plyometric, include plyometric exercises\n"
        "- If needed add running or jumping exercises, not only gym movements\n"
        "- Order exercises according to best practice for {workout_focus} training\n"
        "- If there is only one muscle in MUSCLE_FOCUS, cover it from different angles\n"
        "- Do not include near-duplicates (e.g. bench press and dumbbell bench press)\n"
        "\n"
        "FOR EACH EXERCISE:\n"
        "- Name it \"Equipment Exercise Name\" (e.g. \"Barbell Bench Press\", \"Dumbbell Lateral Raise\")\n"
        "- Equipment terms: Barbell, Dumbbell, Cable, Machine, Kettlebell, Resistance Band, EZ Bar, "
        "Bodyweight, Trap Bar, Box\n"
        "- Give sets and reps as single whole numbers (no ranges)\n"
        "- Give rest time in seconds\n"
        "- List primary and secondary muscles\n"
        "- Specify movement type (compound or isolation)\n"
        "- Rationale: how to perform it, benefits and risks, in one or two sentences\n"
        "\n"
        "REVIEW RULES:\n"
        "- Cross-check for excessive fatigue on the same joints in sequence\n"
        "- Balance muscle groups and planes of movement\n"
        "- Do not do more than asked for\n"
        "\n"
        "RESPOND WITH JSON IN EXACTLY THIS SHAPE:\n"
    ),
    Literal(JSON_RESPONSE_EXAMPLE),
    Text("\n\nYour response must be ONLY this JSON object with no text before or after it."),
]

RETRY_SECTION = [
    Text(
        "\n\nIMPORTANT: Your previous response failed to parse correctly or did not follow the "
        "required format.\n"
        "Please ensure:\n"
        "1. Your response is VALID JSON with the EXACT structure shown in the example\n"
        "2. The \"exercises\" list contains EXACTLY {exercise_count} entries\n"
        "3. Each exercise includes name, sets, reps, rest_time_seconds, rationale, primary_muscles, "
        "secondary_muscles, equipment and movement_type\n"
        "4. sets, reps and rest_time_seconds are single whole numbers\n"
        "5. There is no explanation, markdown or text outside the JSON object"
    ),
]

RETRY_WORKOUT_TEMPLATE = WORKOUT_TEMPLATE + RETRY_SECTION


def min_exercises_for_muscle(exercise_count):
    """At least half of the workout (rounded up) must hit the muscle focus."""
    return max(1, math.ceil(exercise_count / 2))


def format_focus_instructions(workout_focus, focus_catalog):
    """
    Concatenate the catalog blob for each requested focus tag.

    Raises:
        KeyError: for a focus tag the catalog does not know
    """
    if len(workout_focus) == 1:
        return focus_catalog[workout_focus[0]]
    return "\n".join(f"- {focus.upper()}: {focus_catalog[focus]}" for focus in workout_focus)


def prompt_values(request, focus_catalog):
    """Build the slot values for a GenerationRequest."""
    workout_focus = " + ".join(request.workout_focus)
    return {
        "muscle_focus": ", ".join(request.muscle_focus),
        "workout_focus": workout_focus,
        "workout_focus_upper": workout_focus.upper(),
        "exercise_count": request.exercise_count,
        "min_exercises_for_muscle": min_exercises_for_muscle(request.exercise_count),
        "special_instructions": request.special_instructions or "",
        "focus_instructions": format_focus_instructions(request.workout_focus, focus_catalog),
    }


def build_prompt(request, focus_catalog, retry=False):
    """
    Render the instruction string for one generation attempt.

    Args:
        request: Validated GenerationRequest
        focus_catalog: Mapping of workout focus tag -> instruction blob
        retry: Append the retry block to the full initial prompt

    Returns:
        Prompt string
    """
    template = RETRY_WORKOUT_TEMPLATE if retry else WORKOUT_TEMPLATE
    return render_template(template, prompt_values(request, focus_catalog))
