"""
Static training-science instructions per workout focus, plus the muscle-group vocabulary.
"""


FOCUS_INSTRUCTIONS = {
    "cardio": (
        "Sustained cardiovascular challenge (65-85% HRmax) for 20+ minutes. Include continuous "
        "steady-state or interval formats (work:rest ratios 1:1 to 3:1). Focus on aerobic capacity, "
        "cardiac output, and metabolic efficiency."
    ),
    "hypertrophy": (
        "Muscle growth optimization through 5-30 reps at 65-85% 1RM, moderate rest (60-180s). "
        "Rep duration 2-8 seconds total. Focus on mechanical tension, metabolic stress, and progressive "
        "volume. Proximity to failure more critical than specific rep ranges."
    ),
    "isolation": (
        "Single-joint movements targeting specific muscles. 8-25 reps at 50-75% 1RM, shorter rest "
        "(45-90s). Higher volume approach for fiber-specific hypertrophy and movement quality refinement."
    ),
    "strength": (
        "Neuromuscular power development through 1-6 reps at 80-95% 1RM, long rest (2-5 minutes). "
        "Compound movements prioritized. Focus on force production, motor unit recruitment, and "
        "progressive overload."
    ),
    "speed": (
        "Rate of force development training. 3-8 reps at 30-60% 1RM moved maximally fast, full recovery "
        "(2-4 minutes). Emphasize concentric velocity and neuromuscular power without fatigue accumulation."
    ),
    "stability": (
        "Motor control and proprioceptive training. Unilateral exercises, unstable surfaces, anti-movement "
        "patterns. 8-15 controlled reps, 1-2 minute rest. Focus on joint stability and movement quality "
        "under challenge."
    ),
    "activation": (
        "Neuromuscular preparation and movement quality. 12-25 reps at 20-50% 1RM, minimal rest (30-60s). "
        "Emphasize mind-muscle connection, movement patterns, and tissue preparation for main training."
    ),
    "stretch": (
        "Tissue length and flexibility improvement. Static holds (30-60s) post-exercise, dynamic movements "
        "pre-exercise. Focus on range of motion gains and movement preparation."
    ),
    "mobility": (
        "Joint-specific range of motion enhancement. Controlled articular rotations, loaded stretches, "
        "movement flows. 10-15 repetitions through full ROM with 2-3 second holds at end ranges."
    ),
    "plyometric": (
        "Stretch-shortening cycle and reactive strength development. 3-8 explosive reps with full recovery "
        "(2-5 minutes). Focus on landing mechanics, elastic energy utilization, and power transfer."
    ),
}

MUSCLE_GROUPS = (
    "chest",
    "back",
    "shoulders",
    "biceps",
    "triceps",
    "forearms",
    "neck",
    "core",
    "glutes",
    "quads",
    "hamstrings",
    "calves",
)


def build_focus_catalog(config=None):
    """
    Return the focus catalog with any `focus_instructions` from config layered on top.

    Config entries may replace an existing blob or add a new focus tag.
    Blank overrides are ignored.
    """
    catalog = dict(FOCUS_INSTRUCTIONS)
    overrides = (config or {}).get("focus_instructions") or {}
    for focus, instruction in overrides.items():
        key = str(focus).strip().lower()
        text = str(instruction or "").strip()
        if key and text:
            catalog[key] = text
    return catalog
