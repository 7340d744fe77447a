"""
Canonical exercise matching.

Every exercise a generated workout mentions is resolved to one shared row in
the `exercises` table, keyed by its search key, so repeated generations reuse
reference data instead of piling up near-identical names.
"""

import re
import sqlite3

from workout_generator.errors import CanonicalizationError


# ---------------------------------------------------------------------------
# Equipment vocabulary: (pattern over the search key, canonical equipment).
# Multi-word and more specific terms come first.
# ---------------------------------------------------------------------------
EQUIPMENT_PATTERNS = [
    (re.compile(r"\bresistance band\b|\bbands?\b|\bmini band\b"), "resistance band"),
    (re.compile(r"\bez bar\b|\bezbar\b"), "ez bar"),
    (re.compile(r"\btrap bar\b|\bhex bar\b"), "trap bar"),
    (re.compile(r"\bsmith\b"), "smith machine"),
    (re.compile(r"\bmedicine ball\b|\bmed ball\b|\bslam ball\b|\bwall ball\b"), "medicine ball"),
    (re.compile(r"\btrx\b|\bsuspension\b|\brings?\b"), "suspension trainer"),
    (re.compile(r"\bjump rope\b|\bskipping\b"), "jump rope"),
    (re.compile(r"\bbarbell\b|\bbb\b|\blandmine\b"), "barbell"),
    (re.compile(r"\bdumbbells?\b|\bdb\b"), "dumbbell"),
    (re.compile(r"\bkettlebells?\b|\bkb\b"), "kettlebell"),
    (re.compile(r"\bcables?\b|\bpulley\b|\brope\b"), "cable"),
    (re.compile(r"\bmachine\b|\bleg press\b|\bpec deck\b|\bhack squat\b|\blat pulldown\b"
                r"|\bleg extension\b|\bleg curl\b"), "machine"),
    (re.compile(r"\btreadmill\b|\brower\b|\browerg\b|\bbike\b|\bbikeerg\b|\bskierg\b|\bassault\b"), "cardio machine"),
    (re.compile(r"\bplyo box\b|\bbox\b"), "box"),
    (re.compile(r"\bsandbag\b"), "sandbag"),
    (re.compile(r"\bsled\b"), "sled"),
    (re.compile(r"\bpull ?up bar\b|\bchin ?up bar\b"), "pull-up bar"),
]

# Classic plate-loaded lifts that imply a barbell when no equipment is named.
BARBELL_LIFT_TOKENS = ["back squat", "front squat", "deadlift", "bench press", "overhead press", "power clean",
                       "hang clean", "snatch", "good morning", "hip thrust"]

DEFAULT_EQUIPMENT = "bodyweight"

ISOLATION_PATTERNS = [
    re.compile(pattern)
    for pattern in [
        r"\bcurls?\b",
        r"\bextensions?\b",
        r"\braises?\b",
        r"\bfl(?:y|ies|yes)\b",
        r"\bkickbacks?\b",
        r"\bpush ?downs?\b",
        r"\bpress ?downs?\b",
        r"\bcrossovers?\b",
        r"\bshrugs?\b",
        r"\bpec deck\b",
        r"\bskull ?crushers?\b",
        r"\bpullovers?\b",
        r"\bcrunch(?:es)?\b",
        r"\badduct(?:ion|or)\b",
        r"\babduct(?:ion|or)\b",
        r"\bwrist\b",
        r"\bconcentration\b",
    ]
]

COMPOUND_PATTERNS = [
    re.compile(pattern)
    for pattern in [
        r"\bpress(?:es)?\b",
        r"\bsquats?\b",
        r"\bdeadlifts?\b",
        r"\brdl\b",
        r"\brows?\b",
        r"\bpull ?ups?\b",
        r"\bchin ?ups?\b",
        r"\bpull ?downs?\b",
        r"\bpush ?ups?\b",
        r"\blunges?\b",
        r"\bdips?\b",
        r"\bsplit squat\b",
        r"\bstep ?ups?\b",
        r"\bcleans?\b",
        r"\bsnatch(?:es)?\b",
        r"\bjerks?\b",
        r"\bthrusters?\b",
        r"\bthrusts?\b",
        r"\bswings?\b",
        r"\bburpees?\b",
        r"\bjumps?\b",
        r"\bbounds?\b",
        r"\bcarr(?:y|ies)\b",
        r"\bsprints?\b",
        r"\bclimbers?\b",
        r"\bgood mornings?\b",
    ]
]


def create_search_key(name):
    """
    Return the deduplication key for an exercise name.

    Case-folded, hyphens/underscores/slashes turned into spaces, remaining
    punctuation stripped, whitespace collapsed:
        "Barbell  Bench-Press!" -> "barbell bench press"
    """
    key = (name or "").casefold()
    key = re.sub(r"[-_/]+", " ", key)
    key = re.sub(r"[^\w\s]", "", key)
    return re.sub(r"\s+", " ", key).strip()


def extract_equipment(name):
    """Infer equipment from an exercise name; bodyweight when nothing matches."""
    key = create_search_key(name)
    for pattern, equipment in EQUIPMENT_PATTERNS:
        if pattern.search(key):
            return equipment
    if any(token in key for token in BARBELL_LIFT_TOKENS):
        return "barbell"
    return DEFAULT_EQUIPMENT


def determine_movement_type(name, primary_muscles=None):
    """
    Classify an exercise as compound or isolation.

    Name keywords win (isolation patterns are checked first since names like
    "Leg Press" vs "Leg Extension" share tokens); otherwise an exercise with
    two or more primary muscles is treated as compound.
    """
    key = create_search_key(name)
    if any(pattern.search(key) for pattern in ISOLATION_PATTERNS):
        return "isolation"
    if any(pattern.search(key) for pattern in COMPOUND_PATTERNS):
        return "compound"
    if len(primary_muscles or []) >= 2:
        return "compound"
    return "isolation"


def find_or_create_exercise(db, exercise):
    """
    Resolve one generated exercise to its canonical record.

    Args:
        db: WorkoutDB
        exercise: ParsedExercise (or anything with name, primary_muscles,
            secondary_muscles, equipment and movement_type attributes)

    Returns:
        (record, created) where record is the canonical exercise dict and
        created is True only when this call inserted it.

    Raises:
        CanonicalizationError: lookup or insert failed
    """
    search_key = create_search_key(exercise.name)
    if not search_key:
        raise CanonicalizationError(f"Exercise name {exercise.name!r} has no usable search key")

    try:
        existing = db.find_exercise_by_search_key(search_key)
        if existing:
            return existing, False

        primary_muscles = list(exercise.primary_muscles or [])
        equipment = exercise.equipment or extract_equipment(exercise.name)
        movement_type = exercise.movement_type or determine_movement_type(exercise.name, primary_muscles)

        try:
            created = db.insert_exercise(
                name=exercise.name,
                search_key=search_key,
                primary_muscles=primary_muscles,
                secondary_muscles=list(exercise.secondary_muscles or []),
                equipment=equipment,
                movement_type=movement_type,
            )
        except sqlite3.IntegrityError:
            # Another request inserted the same key between our lookup and insert.
            winner = db.find_exercise_by_search_key(search_key)
            if winner is None:
                raise
            return winner, False
    except sqlite3.Error as exc:
        raise CanonicalizationError(f"Could not resolve exercise {exercise.name!r}: {exc}") from exc

    print(f"  + New exercise: {created['name']} ({created['equipment']}, {created['movement_type']})")
    return created, True
