"""
Parsing and validation of raw model output into a ParsedWorkout.
"""

import json
import re

from pydantic import ValidationError as SchemaError

from workout_generator.errors import ResponseParseError
from workout_generator.models import ParsedWorkout


FENCE_START_RE = re.compile(r"^```\w*\s*")
FENCE_END_RE = re.compile(r"\s*```$")
_DECODER = json.JSONDecoder()


def _strip_code_fences(text):
    text = (text or "").strip()
    if text.startswith("```"):
        text = FENCE_START_RE.sub("", text)
        text = FENCE_END_RE.sub("", text)
    return text.strip()


def decode_json_object(text):
    """
    Decode the first complete JSON object in `text`.

    Tolerates markdown fencing and chatter before or after the object, braces
    in that chatter included. Returns (obj, source) where source is the
    object's text.
    """
    text = _strip_code_fences(text)
    start = text.find("{")
    if start == -1:
        raise ResponseParseError("No JSON object found in response")

    first_error = None
    while start != -1:
        try:
            obj, end = _DECODER.raw_decode(text, start)
            return obj, text[start:end]
        except json.JSONDecodeError as exc:
            first_error = first_error or exc
        start = text.find("{", start + 1)
    raise ResponseParseError(f"Invalid JSON: {first_error}") from first_error


def extract_json_object(text):
    """Return the text of the first complete JSON object in `text`."""
    return decode_json_object(text)[1]


def _summarize_schema_error(exc):
    problems = []
    for error in exc.errors()[:5]:
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location or 'workout'}: {error.get('msg', 'invalid')}")
    return "; ".join(problems)


def parse_workout_response(text, expected_count):
    """
    Decode raw model text into a ParsedWorkout.

    Args:
        text: Raw response text from one generation attempt
        expected_count: Number of exercises the user asked for

    Returns:
        ParsedWorkout

    Raises:
        ResponseParseError: on malformed JSON, a shape that does not match the
            documented schema, or an exercise count other than expected_count
    """
    data, _ = decode_json_object(text)

    if not isinstance(data, dict):
        raise ResponseParseError("Response JSON is not an object")

    workout_data = data.get("workout", data)
    if not isinstance(workout_data, dict):
        raise ResponseParseError("'workout' is not an object")

    try:
        workout = ParsedWorkout.model_validate(workout_data)
    except SchemaError as exc:
        raise ResponseParseError(f"Response does not match workout schema: {_summarize_schema_error(exc)}") from exc

    actual = len(workout.exercises)
    if actual != expected_count:
        raise ResponseParseError(f"Expected {expected_count} exercises, got {actual}")

    return workout
