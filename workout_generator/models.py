from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from workout_generator.exercise_matcher import create_search_key


class GenerationRequest(BaseModel):
    """A workout request that has already passed bounds checking."""

    model_config = ConfigDict(frozen=True)

    muscle_focus: list[str]
    workout_focus: list[str]
    exercise_count: int
    special_instructions: str | None = None


class ParsedExercise(BaseModel):
    name: str = Field(min_length=1)
    sets: int = Field(ge=1)
    reps: int = Field(ge=1)
    rest_time_seconds: int = Field(ge=0)
    rationale: str
    primary_muscles: list[str] = Field(default_factory=list)
    secondary_muscles: list[str] = Field(default_factory=list)
    equipment: str | None = None
    movement_type: Literal["compound", "isolation"] | None = None
    order_index: int | None = None

    @field_validator("name", "rationale", mode="before")
    @classmethod
    def _strip_text(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("name")
    @classmethod
    def _name_has_search_key(cls, value):
        if not create_search_key(value):
            raise ValueError("exercise name must contain letters or digits")
        return value

    @field_validator("primary_muscles", "secondary_muscles", mode="before")
    @classmethod
    def _muscle_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [str(m).strip().lower() for m in value if m and str(m).strip()]
        return value

    @field_validator("equipment", mode="before")
    @classmethod
    def _equipment_text(cls, value):
        if value is None:
            return None
        text = str(value).strip().lower()
        return text or None

    @field_validator("movement_type", mode="before")
    @classmethod
    def _movement_type(cls, value):
        # Unknown tags fall back to inference during canonicalization.
        text = str(value or "").strip().lower()
        return text if text in ("compound", "isolation") else None


class ParsedWorkout(BaseModel):
    exercises: list[ParsedExercise] = Field(min_length=1)
    total_duration_minutes: float | None = None
    muscle_groups_targeted: str = ""
    joint_groups_affected: str = ""
    equipment_needed: str = ""

    @field_validator("total_duration_minutes", mode="before")
    @classmethod
    def _duration_or_none(cls, value):
        # Free text like "30 minutes" is dropped rather than failing the reply.
        if value is None or isinstance(value, bool):
            return None
        try:
            minutes = float(value)
        except (TypeError, ValueError):
            return None
        return minutes if math.isfinite(minutes) else None

    @field_validator("muscle_groups_targeted", "joint_groups_affected", "equipment_needed", mode="before")
    @classmethod
    def _join_lists(cls, value):
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(str(v).strip() for v in value if str(v).strip())
        return value


class GenerationResult(BaseModel):
    """Raw text and telemetry from one model call."""

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    generation_time_ms: int = 0


class GenerationOutcome(BaseModel):
    workout: ParsedWorkout
    raw_response: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    generation_time_ms: int = 0
    parse_attempts: int = 1
