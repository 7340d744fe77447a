"""
Error taxonomy for the workout generation pipeline.
"""


class WorkoutGenerationError(Exception):
    """Base class. `error_type` is what the caller sees as `errorType`."""

    error_type = "generation"


class ValidationError(WorkoutGenerationError):
    error_type = "validation"


class QuotaExceeded(WorkoutGenerationError):
    error_type = "rate_limit"


class ProviderRateLimited(WorkoutGenerationError):
    error_type = "rate_limit"


class GenerationFailure(WorkoutGenerationError):
    """A model call failed. `elapsed_ms` is the time spent before it failed."""

    error_type = "generation"

    def __init__(self, message, elapsed_ms=0):
        super().__init__(message)
        self.elapsed_ms = elapsed_ms


class CanonicalizationError(WorkoutGenerationError):
    error_type = "canonicalization"


class PersistenceError(WorkoutGenerationError):
    error_type = "persistence"


class ResponseParseError(ValueError):
    """Raw model text could not be turned into a ParsedWorkout."""
