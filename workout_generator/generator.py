"""
AI-powered workout generation with a bounded parse/repair loop.
"""

from workout_generator.errors import GenerationFailure, ResponseParseError
from workout_generator.focus_catalog import build_focus_catalog
from workout_generator.models import GenerationOutcome
from workout_generator.prompt_builder import build_prompt
from workout_generator.response_parser import parse_workout_response


DEFAULT_MAX_ATTEMPTS = 3


class WorkoutGenerator:
    """Prompts the model and re-prompts until the reply parses or attempts run out."""

    def __init__(self, client, config, focus_catalog=None, max_attempts=None):
        """
        Args:
            client: Object with generate(prompt) -> GenerationResult
            config: Full configuration dictionary
            focus_catalog: Workout focus -> instruction blob (defaults to the configured catalog)
            max_attempts: Total attempts allowed, first call included
        """
        self.client = client
        self.config = config
        self.focus_catalog = focus_catalog or build_focus_catalog(config)
        self.max_attempts = max_attempts or (config.get("generation") or {}).get(
            "max_attempts", DEFAULT_MAX_ATTEMPTS
        )
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def generate(self, request):
        """
        Generate a workout for a validated request.

        A reply that fails to parse (bad JSON, wrong shape, wrong exercise count)
        switches to the retry prompt. A transport failure consumes an attempt and
        re-sends the current prompt. Provider rate limiting is raised straight away.

        Returns:
            GenerationOutcome

        Raises:
            ProviderRateLimited: the provider throttled us
            GenerationFailure: every attempt failed
        """
        print(f"\n🤖 Generating {request.exercise_count}-exercise "
              f"{' + '.join(request.workout_focus)} workout with Claude AI...")

        retry_mode = False
        last_error = None
        prompt_tokens = 0
        completion_tokens = 0
        generation_time_ms = 0
        attempts = 0

        while attempts < self.max_attempts:
            attempts += 1
            prompt = build_prompt(request, self.focus_catalog, retry=retry_mode)

            try:
                result = self.client.generate(prompt)
            except GenerationFailure as exc:
                last_error = exc
                generation_time_ms += exc.elapsed_ms
                print(f"  ⚠ Attempt {attempts}/{self.max_attempts} failed: {exc}")
                continue

            prompt_tokens += result.prompt_tokens
            completion_tokens += result.completion_tokens
            generation_time_ms += result.generation_time_ms

            try:
                workout = parse_workout_response(result.text, request.exercise_count)
            except ResponseParseError as exc:
                last_error = exc
                retry_mode = True
                print(f"  ⚠ Attempt {attempts}/{self.max_attempts} did not parse: {exc}")
                continue

            print(f"✓ Workout generated in {attempts} attempt(s)")
            return GenerationOutcome(
                workout=workout,
                raw_response=result.text,
                model=result.model,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                generation_time_ms=generation_time_ms,
                parse_attempts=attempts,
            )

        raise GenerationFailure(
            f"Failed to generate a valid workout after {attempts} attempts: {last_error}",
            elapsed_ms=generation_time_ms,
        )
