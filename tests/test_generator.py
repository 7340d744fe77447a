import json
import unittest

from workout_generator.config import DEFAULT_CONFIG
from workout_generator.errors import GenerationFailure, ProviderRateLimited
from workout_generator.generator import WorkoutGenerator
from workout_generator.models import GenerationRequest, GenerationResult


def _valid_response(count):
    return json.dumps({
        "workout": {
            "exercises": [
                {
                    "name": f"Exercise {i}",
                    "sets": 3,
                    "reps": 10,
                    "rest_time_seconds": 60,
                    "rationale": "Because.",
                }
                for i in range(1, count + 1)
            ],
        }
    })


class StubClient:
    """Replays scripted replies; an Exception entry is raised instead of returned."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return GenerationResult(
            text=reply,
            model="claude-test",
            prompt_tokens=100,
            completion_tokens=50,
            generation_time_ms=10,
        )


REQUEST = GenerationRequest(
    muscle_focus=["chest"],
    workout_focus=["strength"],
    exercise_count=2,
)


class WorkoutGeneratorTests(unittest.TestCase):
    def test_first_attempt_success(self):
        client = StubClient([_valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)

        self.assertEqual(outcome.parse_attempts, 1)
        self.assertEqual(len(outcome.workout.exercises), 2)
        self.assertEqual(outcome.model, "claude-test")
        self.assertEqual(outcome.prompt_tokens, 100)
        self.assertNotIn("previous response failed", client.prompts[0])

    def test_retry_after_parse_failure_uses_retry_prompt(self):
        client = StubClient(["not json", _valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)

        self.assertEqual(outcome.parse_attempts, 2)
        self.assertEqual(outcome.raw_response, _valid_response(2))
        self.assertEqual(outcome.prompt_tokens, 200)
        self.assertEqual(outcome.completion_tokens, 100)
        self.assertEqual(outcome.generation_time_ms, 20)
        self.assertIn("previous response failed to parse", client.prompts[1])
        self.assertTrue(client.prompts[1].startswith(client.prompts[0]))

    def test_wrong_count_triggers_retry(self):
        client = StubClient([_valid_response(3), _valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)
        self.assertEqual(outcome.parse_attempts, 2)
        self.assertEqual(len(outcome.workout.exercises), 2)

    def test_gives_up_after_max_attempts(self):
        client = StubClient(["nope", "still nope", "never", _valid_response(2)])
        with self.assertRaises(GenerationFailure) as ctx:
            WorkoutGenerator(client, DEFAULT_CONFIG, max_attempts=3).generate(REQUEST)
        self.assertEqual(len(client.prompts), 3)
        self.assertIn("after 3 attempts", str(ctx.exception))

    def test_transport_failure_consumes_attempt(self):
        client = StubClient([GenerationFailure("timed out"), _valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)

        self.assertEqual(outcome.parse_attempts, 2)
        self.assertEqual(outcome.prompt_tokens, 100)
        # A timeout is not a parse failure, so the prompt is sent unchanged.
        self.assertEqual(client.prompts[0], client.prompts[1])

    def test_failed_attempt_time_is_counted(self):
        client = StubClient([GenerationFailure("timed out", elapsed_ms=60000), _valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)

        self.assertEqual(outcome.generation_time_ms, 60010)

    def test_unusable_exercise_name_triggers_retry(self):
        bad = json.loads(_valid_response(2))
        bad["workout"]["exercises"][0]["name"] = "!!!"
        client = StubClient([json.dumps(bad), _valid_response(2)])
        outcome = WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)

        self.assertEqual(outcome.parse_attempts, 2)
        self.assertIn("previous response failed to parse", client.prompts[1])

    def test_rate_limit_aborts_without_retry(self):
        client = StubClient([ProviderRateLimited("slow down"), _valid_response(2)])
        with self.assertRaises(ProviderRateLimited):
            WorkoutGenerator(client, DEFAULT_CONFIG).generate(REQUEST)
        self.assertEqual(len(client.prompts), 1)

    def test_max_attempts_from_config(self):
        config = dict(DEFAULT_CONFIG, generation={"max_attempts": 2})
        generator = WorkoutGenerator(StubClient([]), config)
        self.assertEqual(generator.max_attempts, 2)

    def test_configured_focus_override_reaches_prompt(self):
        config = dict(DEFAULT_CONFIG, focus_instructions={"strength": "Heavy triples only."})
        client = StubClient([_valid_response(2)])
        WorkoutGenerator(client, config).generate(REQUEST)
        self.assertIn("Heavy triples only.", client.prompts[0])


if __name__ == "__main__":
    unittest.main()
