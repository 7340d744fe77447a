"""
Anthropic Claude client for single-shot workout generation calls.
"""

import time

import anthropic

from workout_generator.errors import GenerationFailure, ProviderRateLimited
from workout_generator.models import GenerationResult


SYSTEM_PROMPT = (
    "You are a workout generation service. You reply with a single JSON object that matches "
    "the schema in the user's message. Never add prose, markdown or code fences."
)

JSON_PREFILL = "{"


def _elapsed_ms(started):
    return int((time.monotonic() - started) * 1000)


class GenerationClient:
    """Sends one prompt to Claude and returns the raw text plus telemetry."""

    def __init__(self, api_key, config, model=None, max_tokens=None, timeout=None, client=None):
        """
        Initialize the generation client.

        Args:
            api_key: Anthropic API key
            config: Full configuration dictionary
            model: Claude model to use (defaults to config value)
            max_tokens: Maximum tokens for response (defaults to config value)
            timeout: Request timeout in seconds (defaults to config value)
            client: Pre-built anthropic client (tests pass a mock here)
        """
        claude_config = config["claude"]
        # Retries belong to the repair loop, which re-prompts instead of replaying.
        self.client = client or anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout or claude_config.get("timeout", 60),
            max_retries=0,
        )
        self.model = model or claude_config["model"]
        self.max_tokens = max_tokens or claude_config["max_tokens"]
        self.temperature = claude_config.get("temperature", 0.7)
        self.prefill_json = claude_config.get("prefill_json", True)

    def generate(self, prompt):
        """
        Run one generation call.

        Returns:
            GenerationResult

        Raises:
            ProviderRateLimited: Anthropic answered 429
            GenerationFailure: timeout, network error, other API error or empty reply
        """
        messages = [{"role": "user", "content": prompt}]
        if self.prefill_json:
            messages.append({"role": "assistant", "content": JSON_PREFILL})

        started = time.monotonic()
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=messages,
            )
        except anthropic.RateLimitError as exc:
            raise ProviderRateLimited("The AI provider is rate limiting requests. Please try again later.") from exc
        except anthropic.APITimeoutError as exc:
            raise GenerationFailure("The AI provider timed out", elapsed_ms=_elapsed_ms(started)) from exc
        except anthropic.APIConnectionError as exc:
            raise GenerationFailure(
                f"Could not reach the AI provider: {exc}", elapsed_ms=_elapsed_ms(started)
            ) from exc
        except anthropic.APIStatusError as exc:
            raise GenerationFailure(
                f"AI provider error (HTTP {exc.status_code}): {exc.message}", elapsed_ms=_elapsed_ms(started)
            ) from exc
        except anthropic.APIError as exc:
            raise GenerationFailure(f"AI provider error: {exc}", elapsed_ms=_elapsed_ms(started)) from exc
        elapsed_ms = _elapsed_ms(started)

        text = "".join(
            getattr(block, "text", "") or ""
            for block in (message.content or [])
            if getattr(block, "type", "text") == "text"
        )
        if not text.strip():
            raise GenerationFailure("The AI provider returned an empty response", elapsed_ms=elapsed_ms)

        if self.prefill_json and not text.lstrip().startswith(JSON_PREFILL):
            text = JSON_PREFILL + text

        usage = getattr(message, "usage", None)
        return GenerationResult(
            text=text,
            model=getattr(message, "model", None) or self.model,
            prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
            completion_tokens=getattr(usage, "output_tokens", 0) or 0,
            generation_time_ms=elapsed_ms,
        )
