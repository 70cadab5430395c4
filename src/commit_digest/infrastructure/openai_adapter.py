"""OpenAI adapter — implements the LlmGateway port."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI, AuthenticationError, RateLimitError

from commit_digest.domain.exceptions import LlmError

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Concrete ``LlmGateway`` backed by the OpenAI Responses API."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini") -> None:
        self._client = AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(self, prompt: str, *, temperature: float | None = None) -> str:
        """Send a single prompt and return the generated text."""
        try:
            kwargs: dict[str, object] = {"model": self.model, "input": prompt}
            if temperature is not None:
                kwargs["temperature"] = temperature

            response = await self._client.responses.create(**kwargs)  # type: ignore[arg-type]
            return (response.output_text or "").strip()

        except AuthenticationError as exc:
            raise LlmError(
                "Invalid OpenAI API key. "
                "Set a valid key in the OPENAI_API_KEY environment variable."
            ) from exc

        except RateLimitError as exc:
            detail = str(exc)
            logger.error("OpenAI RateLimitError: %s", detail)
            raise LlmError(f"OpenAI rate limit / quota error: {detail}") from exc

        except Exception as exc:
            raise LlmError(f"LLM call failed: {exc}") from exc

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()
