"""Port: LLM gateway — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol


class LlmGateway(Protocol):
    """Abstract contract for interacting with a large-language model."""

    model: str

    async def complete(self, prompt: str, *, temperature: float | None = None) -> str:
        """Send a prompt and return the raw generated text (possibly empty).

        ``temperature`` is omitted from the request when ``None``.
        """
        ...
