"""Model-aware completion options.

The reasoning-tier family (``gpt-5*``) rejects ``temperature``; every other
model gets a fixed low value for terse, repeatable output.
"""

from __future__ import annotations

REASONING_MODEL_MARKER = "gpt-5"
DEFAULT_TEMPERATURE = 0.2


def is_reasoning_model(model: str) -> bool:
    """Return True when *model* belongs to the reasoning-tier family."""
    return REASONING_MODEL_MARKER in (model or "").lower()


def completion_options(model: str) -> dict[str, float]:
    """Keyword arguments for ``LlmGateway.complete`` given the model name."""
    if is_reasoning_model(model):
        return {}
    return {"temperature": DEFAULT_TEMPERATURE}
