"""Base AI provider interface.

All providers (OpenAI, Anthropic, etc.) are reached through LiteLLM for
model-agnostic routing.
"""

import json
import time
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class AIProviderResponse:
    """Standardized response from any AI provider."""

    def __init__(
        self,
        content: str,
        model: str,
        provider: str,
        input_tokens: int = 0,
        output_tokens: int = 0,
        latency_ms: int = 0,
    ):
        self.content = content
        self.model = model
        self.provider = provider
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.latency_ms = latency_ms

    def parse_json(self) -> dict:
        """Parse the content as a JSON object. Handles markdown code blocks.

        Raises:
            ValueError: content is not JSON or not a JSON object.
        """
        text = self.content.strip()
        # Strip markdown code fences if present
        if text.startswith("```"):
            lines = [line for line in text.split("\n") if not line.strip().startswith("```")]
            text = "\n".join(lines).strip()
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("Expected a JSON object from the model")
        return parsed


def provider_for(model: str) -> str:
    """Best-effort provider name from a LiteLLM model string."""
    if "gpt" in model or "o1" in model or "o3" in model:
        return "openai"
    if "claude" in model:
        return "anthropic"
    if "gemini" in model:
        return "google"
    return "unknown"


async def call_llm(
    system_prompt: str,
    user_prompt: str,
    model: Optional[str] = None,
    temperature: float = 0.1,
    max_tokens: int = 4096,
    trace_name: Optional[str] = None,
) -> AIProviderResponse:
    """
    Call an LLM via LiteLLM with optional Langfuse tracing.

    Args:
        system_prompt: System message
        user_prompt: User message
        model: LiteLLM model string (e.g., "gpt-4o", "claude-3-5-sonnet-20241022")
        temperature: Sampling temperature
        max_tokens: Max output tokens
        trace_name: Name for Langfuse trace (if enabled)
    """
    import litellm

    settings = get_settings()
    model = model or settings.AI_DEFAULT_MODEL

    kwargs = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }

    if settings.LANGFUSE_HOST:
        kwargs["metadata"] = {"trace_name": trace_name or "cohort_scoring_ai"}
        litellm.success_callback = ["langfuse"]
        litellm.failure_callback = ["langfuse"]

    start = time.monotonic()
    try:
        response = await litellm.acompletion(**kwargs)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"LLM call failed: {e}", extra={"model": model, "latency_ms": elapsed_ms}
        )
        raise

    elapsed_ms = int((time.monotonic() - start) * 1000)
    content = response.choices[0].message.content or ""
    usage = getattr(response, "usage", None)

    return AIProviderResponse(
        content=content,
        model=model,
        provider=provider_for(model),
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
        latency_ms=elapsed_ms,
    )
