"""
LLM Gateway — Wraps the Groq client with retry, timeout, and token tracking.

Exposes the single generation primitive the AI stages need:
``generate(model, prompt) -> raw text``. No schema is enforced at this
boundary; callers scrape a JSON object out of the text themselves.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Protocol

from groq import Groq

from app.config import settings
from app.core.errors import AIParseError, AIServiceError

logger = logging.getLogger("storecheck.llm")

# Greedy: from the first "{" to the last "}" in the text
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")


class AIGenerator(Protocol):
    """Anything that turns a prompt into raw model text."""

    async def generate(self, model: str, prompt: str) -> str: ...


class LLMGateway:
    """
    Groq LLM client wrapper with:
    - Per-attempt timeout
    - Retry with exponential backoff
    - Token usage tracking
    """

    def __init__(self, client: Groq | None = None) -> None:
        self.timeout = settings.llm_timeout
        self.max_retries = max(1, settings.llm_max_retries)
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.client = client or Groq(
            api_key=settings.groq_api_key,
            timeout=self.timeout,
            max_retries=0,
        )
        self.total_tokens_used = 0

    async def generate(self, model: str, prompt: str) -> str:
        """
        Send a prompt to ``model`` and return the raw completion text.

        Runs the synchronous Groq SDK in a thread pool to avoid blocking
        the async event loop.

        Raises:
            AIServiceError: every attempt failed or timed out.
        """
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(self._sync_complete, model, prompt),
                    timeout=self.timeout,
                )

                content = response.choices[0].message.content or ""
                tokens = getattr(response.usage, "total_tokens", 0) if response.usage else 0
                self.total_tokens_used += tokens or 0
                return content

            except Exception as e:
                last_error = e
                logger.warning(
                    f"LLM attempt {attempt + 1}/{self.max_retries} ({model}) failed: "
                    f"{type(e).__name__}: {e}"
                )
                if attempt < self.max_retries - 1:
                    # Exponential backoff: 1s, 2s, 4s
                    await asyncio.sleep(2**attempt)

        logger.error(f"LLM gateway exhausted retries. Last error: {last_error}")
        raise AIServiceError(f"{model}: {last_error}") from last_error

    def _sync_complete(self, model: str, prompt: str):
        """Synchronous Groq completion call."""
        return self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    def get_tokens_used(self) -> int:
        """Get total tokens consumed across all calls."""
        return self.total_tokens_used


def extract_json_object(text: str) -> dict[str, Any] | None:
    """
    Best-effort JSON extraction from free-form model output.

    Takes the span from the first ``{`` to the last ``}`` and parses it.
    Returns None when there is no such span, it does not parse, or it is not
    an object. Two separate objects in one response therefore fail to parse.
    """
    if not text:
        return None
    match = _JSON_SPAN.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def require_json_object(text: str) -> dict[str, Any]:
    """extract_json_object, raising AIParseError instead of returning None."""
    parsed = extract_json_object(text)
    if parsed is None:
        raise AIParseError(f"No JSON object in AI response ({len(text or '')} chars)")
    return parsed
