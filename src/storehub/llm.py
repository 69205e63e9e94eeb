"""Text-generation backends.

Two async backends behind one call:
1. Gemini via the google-genai SDK (default — uses GEMINI_API_KEY or
   GOOGLE_AI_API_KEY)
2. Anthropic API (uses ANTHROPIC_API_KEY)

Every failure, including a missing credential, an empty response, or a
timeout, is raised as :class:`LLMError`.
"""

from __future__ import annotations

import asyncio
import logging
import os

import anthropic
from google import genai

from storehub.config import Provider

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base error for LLM calls."""


_DEFAULT_MODELS: dict[Provider, str] = {
    Provider.GEMINI: "gemini-3-flash-preview",
    Provider.ANTHROPIC: "claude-haiku-4-5-20251001",
}


def resolve_model(provider: Provider, model: str | None) -> str:
    """Return the explicit model or the provider's default."""
    return model or _DEFAULT_MODELS[provider]


def _gemini_api_key() -> str:
    for var in ("GEMINI_API_KEY", "GOOGLE_AI_API_KEY"):
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return ""


def is_configured(provider: Provider) -> bool:
    """Check whether the credential for a provider is present."""
    if provider == Provider.GEMINI:
        return bool(_gemini_api_key())
    return bool(os.environ.get("ANTHROPIC_API_KEY", "").strip())


# ---------------------------------------------------------------------------
# Internal: Gemini
# ---------------------------------------------------------------------------


async def _call_gemini(prompt: str, *, model: str, label: str) -> str:
    api_key = _gemini_api_key()
    if not api_key:
        raise LLMError("GEMINI_API_KEY not set")

    client = genai.Client(api_key=api_key)
    logger.debug("Calling Gemini model=%s (%s)", model, label)
    try:
        response = await client.aio.models.generate_content(model=model, contents=prompt)
    finally:
        await client.aio.aclose()
    return response.text or ""


# ---------------------------------------------------------------------------
# Internal: Anthropic API
# ---------------------------------------------------------------------------


async def _call_anthropic(prompt: str, *, model: str, label: str) -> str:
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if not api_key:
        raise LLMError("ANTHROPIC_API_KEY not set")

    logger.debug("Calling Anthropic API model=%s (%s)", model, label)
    async with anthropic.AsyncAnthropic(api_key=api_key) as client:
        response = await client.messages.create(
            model=model,
            max_tokens=512,
            messages=[{"role": "user", "content": prompt}],
        )
    return "".join(block.text for block in response.content if block.type == "text")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def generate_text(
    prompt: str,
    *,
    provider: Provider = Provider.GEMINI,
    model: str | None = None,
    timeout: float = 20.0,
    label: str = "augment",
) -> str:
    """Send one prompt and return the response text unmodified.

    Args:
        prompt: Complete natural-language prompt.
        provider: Backend to use.
        model: Optional model override.
        timeout: Seconds before the call is abandoned.
        label: Label for logging.

    Returns:
        The response text.

    Raises:
        LLMError: On any failure, including an empty response.
    """
    resolved = resolve_model(provider, model)
    call = _call_gemini if provider == Provider.GEMINI else _call_anthropic

    try:
        text = await asyncio.wait_for(call(prompt, model=resolved, label=label), timeout)
    except LLMError:
        raise
    except TimeoutError as exc:
        raise LLMError(f"{provider} timed out after {timeout}s (label={label})") from exc
    except Exception as exc:
        raise LLMError(f"{provider} failed (label={label}): {exc}") from exc

    if not text.strip():
        raise LLMError(f"{provider} returned empty response (label={label})")
    return text
