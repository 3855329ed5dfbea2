"""Wrapper utilities around the OpenAI client."""

from __future__ import annotations

import os
from typing import Optional

from openai import OpenAI

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

PLACEHOLDER_KEYS = {"", "your_openai_api_key_here"}


def is_configured() -> bool:
    """Return whether a usable API key is present."""
    return (os.getenv("OPENAI_API_KEY") or "").strip() not in PLACEHOLDER_KEYS


def get_openai_client() -> OpenAI:
    """Instantiate an OpenAI client using the configured API key."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key or api_key in PLACEHOLDER_KEYS:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")
    return OpenAI(api_key=api_key)


def create_response(
    client: OpenAI,
    prompt: str,
    *,
    instructions: Optional[str] = None,
    model: Optional[str] = None,
    max_output_tokens: int = 2000,
    temperature: Optional[float] = None,
):
    """Invoke the Responses API with shared defaults."""
    kwargs = {}
    if instructions:
        kwargs["instructions"] = instructions
    if temperature is not None:
        kwargs["temperature"] = temperature
    return client.responses.create(
        model=model or DEFAULT_MODEL,
        input=prompt,
        max_output_tokens=max_output_tokens,
        **kwargs,
    )


def output_text(completion) -> str:
    """Return the stripped text of a Responses API result, empty when it carries none."""
    return (getattr(completion, "output_text", None) or "").strip()
