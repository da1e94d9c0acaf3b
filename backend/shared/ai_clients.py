"""Builders for the OpenAI and Gemini SDK clients.

Drivers for script generation and speech synthesis get their clients here so
credentials are resolved in one place.
"""

from __future__ import annotations

import os

from google import genai
from openai import AsyncOpenAI, OpenAI

from shared.utils import config


def create_openai_client(
    api_key: str | None = None,
    async_client: bool = True,
) -> AsyncOpenAI | OpenAI:
    """
    Create a direct OpenAI client.

    Args:
        api_key: OpenAI API key (auto-detected if None)
        async_client: Whether to return AsyncOpenAI (True) or sync OpenAI (False)

    Returns:
        Configured AsyncOpenAI or OpenAI client

    Raises:
        ValueError: If API key is not configured
    """
    api_key = api_key or config.get("openai_api_key") or os.getenv("OPENAI_API_KEY")

    if not api_key:
        raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

    if async_client:
        return AsyncOpenAI(api_key=api_key)
    return OpenAI(api_key=api_key)


def create_gemini_client(api_key: str | None = None) -> genai.Client:
    """
    Create a Gemini client. Async calls go through ``client.aio``.

    Raises:
        ValueError: If API key is not configured
    """
    api_key = api_key or config.get("gemini_api_key") or os.getenv("GEMINI_API_KEY")

    if not api_key:
        raise ValueError("Gemini API key not configured. Set GEMINI_API_KEY environment variable.")

    return genai.Client(api_key=api_key)
