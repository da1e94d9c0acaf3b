"""Gemini driver for script generation using the google-genai async client."""

from __future__ import annotations

from typing import Any

from google.genai import errors as genai_errors
from google.genai import types

from shared.ai_clients import create_gemini_client
from shared.errors import is_quota_error

from ..errors import ScriptGenerationError
from .base import ScriptGenerationDriver


class GeminiScriptDriver(ScriptGenerationDriver):
    name = "gemini"

    def __init__(self, api_key: str | None = None):
        self.client = create_gemini_client(api_key=api_key)

    async def generate(self, system_prompt: str, user_prompt: str, settings: dict[str, Any]) -> str:
        generation_config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=settings.get("temperature", 0.7),
            max_output_tokens=settings.get("max_tokens", 4000),
            response_mime_type="application/json",
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=settings.get("model", "gemini-2.5-pro"),
                contents=user_prompt,
                config=generation_config,
            )
        except genai_errors.APIError as e:
            message = str(e)
            raise ScriptGenerationError(
                f"Gemini script generation failed: {message}",
                provider=self.name,
                quota_exceeded=is_quota_error(e.code, message),
            ) from e

        return (response.text or "").strip()
