"""OpenAI driver for script generation using AsyncOpenAI."""

from __future__ import annotations

from typing import Any

import openai

from shared.ai_clients import create_openai_client
from shared.errors import is_quota_error

from ..errors import ScriptGenerationError
from .base import ScriptGenerationDriver


class OpenAIScriptDriver(ScriptGenerationDriver):
    """Chat completions with a JSON object response."""

    name = "openai"

    def __init__(self, api_key: str | None = None):
        self.client = create_openai_client(api_key=api_key, async_client=True)

    async def generate(self, system_prompt: str, user_prompt: str, settings: dict[str, Any]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=settings.get("model", "gpt-4o-mini"),
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=settings.get("temperature", 0.7),
                max_tokens=settings.get("max_tokens", 4000),
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            raise ScriptGenerationError(
                f"OpenAI script generation failed: {e.message}",
                provider=self.name,
                quota_exceeded=is_quota_error(e.status_code, e.message),
            ) from e
        except openai.APIError as e:
            raise ScriptGenerationError(f"OpenAI script generation failed: {e!s}", provider=self.name) from e

        content = response.choices[0].message.content
        if content is not None:
            return content.strip()
        return ""
