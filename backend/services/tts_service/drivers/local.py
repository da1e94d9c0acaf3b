"""On-device TTS driver that delegates to a locally hosted speech engine.

The engine exposes an OpenAI-style ``/v1/audio/speech`` endpoint, so no audio
leaves the machine and no cloud quota applies.
"""

import asyncio
from typing import Any, ClassVar

import aiohttp

from shared.config import config
from shared.http_client import AsyncHTTPClient
from shared.utils import setup_logging

from ..errors import TTSProviderError
from .base import TTSEngine

logger = setup_logging("local-tts-driver")


class LocalTTSEngine(TTSEngine):
    """HTTP-based driver for a speech engine running next to the backend."""

    name = "local"
    DEFAULT_VOICE = "default"
    SUPPORTED_FORMATS: ClassVar[list[str]] = ["wav", "mp3"]

    def __init__(self, api_base: str | None = None, timeout: float | None = None):
        self.api_base = (api_base or config.get("local_tts_api_base", "http://localhost:4123")).rstrip("/")
        self.timeout = timeout or float(config.get("local_tts_timeout", 120))

    @property
    def speech_url(self) -> str:
        return f"{self.api_base}/v1/audio/speech"

    async def synthesize(
        self,
        text: str,
        voice: str | None = None,
        speed: float = 1.0,
        pitch: float = 0,
        output_format: str = "wav",
        language: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        if output_format not in self.SUPPORTED_FORMATS:
            output_format = "wav"
        voice = voice or self.DEFAULT_VOICE
        payload: dict[str, Any] = {
            "input": text,
            "voice": voice,
            "speed": speed,
            "response_format": output_format,
        }
        if language:
            payload["language"] = language

        try:
            async with AsyncHTTPClient(timeout=self.timeout) as client:
                audio_data, mime_type = await client.post_for_bytes(self.speech_url, data=payload)
        except aiohttp.ClientResponseError as e:
            raise TTSProviderError(
                f"Local TTS engine answered {e.status}: {e.message}", provider=self.name
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TTSProviderError(
                f"Local TTS engine unreachable at {self.api_base}: {e!s}",
                provider=self.name,
                suggestion="Start the local speech engine or switch to a cloud provider",
            ) from e

        if not audio_data:
            raise TTSProviderError("Local TTS engine returned no audio", provider=self.name)

        logger.info(f"Local engine synthesized {len(text)} characters ({len(audio_data)} bytes)")
        return {
            "audio_data": audio_data,
            "mime_type": mime_type.split(";")[0].strip() or f"audio/{output_format}",
            "voice_used": voice,
            "output_format": output_format,
        }
