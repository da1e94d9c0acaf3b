from typing import Any, ClassVar

import openai

from shared.ai_clients import create_openai_client
from shared.errors import is_quota_error

from ..errors import TTSProviderError
from .base import TTSEngine

MIME_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/opus",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
}


class OpenAITTSEngine(TTSEngine):
    """OpenAI TTS implementation using their text-to-speech API."""

    name = "openai"
    DEFAULT_VOICE = "alloy"
    SUPPORTED_MODELS: ClassVar[list[str]] = ["tts-1", "tts-1-hd", "gpt-4o-mini-tts"]
    SUPPORTED_VOICES: ClassVar[list[str]] = ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
    SUPPORTED_FORMATS: ClassVar[list[str]] = ["wav", "mp3", "opus", "aac", "flac"]

    def __init__(self, api_key: str | None = None, model: str = "tts-1"):
        """
        Initialize OpenAI TTS engine.

        Args:
            api_key: OpenAI API key, taken from configuration when omitted
            model: Default TTS model
        """
        self.client = create_openai_client(api_key=api_key, async_client=True)
        self.model = model if model in self.SUPPORTED_MODELS else "tts-1"

    async def synthesize(
        self,
        text: str,
        voice: str | None = None,
        speed: float = 1.0,
        pitch: float = 0,
        output_format: str = "wav",
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Synthesize speech from text using OpenAI TTS.

        Args:
            text: Text to convert to speech
            voice: Voice to use (alloy, echo, fable, onyx, nova, shimmer)
            speed: Speech speed (0.25 to 4.0)
            pitch: Not supported by OpenAI TTS (included for interface compatibility)
            output_format: Audio format (wav, mp3, opus, aac, flac)
            **kwargs: Additional options
                - model: TTS model to use

        Returns:
            Dictionary with the audio bytes and metadata
        """
        voice = self.resolve_voice(voice)

        if output_format not in self.SUPPORTED_FORMATS:
            output_format = "wav"

        # Clamp speed to valid range
        speed = max(0.25, min(4.0, speed))

        model = kwargs.get("model", self.model)
        if model not in self.SUPPORTED_MODELS:
            model = self.model

        try:
            response = await self.client.audio.speech.create(
                model=model,
                voice=voice,
                input=text,
                response_format=output_format,
                speed=speed,
            )
        except openai.APIStatusError as e:
            raise TTSProviderError(
                f"OpenAI TTS synthesis failed: {e.message}",
                provider=self.name,
                quota_exceeded=is_quota_error(e.status_code, e.message),
            ) from e
        except openai.APIError as e:
            raise TTSProviderError(f"OpenAI TTS synthesis failed: {e!s}", provider=self.name) from e

        return {
            "audio_data": response.content,
            "mime_type": MIME_TYPES[output_format],
            "voice_used": voice,
            "output_format": output_format,
            "model": model,
            "speed": speed,
        }
