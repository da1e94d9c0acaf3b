"""Gemini text-to-speech driver (google-genai, prebuilt voices)."""

from typing import Any, ClassVar

from google.genai import errors as genai_errors
from google.genai import types

from shared.ai_clients import create_gemini_client
from shared.errors import is_quota_error
from shared.utils import setup_logging

from ..audio import is_raw_pcm, pcm_to_wav
from ..errors import TTSProviderError
from .base import TTSEngine

logger = setup_logging("gemini-tts-driver")

# Spoken-style instruction put in front of the narration for each emotion.
EMOTION_INSTRUCTIONS: dict[str, str] = {
    "neutral": "",
    "happy": "Say cheerfully: ",
    "excited": "Say with excitement and energy: ",
    "calm": "Say in a calm, relaxed voice: ",
    "professional": "Say in a clear, professional tone: ",
    "friendly": "Say in a warm, friendly tone: ",
    "informative": "Say in an informative, explanatory tone: ",
}


class GeminiTTSEngine(TTSEngine):
    """Cloud speech synthesis with Gemini's audio response modality."""

    name = "gemini"
    DEFAULT_VOICE = "Kore"
    SUPPORTED_VOICES: ClassVar[list[str]] = [
        "Kore",
        "Charon",
        "Fenrir",
        "Aoede",
        "Puck",
        "Callisto",
        "Dione",
        "Ganymede",
        "Titan",
        "Zephyr",
    ]
    SUPPORTED_FORMATS: ClassVar[list[str]] = ["wav"]
    SUPPORTED_EMOTIONS: ClassVar[list[str]] = list(EMOTION_INSTRUCTIONS)

    def __init__(self, api_key: str | None = None, model: str = "gemini-2.5-flash-preview-tts"):
        self.client = create_gemini_client(api_key=api_key)
        self.model = model

    async def synthesize(
        self,
        text: str,
        voice: str | None = None,
        speed: float = 1.0,
        pitch: float = 0,
        output_format: str = "wav",
        emotion: str = "neutral",
        **kwargs: Any,
    ) -> dict[str, Any]:
        voice_name = self.resolve_voice(voice)
        prompt = f"{EMOTION_INSTRUCTIONS.get(emotion, '')}{text}"
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name)
                )
            ),
        )

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except genai_errors.APIError as e:
            message = str(e)
            raise TTSProviderError(
                f"Gemini TTS synthesis failed: {message}",
                provider=self.name,
                quota_exceeded=is_quota_error(e.code, message),
            ) from e

        inline_data = None
        if response.candidates and response.candidates[0].content and response.candidates[0].content.parts:
            inline_data = response.candidates[0].content.parts[0].inline_data
        if inline_data is None or not inline_data.data:
            raise TTSProviderError("No audio data received from Gemini TTS", provider=self.name)

        audio_data = inline_data.data
        mime_type = inline_data.mime_type or "audio/L16;rate=24000"
        if is_raw_pcm(mime_type):
            audio_data = pcm_to_wav(audio_data, mime_type)
            mime_type = "audio/wav"

        logger.info(f"Gemini synthesized {len(text)} characters with voice {voice_name} ({emotion})")
        return {
            "audio_data": audio_data,
            "mime_type": mime_type,
            "voice_used": voice_name,
            "output_format": "wav",
            "emotion": emotion,
        }
