"""Speech engine test doubles shared by the TTS tests."""

from typing import Any

from services.tts_service.drivers.base import TTSEngine
from services.tts_service.errors import TTSProviderError


class RecordingEngine(TTSEngine):
    """Returns fixed audio and records every call."""

    DEFAULT_VOICE = "Alto"
    SUPPORTED_VOICES = ["Alto", "Bas"]

    def __init__(self, name: str, audio: bytes = b"RIFFfake"):
        self.name = name
        self.audio = audio
        self.calls: list[dict[str, Any]] = []

    async def synthesize(self, text, voice=None, speed=1.0, pitch=0, output_format="wav", **kwargs):
        self.calls.append({"text": text, "voice": voice, "speed": speed, "output_format": output_format, **kwargs})
        return {
            "audio_data": self.audio,
            "mime_type": "audio/wav",
            "voice_used": self.resolve_voice(voice),
            "output_format": "wav",
        }


class FailingEngine(TTSEngine):
    """Always fails; ``quota`` marks the failure as a quota error."""

    def __init__(self, name: str, quota: bool = False, error: Exception | None = None):
        self.name = name
        self.quota = quota
        self.error = error
        self.calls = 0

    async def synthesize(self, text, voice=None, speed=1.0, pitch=0, output_format="wav", **kwargs):
        self.calls += 1
        if self.error is not None:
            raise self.error
        raise TTSProviderError(f"{self.name} is down", provider=self.name, quota_exceeded=self.quota)
