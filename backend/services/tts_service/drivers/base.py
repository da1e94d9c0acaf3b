from abc import ABC, abstractmethod
from typing import Any, ClassVar


class TTSEngine(ABC):
    """Abstract base class for TTS engines."""

    name: ClassVar[str] = "base"
    DEFAULT_VOICE: ClassVar[str] = ""
    SUPPORTED_VOICES: ClassVar[list[str]] = []
    SUPPORTED_FORMATS: ClassVar[list[str]] = ["wav"]

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        voice: str | None = None,
        speed: float = 1.0,
        pitch: float = 0,
        output_format: str = "wav",
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Synthesize speech from text.

        Returns a dict with ``audio_data`` (bytes), ``mime_type``,
        ``voice_used`` and ``output_format``.
        """
        pass

    def resolve_voice(self, voice: str | None) -> str:
        if voice and (not self.SUPPORTED_VOICES or voice in self.SUPPORTED_VOICES):
            return voice
        return self.DEFAULT_VOICE
