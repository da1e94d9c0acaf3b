"""TTS driver implementations"""

from .base import TTSEngine
from .gemini import GeminiTTSEngine
from .local import LocalTTSEngine
from .openai_tts import OpenAITTSEngine

__all__ = ["GeminiTTSEngine", "LocalTTSEngine", "OpenAITTSEngine", "TTSEngine"]
