"""Script generation driver implementations."""

from .base import ScriptGenerationDriver
from .gemini_driver import GeminiScriptDriver
from .openai_driver import OpenAIScriptDriver

__all__ = [
    "GeminiScriptDriver",
    "OpenAIScriptDriver",
    "ScriptGenerationDriver",
]
