"""
Enums and constants used across the application.
"""

from enum import Enum


class ScriptStyle(str, Enum):
    """Narration styles offered for generated scripts."""

    PROFESSIONAL = "professional"
    CASUAL = "casual"
    EDUCATIONAL = "educational"


class ScriptLength(str, Enum):
    """Target length of a generated slide script."""

    CONCISE = "concise"
    STANDARD = "standard"
    EXTENDED = "extended"


class SpeechEmotion(str, Enum):
    """Delivery styles understood by the Gemini TTS driver."""

    NEUTRAL = "neutral"
    HAPPY = "happy"
    EXCITED = "excited"
    CALM = "calm"
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    INFORMATIVE = "informative"


class ExportFormat(str, Enum):
    """Available script export formats."""

    TEXT = "txt"
    EXCEL = "xlsx"
    WORD = "docx"
