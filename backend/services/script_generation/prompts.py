"""Prompt construction for narration script generation."""

from collections.abc import Sequence

from shared.enums import ScriptLength, ScriptStyle
from shared.models import Slide

STYLE_DESCRIPTIONS = {
    ScriptStyle.PROFESSIONAL: "businesslike, formal and persuasive",
    ScriptStyle.CASUAL: "informal, approachable and personal",
    ScriptStyle.EDUCATIONAL: "educational, clear and instructive",
}

# Seconds of speech per slide, matching the options offered to presenters.
LENGTH_SECONDS = {
    ScriptLength.CONCISE: (15, 30),
    ScriptLength.STANDARD: (30, 45),
    ScriptLength.EXTENDED: (45, 60),
}

DEFAULT_LENGTH_WORDS = {
    ScriptLength.CONCISE: 60,
    ScriptLength.STANDARD: 100,
    ScriptLength.EXTENDED: 140,
}

LANGUAGE_NAMES = {
    "nl": "Dutch",
    "en": "English",
    "de": "German",
    "fr": "French",
    "es": "Spanish",
}


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(language.split("-")[0].lower(), language)


def build_system_prompt(
    style: ScriptStyle,
    length: ScriptLength,
    informal_address: bool,
    language: str,
    target_words: int,
) -> str:
    low, high = LENGTH_SECONDS[length]
    address = (
        "Address the audience informally, in the second person singular."
        if informal_address
        else "Address the audience formally and politely."
    )
    return (
        f"You write spoken narration for presentation slides in {language_name(language)}. "
        f"Style: {STYLE_DESCRIPTIONS[style]}. "
        f"Each script takes {low}-{high} seconds to speak, about {target_words} words. "
        f"{address} "
        "Write plain sentences meant to be read aloud: no markdown, bullets, headings or stage directions. "
        "Do not announce slide numbers. Connect each slide naturally to the previous one. "
        'Answer with a JSON object of the form {"scripts": ["...", "..."]} holding exactly one '
        "script per slide, in the order the slides are given."
    )


def build_user_prompt(slides: Sequence[Slide]) -> str:
    blocks = []
    for slide in slides:
        lines = [f"Slide {slide.slide_number}: {slide.title or 'Untitled'}"]
        if slide.content:
            lines.append(f"Content:\n{slide.content}")
        if slide.notes:
            lines.append(f"Existing speaker notes:\n{slide.notes}")
        blocks.append("\n".join(lines))
    return (
        f"Write narration scripts for these {len(slides)} slides.\n\n"
        + "\n\n---\n\n".join(blocks)
    )
