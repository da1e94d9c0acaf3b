"""
Splitting an uploaded transcript across slides, and composing the full script.

``split_transcript`` tries three strategies in order:

1. slide markers: header lines such as ``=== SLIDE 2: Title ===`` or
   ``Slide 2``, or numbered lines such as ``2. ...``;
2. blank-line separated paragraphs;
3. an even distribution of the words.
"""

import math
import re
from collections.abc import Sequence

from shared.models import Slide

_HEADER_MARKER = re.compile(r"^[ \t]*(?:={2,}[ \t]*)?slide[ \t]*\d+\b.*$", re.IGNORECASE | re.MULTILINE)
_NUMBERED_MARKER = re.compile(r"^[ \t]*\d+\.(?!\d)[ \t]*", re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def decode_transcript(data: bytes) -> str:
    """Decode an uploaded .txt transcript (UTF-8, optional BOM) with LF line endings."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValueError("Transcript must be UTF-8 encoded text") from e
    return text.replace("\r\n", "\n").replace("\r", "\n")


def count_words(text: str) -> int:
    return len(text.split())


def _split_at(text: str, markers: list[re.Match], slide_count: int) -> list[str]:
    sections = []
    for index, marker in enumerate(markers[:slide_count]):
        end = markers[index + 1].start() if index + 1 < len(markers) else len(text)
        sections.append(text[marker.end() : end].strip())
    return sections


def split_transcript(text: str, slide_count: int) -> list[str]:
    """Return exactly ``slide_count`` script sections taken from ``text``.

    Text before the first marker is ignored. When the transcript is too short
    for an even split, the trailing sections are empty strings.
    """
    if slide_count < 1:
        raise ValueError("slide_count must be at least 1")

    headers = list(_HEADER_MARKER.finditer(text))
    if len(headers) >= slide_count:
        return _split_at(text, headers, slide_count)

    numbered = list(_NUMBERED_MARKER.finditer(text))
    if len(numbered) >= slide_count:
        return _split_at(text, numbered, slide_count)

    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
    if len(paragraphs) >= slide_count:
        return paragraphs[:slide_count]

    words = text.split()
    per_slide = math.ceil(len(words) / slide_count) if words else 0
    return [" ".join(words[i * per_slide : (i + 1) * per_slide]) for i in range(slide_count)]


def compose_full_script(slides: Sequence[Slide]) -> str:
    """Render every slide as ``=== SLIDE n: title ===`` followed by its script."""
    return "\n\n\n".join(
        f"=== SLIDE {slide.slide_number}: {slide.title} ===\n\n{slide.script or ''}" for slide in slides
    )


def assign_scripts(slides: Sequence[Slide], scripts: Sequence[str]) -> list[Slide]:
    """Copy of ``slides`` with ``scripts`` assigned in order; missing entries become empty."""
    return [
        slide.model_copy(update={"script": scripts[index] if index < len(scripts) else ""})
        for index, slide in enumerate(slides)
    ]
