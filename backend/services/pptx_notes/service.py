"""Presentation notes service: extraction and notes embedding on raw upload bytes."""

from __future__ import annotations

from collections.abc import Sequence

from shared.config import config
from shared.models import Slide
from shared.utils import setup_logging

from .extractor import extract_slides
from .package import PresentationPackage
from .patcher import NotesAttachResult, attach_notes

logger = setup_logging("pptx-notes-service")


class PresentationNotesService:
    """Decode, patch and re-encode presentation packages.

    Every call works on a package private to that call, so instances can be
    shared between requests.
    """

    def __init__(self, compression_level: int | None = None) -> None:
        self.compression_level = compression_level

    def _compression_level(self) -> int:
        if self.compression_level is not None:
            return self.compression_level
        return int(config.get_pipeline_value("notes.compression_level", 6))

    def extract_slides(self, data: bytes) -> list[Slide]:
        return extract_slides(data)

    def add_notes(
        self,
        data: bytes,
        slides: Sequence[Slide],
        *,
        cross_reference: bool | None = None,
        language: str | None = None,
    ) -> tuple[bytes, NotesAttachResult]:
        """Return the re-encoded deck with every slide's script as speaker notes."""
        package = PresentationPackage.from_bytes(data)
        result = attach_notes(package, slides, cross_reference=cross_reference, language=language)
        output = package.to_bytes(compresslevel=self._compression_level())
        logger.info(
            f"Patched package: {len(result.changed_parts)} parts written, "
            f"{len(data)} -> {len(output)} bytes"
        )
        return output, result
