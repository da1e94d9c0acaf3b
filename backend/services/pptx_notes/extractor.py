"""Slide text extraction with python-pptx."""

import io
import zipfile

from lxml import etree
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.exc import PackageNotFoundError

from shared.models import Slide
from shared.utils import setup_logging

from .errors import PresentationPackageError

logger = setup_logging("pptx-extractor")


def _shape_texts(shape) -> list[str]:
    """Collect the text of a shape, descending into groups and tables."""
    if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
        texts: list[str] = []
        for child in shape.shapes:
            texts.extend(_shape_texts(child))
        return texts

    if getattr(shape, "has_table", False) and shape.has_table:
        texts = []
        for row in shape.table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                texts.append(" | ".join(cells))
        return texts

    if getattr(shape, "has_text_frame", False) and shape.has_text_frame:
        text = shape.text_frame.text.strip()
        return [text] if text else []

    return []


def _slide_title(slide) -> str:
    title_shape = slide.shapes.title
    if title_shape is not None and title_shape.has_text_frame:
        return title_shape.text_frame.text.strip()
    return ""


def _slide_notes(slide) -> str | None:
    if not slide.has_notes_slide:
        return None
    notes_frame = slide.notes_slide.notes_text_frame
    if notes_frame is None:
        return None
    text = notes_frame.text.strip()
    return text or None


def extract_slides(data: bytes) -> list[Slide]:
    """Read title, body text and existing speaker notes from every slide.

    Raises:
        PresentationPackageError: ``data`` is not a readable .pptx file.
    """
    try:
        presentation = Presentation(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
        raise PresentationPackageError(f"Invalid PowerPoint file: {e}") from e

    slides: list[Slide] = []
    for index, pptx_slide in enumerate(presentation.slides, start=1):
        title = _slide_title(pptx_slide)
        title_shape_id = pptx_slide.shapes.title.shape_id if pptx_slide.shapes.title is not None else None

        content_parts: list[str] = []
        for shape in pptx_slide.shapes:
            if title_shape_id is not None and shape.shape_id == title_shape_id:
                continue
            content_parts.extend(_shape_texts(shape))

        slides.append(
            Slide(
                slide_number=index,
                title=title or f"Slide {index}",
                content="\n".join(content_parts),
                notes=_slide_notes(pptx_slide),
            )
        )

    logger.info(f"Extracted {len(slides)} slides")
    return slides
