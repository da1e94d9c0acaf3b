"""
Embedding narration scripts into a presentation as speaker notes.

``attach_notes`` writes one notes-slide part per slide and wires it into the
package: a content-type override, a relationship from the presentation, a
relationship from the slide, and a back-reference from the notes slide. Every
insertion is guarded by a presence check, so running it again over its own
output adds nothing.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from shared.config import config
from shared.models import Slide
from shared.utils import setup_logging

from .errors import PresentationPackageError
from .notes_xml import build_notes_slide_xml
from .package import (
    CONTENT_TYPES_PART,
    PRESENTATION_PART,
    PRESENTATION_RELS_PART,
    PresentationPackage,
)
from .relationships import (
    CT_NOTES_SLIDE,
    RT_NOTES_MASTER,
    RT_NOTES_SLIDE,
    RT_SLIDE,
    RT_SLIDE_LAYOUT,
    ContentTypesPart,
    PresentationPart,
    RelationshipsPart,
    resolve_target,
)

logger = setup_logging("pptx-notes")

# Id namespaces reserved for relationships minted here; the first unused id
# at or above ``base + slide_number`` is taken.
ROOT_REL_ID_BASE = 1000
SLIDE_REL_ID_BASE = 100

NOTES_MASTER_PART = "ppt/notesMasters/notesMaster1.xml"
DEFAULT_SLIDE_LAYOUT_TARGET = "../slideLayouts/slideLayout1.xml"
SLIDE_RELS_PART = re.compile(r"^ppt/slides/_rels/slide\d+\.xml\.rels$")


def notes_part_name(index: int) -> str:
    return f"ppt/notesSlides/notesSlide{index}.xml"


def rels_part_name(part_name: str) -> str:
    directory, name = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{name}.rels")


def slide_part_name(slide_number: int) -> str:
    return f"ppt/slides/slide{slide_number}.xml"


def slide_rels_part_name(slide_number: int) -> str:
    return rels_part_name(slide_part_name(slide_number))


def relative_target(source_part: str, part_name: str) -> str:
    """Relationship target for ``part_name`` as seen from ``source_part``."""
    return posixpath.relpath(part_name, posixpath.dirname(source_part))


@dataclass
class NotesAttachResult:
    """What ``attach_notes`` added to the package."""

    notes_parts: list[str] = field(default_factory=list)
    content_type_overrides: list[str] = field(default_factory=list)
    root_relationship_ids: dict[int, str] = field(default_factory=dict)
    slide_relationship_ids: dict[int, str] = field(default_factory=dict)
    fabricated_slide_rels: list[str] = field(default_factory=list)
    notes_back_references: list[str] = field(default_factory=list)
    presentation_cross_references: dict[int, str] = field(default_factory=dict)
    changed_parts: list[str] = field(default_factory=list)


def _ordered_slides(slides: Sequence[Slide]) -> list[Slide]:
    ordered = sorted(slides, key=lambda slide: slide.slide_number)
    seen: set[int] = set()
    for slide in ordered:
        if slide.slide_number < 1:
            raise ValueError(f"Slide numbers are 1-based, got {slide.slide_number}")
        if slide.slide_number in seen:
            raise ValueError(f"Duplicate slide number {slide.slide_number}")
        seen.add(slide.slide_number)
    return ordered


def _minimal_slide_rels(part_name: str) -> RelationshipsPart:
    rels = RelationshipsPart.new(part_name)
    rels.add(RT_SLIDE_LAYOUT, DEFAULT_SLIDE_LAYOUT_TARGET, id_start=1)
    return rels


def _linked_notes_part(slide_rels: RelationshipsPart) -> str | None:
    for rel in slide_rels.find_by_type(RT_NOTES_SLIDE):
        if not rel.is_external:
            return resolve_target(slide_rels.source_part, rel.target)
    return None


def _load_slide_rels(
    package: PresentationPackage, slides: list[Slide], result: NotesAttachResult
) -> dict[int, RelationshipsPart]:
    loaded: dict[int, RelationshipsPart] = {}
    for slide in slides:
        part_name = slide_rels_part_name(slide.slide_number)
        content = package.get(part_name)
        if content is None:
            loaded[slide.slide_number] = _minimal_slide_rels(part_name)
            result.fabricated_slide_rels.append(part_name)
        else:
            loaded[slide.slide_number] = RelationshipsPart.parse(content, part_name)
    return loaded


def _claimed_notes_parts(package: PresentationPackage) -> set[str]:
    """Notes parts that some slide in the package already links to."""
    claimed: set[str] = set()
    for name in package:
        if not SLIDE_RELS_PART.match(name):
            continue
        linked = _linked_notes_part(RelationshipsPart.parse(package.read(name), name))
        if linked is not None:
            claimed.add(linked)
    return claimed


def _resolve_notes_parts(
    package: PresentationPackage, slide_rels: dict[int, RelationshipsPart]
) -> dict[int, str]:
    """Choose the notes part each slide's script is written to.

    A slide that already links a notes slide keeps that part. Otherwise slide K
    gets ``notesSlideK.xml``, or the lowest free ``notesSlide<n>.xml`` when that
    name already exists or belongs to another slide.
    """
    taken = _claimed_notes_parts(package) | set(package)
    notes_parts: dict[int, str] = {}
    for number, rels in slide_rels.items():
        part = _linked_notes_part(rels)
        if part is None:
            part = notes_part_name(number)
            if part in taken:
                index = 1
                while notes_part_name(index) in taken:
                    index += 1
                part = notes_part_name(index)
                logger.debug(f"{notes_part_name(number)} is in use, slide {number} gets {part}")
        taken.add(part)
        notes_parts[number] = part
    return notes_parts


def _register_content_types(
    content_types: ContentTypesPart, notes_parts: dict[int, str], result: NotesAttachResult
) -> None:
    per_part = bool(config.get_pipeline_value("notes.per_part_content_types", False))
    # Default rule: once the notes-slide type is declared anywhere, nothing is added.
    if not per_part and content_types.declares(CT_NOTES_SLIDE):
        logger.debug("Notes-slide content type already declared, leaving manifest untouched")
        return
    for part in notes_parts.values():
        if content_types.content_type_for(part) == CT_NOTES_SLIDE:
            continue
        if content_types.add_override(part, CT_NOTES_SLIDE):
            result.content_type_overrides.append(part)


def _register_root_relationships(
    root_rels: RelationshipsPart, notes_parts: dict[int, str], result: NotesAttachResult
) -> dict[int, str]:
    notes_rel_ids: dict[int, str] = {}
    for number, part in notes_parts.items():
        existing = root_rels.find_by_target(part)
        if existing is not None:
            notes_rel_ids[number] = existing.rel_id
            continue
        rel = root_rels.add(
            RT_NOTES_SLIDE,
            relative_target(PRESENTATION_PART, part),
            id_start=ROOT_REL_ID_BASE + number,
        )
        notes_rel_ids[number] = rel.rel_id
        result.root_relationship_ids[number] = rel.rel_id
    return notes_rel_ids


def _register_slide_relationship(
    slide_rels: RelationshipsPart, slide_number: int, notes_part: str, result: NotesAttachResult
) -> None:
    if slide_rels.find_by_target(notes_part) is not None:
        return
    rel = slide_rels.add(
        RT_NOTES_SLIDE,
        relative_target(slide_rels.source_part, notes_part),
        id_start=SLIDE_REL_ID_BASE + slide_number,
    )
    result.slide_relationship_ids[slide_number] = rel.rel_id


def _notes_back_reference(
    package: PresentationPackage, slide_number: int, notes_part: str
) -> RelationshipsPart | None:
    part_name = rels_part_name(notes_part)
    if part_name in package:
        return None
    rels = RelationshipsPart.new(part_name)
    if NOTES_MASTER_PART in package:
        rels.add(RT_NOTES_MASTER, relative_target(notes_part, NOTES_MASTER_PART), id_start=1)
    slide_part = slide_part_name(slide_number)
    if slide_part in package:
        rels.add(RT_SLIDE, relative_target(notes_part, slide_part), id_start=1)
    return rels


def attach_notes(
    package: PresentationPackage,
    slides: Sequence[Slide],
    *,
    cross_reference: bool | None = None,
    language: str | None = None,
) -> NotesAttachResult:
    """Embed each slide's script as a notes slide and wire it into ``package``.

    Every new or rewritten part is staged first and written to the package in
    one step at the end, so a failure leaves the package untouched.

    Args:
        package: Decoded presentation package, mutated in place.
        slides: Slides to annotate; ``slide_number`` selects the slide part.
        cross_reference: Also tag ``p:sldId`` entries in the presentation
            definition with a ``notes`` attribute. Defaults to the
            ``notes.cross_reference_presentation`` pipeline flag.
        language: Language tag for the notes text run.

    Raises:
        PresentationPackageError: The package has no presentation definition
            or one of the parts to read or update is malformed.
        ValueError: Slide numbers are not unique positive integers.
    """
    if PRESENTATION_PART not in package:
        raise PresentationPackageError(f"Invalid PowerPoint file: missing {PRESENTATION_PART}")

    ordered = _ordered_slides(slides)
    if cross_reference is None:
        cross_reference = bool(config.get_pipeline_value("notes.cross_reference_presentation", False))
    language = language or config.get_pipeline_value("notes.language", "nl-NL")

    result = NotesAttachResult()
    staged: dict[str, bytes] = {}

    slide_rels = _load_slide_rels(package, ordered, result)
    notes_parts = _resolve_notes_parts(package, slide_rels)

    for slide in ordered:
        part = notes_parts[slide.slide_number]
        staged[part] = build_notes_slide_xml(slide.script, slide.slide_number, language).encode("utf-8")
        result.notes_parts.append(part)

    manifest = package.get(CONTENT_TYPES_PART)
    if manifest is not None:
        content_types = ContentTypesPart.parse(manifest, CONTENT_TYPES_PART)
        _register_content_types(content_types, notes_parts, result)
        if content_types.modified:
            staged[CONTENT_TYPES_PART] = content_types.to_bytes()
    else:
        logger.warning(f"Package has no {CONTENT_TYPES_PART}, notes parts get no content-type override")

    root_rels: RelationshipsPart | None = None
    notes_rel_ids: dict[int, str] = {}
    root_rels_content = package.get(PRESENTATION_RELS_PART)
    if root_rels_content is not None:
        root_rels = RelationshipsPart.parse(root_rels_content, PRESENTATION_RELS_PART)
        notes_rel_ids = _register_root_relationships(root_rels, notes_parts, result)
        if root_rels.modified:
            staged[PRESENTATION_RELS_PART] = root_rels.to_bytes()
    else:
        logger.warning(f"Package has no {PRESENTATION_RELS_PART}, skipping presentation relationships")

    for slide in ordered:
        number = slide.slide_number
        rels = slide_rels[number]
        _register_slide_relationship(rels, number, notes_parts[number], result)
        if rels.modified:
            staged[rels.part_name] = rels.to_bytes()

        notes_rels = _notes_back_reference(package, number, notes_parts[number])
        if notes_rels is not None:
            staged[notes_rels.part_name] = notes_rels.to_bytes()
            result.notes_back_references.append(notes_rels.part_name)

    if cross_reference and root_rels is not None and notes_rel_ids:
        presentation = PresentationPart.parse(package.read(PRESENTATION_PART), PRESENTATION_PART)
        for slide in ordered:
            notes_rel_id = notes_rel_ids.get(slide.slide_number)
            slide_rel = root_rels.find_by_target(slide_part_name(slide.slide_number))
            if notes_rel_id is None or slide_rel is None:
                continue
            if presentation.add_notes_reference(slide_rel.rel_id, notes_rel_id):
                result.presentation_cross_references[slide.slide_number] = notes_rel_id
        if presentation.modified:
            staged[PRESENTATION_PART] = presentation.to_bytes()

    package.update(staged)
    result.changed_parts = list(staged)
    logger.info(
        f"Attached notes to {len(ordered)} slides ({len(result.content_type_overrides)} overrides, "
        f"{len(result.root_relationship_ids)} presentation rels, {len(result.slide_relationship_ids)} slide rels, "
        f"{len(result.fabricated_slide_rels)} fabricated rels files)"
    )
    return result
