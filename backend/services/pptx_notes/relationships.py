"""
Structured access to the package parts that wire a presentation together.

Relationship files (``*.rels``), the content-type manifest and the
presentation definition are parsed with lxml into explicit collections.
Membership checks run against those collections rather than against raw
text, and a part is only re-serialized when something was added to it.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from lxml import etree

from .errors import PresentationPackageError

RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
OFFICE_RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PRESENTATIONML_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"

RT_NOTES_SLIDE = f"{OFFICE_RELATIONSHIPS_NS}/notesSlide"
RT_NOTES_MASTER = f"{OFFICE_RELATIONSHIPS_NS}/notesMaster"
RT_SLIDE = f"{OFFICE_RELATIONSHIPS_NS}/slide"
RT_SLIDE_LAYOUT = f"{OFFICE_RELATIONSHIPS_NS}/slideLayout"

CT_NOTES_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.notesSlide+xml"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def _parse_xml(xml: bytes | str, part_name: str) -> etree._Element:
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    try:
        return etree.fromstring(xml, _PARSER)
    except etree.XMLSyntaxError as e:
        raise PresentationPackageError(f"Part '{part_name}' is not well-formed XML: {e}") from e


def _serialize_xml(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def source_part_for(rels_part_name: str) -> str:
    """Return the part a relationship file belongs to.

    ``ppt/slides/_rels/slide1.xml.rels`` belongs to ``ppt/slides/slide1.xml``;
    ``_rels/.rels`` belongs to the package itself (empty string).
    """
    rels_dir, rels_file = posixpath.split(rels_part_name)
    owner_dir = posixpath.dirname(rels_dir)
    owner_file = rels_file[: -len(".rels")] if rels_file.endswith(".rels") else rels_file
    return posixpath.join(owner_dir, owner_file) if owner_file else owner_dir


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target to a package part path."""
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    base_dir = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base_dir, target))


@dataclass(frozen=True)
class Relationship:
    rel_id: str
    rel_type: str
    target: str
    target_mode: str | None = None

    @property
    def is_external(self) -> bool:
        return self.target_mode == "External"


class RelationshipsPart:
    """An ordered relationship list owned by one part (or the package root)."""

    _TAG = f"{{{RELATIONSHIPS_NS}}}Relationship"

    def __init__(self, root: etree._Element, part_name: str) -> None:
        if root.tag != f"{{{RELATIONSHIPS_NS}}}Relationships":
            raise PresentationPackageError(f"Part '{part_name}' is not a relationships part")
        self.root = root
        self.part_name = part_name
        self.source_part = source_part_for(part_name)
        self.modified = False

    @classmethod
    def parse(cls, xml: bytes | str, part_name: str) -> RelationshipsPart:
        return cls(_parse_xml(xml, part_name), part_name)

    @classmethod
    def new(cls, part_name: str) -> RelationshipsPart:
        root = etree.Element(f"{{{RELATIONSHIPS_NS}}}Relationships", nsmap={None: RELATIONSHIPS_NS})
        part = cls(root, part_name)
        part.modified = True
        return part

    @property
    def relationships(self) -> list[Relationship]:
        return [
            Relationship(
                rel_id=element.get("Id", ""),
                rel_type=element.get("Type", ""),
                target=element.get("Target", ""),
                target_mode=element.get("TargetMode"),
            )
            for element in self.root.iterchildren(self._TAG)
        ]

    @property
    def ids(self) -> set[str]:
        return {rel.rel_id for rel in self.relationships}

    def find_by_target(self, part_path: str) -> Relationship | None:
        """Return the first internal relationship that resolves to ``part_path``."""
        for rel in self.relationships:
            if rel.is_external:
                continue
            if resolve_target(self.source_part, rel.target) == part_path:
                return rel
        return None

    def find_by_type(self, rel_type: str) -> list[Relationship]:
        return [rel for rel in self.relationships if rel.rel_type == rel_type]

    def next_available_id(self, start: int) -> str:
        """First ``rId<n>`` with ``n >= start`` that this list does not use yet."""
        used = self.ids
        number = start
        while f"rId{number}" in used:
            number += 1
        return f"rId{number}"

    def add(self, rel_type: str, target: str, id_start: int) -> Relationship:
        """Append a relationship using the first free id at or above ``id_start``."""
        rel_id = self.next_available_id(id_start)
        etree.SubElement(self.root, self._TAG, Id=rel_id, Type=rel_type, Target=target)
        self.modified = True
        return Relationship(rel_id=rel_id, rel_type=rel_type, target=target)

    def to_bytes(self) -> bytes:
        return _serialize_xml(self.root)


class ContentTypesPart:
    """The ``[Content_Types].xml`` manifest."""

    _DEFAULT_TAG = f"{{{CONTENT_TYPES_NS}}}Default"
    _OVERRIDE_TAG = f"{{{CONTENT_TYPES_NS}}}Override"

    def __init__(self, root: etree._Element, part_name: str = "[Content_Types].xml") -> None:
        if root.tag != f"{{{CONTENT_TYPES_NS}}}Types":
            raise PresentationPackageError(f"Part '{part_name}' is not a content-types manifest")
        self.root = root
        self.part_name = part_name
        self.modified = False

    @classmethod
    def parse(cls, xml: bytes | str, part_name: str = "[Content_Types].xml") -> ContentTypesPart:
        return cls(_parse_xml(xml, part_name), part_name)

    @property
    def defaults(self) -> dict[str, str]:
        return {
            element.get("Extension", "").lower(): element.get("ContentType", "")
            for element in self.root.iterchildren(self._DEFAULT_TAG)
        }

    @property
    def overrides(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for element in self.root.iterchildren(self._OVERRIDE_TAG):
            result.setdefault(element.get("PartName", ""), element.get("ContentType", ""))
        return result

    def declares(self, content_type: str) -> bool:
        """True when any default or override in the manifest uses ``content_type``."""
        return content_type in self.overrides.values() or content_type in self.defaults.values()

    def content_type_for(self, part_path: str) -> str | None:
        part_name = "/" + part_path.lstrip("/")
        override = self.overrides.get(part_name)
        if override is not None:
            return override
        extension = posixpath.splitext(part_name)[1].lstrip(".").lower()
        return self.defaults.get(extension)

    def add_override(self, part_path: str, content_type: str) -> bool:
        """Declare ``content_type`` for a part; a path never gets two overrides."""
        part_name = "/" + part_path.lstrip("/")
        if part_name in self.overrides:
            return False
        etree.SubElement(self.root, self._OVERRIDE_TAG, PartName=part_name, ContentType=content_type)
        self.modified = True
        return True

    def to_bytes(self) -> bytes:
        return _serialize_xml(self.root)


class PresentationPart:
    """The root presentation definition (``ppt/presentation.xml``)."""

    _SLIDE_ID_PATH = f"{{{PRESENTATIONML_NS}}}sldIdLst/{{{PRESENTATIONML_NS}}}sldId"
    _REL_ID_ATTR = f"{{{OFFICE_RELATIONSHIPS_NS}}}id"

    def __init__(self, root: etree._Element, part_name: str) -> None:
        self.root = root
        self.part_name = part_name
        self.modified = False

    @classmethod
    def parse(cls, xml: bytes | str, part_name: str) -> PresentationPart:
        return cls(_parse_xml(xml, part_name), part_name)

    def add_notes_reference(self, slide_rel_id: str, notes_rel_id: str) -> bool:
        """Tag the slide entry ``slide_rel_id`` with a ``notes`` attribute once."""
        for element in self.root.iterfind(self._SLIDE_ID_PATH):
            if element.get(self._REL_ID_ATTR) != slide_rel_id:
                continue
            if element.get("notes") is not None:
                return False
            element.set("notes", notes_rel_id)
            self.modified = True
            return True
        return False

    def to_bytes(self) -> bytes:
        return _serialize_xml(self.root)
