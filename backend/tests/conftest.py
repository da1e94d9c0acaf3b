import io
import sys
import zipfile
from collections.abc import Callable, Generator, Iterable
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
PROJECT_ROOT = ROOT_DIR.parent
for path in (PROJECT_ROOT, ROOT_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from shared.utils import config as service_config

CT_RELS = "application/vnd.openxmlformats-package.relationships+xml"
CT_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
CT_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
RT_BASE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


def _content_types(slide_count: int, extra_overrides: Iterable[tuple[str, str]]) -> str:
    overrides = [f'<Override PartName="/ppt/presentation.xml" ContentType="{CT_PRESENTATION}"/>']
    overrides += [
        f'<Override PartName="/ppt/slides/slide{n}.xml" ContentType="{CT_SLIDE}"/>'
        for n in range(1, slide_count + 1)
    ]
    overrides += [f'<Override PartName="{name}" ContentType="{ct}"/>' for name, ct in extra_overrides]
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        f'<Default Extension="rels" ContentType="{CT_RELS}"/>'
        '<Default Extension="xml" ContentType="application/xml"/>'
        + "".join(overrides)
        + "</Types>"
    )


def _relationships(entries: Iterable[tuple[str, str, str]]) -> str:
    body = "".join(f'<Relationship Id="{rid}" Type="{RT_BASE}/{kind}" Target="{target}"/>' for rid, kind, target in entries)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">{body}</Relationships>'
    )


def _presentation(slide_count: int) -> str:
    slide_ids = "".join(f'<p:sldId id="{255 + n}" r:id="rId{n + 1}"/>' for n in range(1, slide_count + 1))
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        '<p:presentation xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        f'xmlns:r="{RT_BASE}" '
        'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
        f"<p:sldIdLst>{slide_ids}</p:sldIdLst>"
        '<p:sldSz cx="9144000" cy="6858000"/><p:notesSz cx="6858000" cy="9144000"/>'
        "</p:presentation>"
    )


def _slide() -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        f'xmlns:r="{RT_BASE}" '
        'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
        "<p:cSld><p:spTree><p:nvGrpSpPr><p:cNvPr id=\"1\" name=\"\"/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>"
        "<p:grpSpPr/></p:spTree></p:cSld></p:sld>"
    )


def build_package_parts(
    slide_count: int = 3,
    missing_slide_rels: Iterable[int] = (3,),
    extra_root_rels: Iterable[tuple[str, str, str]] = (),
    extra_overrides: Iterable[tuple[str, str]] = (),
    include_presentation: bool = True,
    extra_parts: dict[str, str] | None = None,
) -> dict[str, str]:
    """Parts of a minimal deck; slide rels listed in ``missing_slide_rels`` are left out."""
    missing = set(missing_slide_rels)
    parts: dict[str, str] = {
        "[Content_Types].xml": _content_types(slide_count, extra_overrides),
        "_rels/.rels": _relationships([("rId1", "officeDocument", "ppt/presentation.xml")]),
    }
    if include_presentation:
        parts["ppt/presentation.xml"] = _presentation(slide_count)
    root_rels = [("rId1", "slideMaster", "slideMasters/slideMaster1.xml")]
    root_rels += [(f"rId{n + 1}", "slide", f"slides/slide{n}.xml") for n in range(1, slide_count + 1)]
    root_rels += list(extra_root_rels)
    parts["ppt/_rels/presentation.xml.rels"] = _relationships(root_rels)
    for n in range(1, slide_count + 1):
        parts[f"ppt/slides/slide{n}.xml"] = _slide()
        if n not in missing:
            parts[f"ppt/slides/_rels/slide{n}.xml.rels"] = _relationships(
                [("rId1", "slideLayout", "../slideLayouts/slideLayout1.xml")]
            )
    parts.update(extra_parts or {})
    return parts


def zip_parts(parts: dict[str, str | bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in parts.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_pptx() -> Callable[..., bytes]:
    """Build a minimal three-slide deck as zip bytes (slide 3 has no rels file by default)."""

    def _make(**kwargs) -> bytes:
        return zip_parts(build_package_parts(**kwargs))

    return _make


@pytest.fixture
def python_pptx_deck() -> bytes:
    """A real deck written by python-pptx: title slide, bullet slide, table slide, untitled slide."""
    from pptx import Presentation
    from pptx.util import Inches

    presentation = Presentation()

    title_slide = presentation.slides.add_slide(presentation.slide_layouts[0])
    title_slide.shapes.title.text = "Welkom"
    title_slide.placeholders[1].text = "Een introductie"
    title_slide.notes_slide.notes_text_frame.text = "Bestaande notitie"

    bullet_slide = presentation.slides.add_slide(presentation.slide_layouts[1])
    bullet_slide.shapes.title.text = "Agenda"
    bullet_slide.placeholders[1].text = "Punt een\nPunt twee"

    table_slide = presentation.slides.add_slide(presentation.slide_layouts[5])
    table_slide.shapes.title.text = "Cijfers"
    table = table_slide.shapes.add_table(2, 2, Inches(1), Inches(2), Inches(6), Inches(1)).table
    table.cell(0, 0).text = "Jaar"
    table.cell(0, 1).text = "Omzet"
    table.cell(1, 0).text = "2024"
    table.cell(1, 1).text = "42"

    blank_slide = presentation.slides.add_slide(presentation.slide_layouts[6])
    textbox = blank_slide.shapes.add_textbox(Inches(1), Inches(1), Inches(4), Inches(1))
    textbox.text_frame.text = "Alleen tekst"

    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def pipeline_config() -> Generator[None, None, None]:
    """Give every test the repository pipeline configuration and restore it afterwards."""
    original = dict(service_config.pipeline_config)
    service_config.load_pipeline_config()
    try:
        yield
    finally:
        service_config.set_pipeline_config(original)
