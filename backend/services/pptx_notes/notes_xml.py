"""
Notes-slide XML generation.

A notes slide holds two placeholders: the slide thumbnail (``sldImg``) and the
body placeholder that carries the narration script as speaker notes.
"""

import re

# Characters that are not legal in XML 1.0 text content.
_ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

# "&" must be replaced first so the other entities are not escaped twice.
_XML_ENTITIES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
    # A literal CR would be normalised to LF by any XML parser.
    ("\r", "&#13;"),
)

_NOTES_SLIDE_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<p:notes xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">
  <p:cSld>
    <p:spTree>
      <p:nvGrpSpPr>
        <p:cNvPr id="1" name=""/>
        <p:cNvGrpSpPr/>
        <p:nvPr/>
      </p:nvGrpSpPr>
      <p:grpSpPr>
        <a:xfrm>
          <a:off x="0" y="0"/>
          <a:ext cx="0" cy="0"/>
          <a:chOff x="0" y="0"/>
          <a:chExt cx="0" cy="0"/>
        </a:xfrm>
      </p:grpSpPr>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="2" name="Slide Image Placeholder {slide_number}"/>
          <p:cNvSpPr>
            <a:spLocks noGrp="1" noRot="1" noChangeAspect="1"/>
          </p:cNvSpPr>
          <p:nvPr>
            <p:ph type="sldImg"/>
          </p:nvPr>
        </p:nvSpPr>
        <p:spPr>
          <a:xfrm>
            <a:off x="685800" y="685800"/>
            <a:ext cx="6858000" cy="5143500"/>
          </a:xfrm>
        </p:spPr>
      </p:sp>
      <p:sp>
        <p:nvSpPr>
          <p:cNvPr id="3" name="Notes Placeholder {slide_number}"/>
          <p:cNvSpPr>
            <a:spLocks noGrp="1"/>
          </p:cNvSpPr>
          <p:nvPr>
            <p:ph type="body" idx="1"/>
          </p:nvPr>
        </p:nvSpPr>
        <p:spPr>
          <a:xfrm>
            <a:off x="685800" y="6000000"/>
            <a:ext cx="6858000" cy="4114800"/>
          </a:xfrm>
        </p:spPr>
        <p:txBody>
          <a:bodyPr/>
          <a:lstStyle/>
          <a:p>
            <a:r>
              <a:rPr lang="{language}" dirty="0" smtClean="0"/>
              <a:t>{text}</a:t>
            </a:r>
            <a:endParaRPr lang="{language}" dirty="0"/>
          </a:p>
        </p:txBody>
      </p:sp>
    </p:spTree>
  </p:cSld>
  <p:clrMapOvr>
    <a:masterClrMapping/>
  </p:clrMapOvr>
</p:notes>"""


def strip_illegal_xml_chars(text: str) -> str:
    """Remove control characters that XML 1.0 does not allow in text."""
    return _ILLEGAL_XML_CHARS.sub("", text)


def escape_xml_text(text: str | None) -> str:
    """Escape narration text for use as XML character data.

    Control characters are dropped, then the five XML-significant characters
    are replaced by their entities.
    """
    if not text:
        return ""
    escaped = strip_illegal_xml_chars(text)
    for char, entity in _XML_ENTITIES:
        escaped = escaped.replace(char, entity)
    return escaped


def build_notes_slide_xml(script: str | None, slide_number: int, language: str = "nl-NL") -> str:
    """Return a complete notes-slide document for one slide's narration."""
    return _NOTES_SLIDE_TEMPLATE.format(
        slide_number=int(slide_number),
        language=escape_xml_text(language),
        text=escape_xml_text(script),
    )
