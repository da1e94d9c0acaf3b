"""
In-memory view of a presentation package (the zip container of a .pptx file).
"""

import io
import zipfile
from collections.abc import Iterator

from .errors import PackageSerializationError, PresentationPackageError

CONTENT_TYPES_PART = "[Content_Types].xml"
PRESENTATION_PART = "ppt/presentation.xml"
PRESENTATION_RELS_PART = "ppt/_rels/presentation.xml.rels"

# Fixed entry timestamp keeps re-encoded archives reproducible.
_ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class PresentationPackage:
    """Ordered mapping of part path to bytes, decoded from a zip archive.

    Paths are case-sensitive POSIX strings without a leading slash, exactly as
    they appear in the archive. New parts are appended after the existing ones
    so the original entry order (``[Content_Types].xml`` first) is preserved.
    """

    def __init__(self, parts: dict[str, bytes] | None = None) -> None:
        self._parts: dict[str, bytes] = dict(parts or {})

    @classmethod
    def from_bytes(cls, data: bytes) -> "PresentationPackage":
        """Decode a zip archive into a package."""
        parts: dict[str, bytes] = {}
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    parts[info.filename] = archive.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            raise PresentationPackageError(f"Invalid PowerPoint file: not a readable archive ({e})") from e
        return cls(parts)

    def __contains__(self, path: object) -> bool:
        return path in self._parts

    def __iter__(self) -> Iterator[str]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    @property
    def part_names(self) -> list[str]:
        return list(self._parts)

    def read(self, path: str) -> bytes:
        try:
            return self._parts[path]
        except KeyError:
            raise PresentationPackageError(f"Package has no part named '{path}'") from None

    def get(self, path: str, default: bytes | None = None) -> bytes | None:
        return self._parts.get(path, default)

    def write(self, path: str, content: bytes | str) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._parts[path] = content

    def update(self, parts: dict[str, bytes]) -> None:
        """Write several parts at once."""
        for path, content in parts.items():
            self.write(path, content)

    def to_bytes(self, compresslevel: int = 6) -> bytes:
        """Serialize the package back to a deflate-compressed zip archive."""
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for path, content in self._parts.items():
                    info = zipfile.ZipInfo(path, date_time=_ENTRY_DATE_TIME)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    archive.writestr(info, content, compresslevel=compresslevel)
        except (MemoryError, OSError, ValueError, zipfile.LargeZipFile) as e:
            raise PackageSerializationError(f"Failed to serialize presentation package: {e}") from e
        return buffer.getvalue()
