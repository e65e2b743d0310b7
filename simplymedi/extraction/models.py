from dataclasses import dataclass
from enum import Enum

from simplymedi.extraction.exceptions import UnsupportedFileTypeError


class FileType(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"


_DECLARED_TYPES: dict[str, FileType] = {
    "image": FileType.IMAGE,
    "jpg": FileType.IMAGE,
    "jpeg": FileType.IMAGE,
    "png": FileType.IMAGE,
    "pdf": FileType.PDF,
    "text": FileType.TEXT,
    "txt": FileType.TEXT,
}


def resolve_file_type(declared: str) -> FileType:
    """Map a declared type or file extension to a :class:`FileType`.

    Raises:
        UnsupportedFileTypeError: for anything outside image, pdf, and text.
    """
    normalized = declared.strip().lower().lstrip(".")
    file_type = _DECLARED_TYPES.get(normalized)
    if file_type is None:
        raise UnsupportedFileTypeError(f"Unsupported file type: {declared}")
    return file_type


@dataclass(frozen=True)
class ExtractedText:
    """Raw output of a single extractor adapter."""

    text: str
    confidence: float | None = None
    page_count: int | None = None


@dataclass(frozen=True)
class ExtractionResult:
    """Output of the extraction engine. ``confidence`` is on a 0-100 scale."""

    text: str
    duration_ms: int
    file_type: FileType
    confidence: float | None = None
    word_count: int | None = None
    line_count: int | None = None
    page_count: int | None = None
