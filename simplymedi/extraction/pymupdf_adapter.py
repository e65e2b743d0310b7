from pathlib import Path

import pymupdf

from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.exceptions import PdfExtractionError
from simplymedi.extraction.models import ExtractedText


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts text and page count from a PDF using PyMuPDF."""

    def extract(self, path: Path, language: str) -> ExtractedText:
        _ = language
        try:
            with pymupdf.open(path) as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return ExtractedText(text="\n".join(pages).strip(), page_count=len(pages))
