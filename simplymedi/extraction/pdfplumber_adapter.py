from pathlib import Path

import pdfplumber

from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.exceptions import PdfExtractionError
from simplymedi.extraction.models import ExtractedText


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts text and page count from a PDF using pdfplumber."""

    def extract(self, path: Path, language: str) -> ExtractedText:
        _ = language  # text layer is read as-is
        try:
            with pdfplumber.open(path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return ExtractedText(text="\n".join(pages).strip(), page_count=len(pages))
