from abc import ABC, abstractmethod
from pathlib import Path

from simplymedi.extraction.models import ExtractedText


class BaseTextExtractor(ABC):
    """Contract for all per-file-type text extraction adapters."""

    @abstractmethod
    def extract(self, path: Path, language: str) -> ExtractedText:
        """Extract plain text from the file at ``path``.

        Args:
            path: Local path to the uploaded file.
            language: Report language name, e.g. ``"english"``.

        Returns:
            ExtractedText with the text and, where the format provides them,
            a recognition confidence and page count.

        Raises:
            ExtractionFailure: if extraction fails for any reason.
        """
