from pathlib import Path

from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.exceptions import ExtractionFailure, TextDecodingError
from simplymedi.extraction.models import ExtractedText


class PlainTextAdapter(BaseTextExtractor):
    """Reads a plain-text upload as-is in a fixed encoding."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def extract(self, path: Path, language: str) -> ExtractedText:
        _ = language
        try:
            return ExtractedText(text=path.read_text(encoding=self._encoding))
        except UnicodeDecodeError as exc:
            raise TextDecodingError(
                f"Text file is not valid {self._encoding}: {exc}"
            ) from exc
        except OSError as exc:
            raise ExtractionFailure(f"Failed to read text file: {exc}") from exc
