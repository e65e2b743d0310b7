import time

from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.exceptions import ExtractionFailure, UnsupportedFileTypeError
from simplymedi.extraction.models import ExtractionResult, FileType, resolve_file_type
from simplymedi.logging.logger import Log
from simplymedi.storage.base import BaseStorage


class ExtractionEngine:
    """Turns a stored report plus its declared type into raw text.

    Every failure surfaces as :class:`ExtractionFailure`; nothing else escapes.
    """

    def __init__(
        self,
        storage: BaseStorage,
        extractors: dict[FileType, BaseTextExtractor],
        confidence_threshold: float = 60.0,
    ) -> None:
        self._storage = storage
        self._extractors = extractors
        self._confidence_threshold = confidence_threshold

    def extract(self, file_ref: str, file_type: str, language: str) -> ExtractionResult:
        """Extract text from the stored file ``file_ref``.

        Raises:
            ExtractionFailure: on an unsupported type, a missing file, or a parse error.
        """
        started = time.monotonic()
        resolved = resolve_file_type(file_type)
        extractor = self._extractors.get(resolved)
        if extractor is None:
            raise UnsupportedFileTypeError(f"Unsupported file type: {file_type}")

        Log.info(f"Extracting text from {resolved.value} file", file_ref=file_ref)
        try:
            with self._storage.local_copy(file_ref) as path:
                raw = extractor.extract(path, language)
        except ExtractionFailure:
            raise
        except Exception as exc:
            raise ExtractionFailure(f"Failed to load {file_ref}: {exc}") from exc

        # PostgreSQL text columns reject NUL characters.
        text = raw.text.replace("\x00", "")
        result = ExtractionResult(
            text=text,
            duration_ms=int((time.monotonic() - started) * 1000),
            file_type=resolved,
            confidence=raw.confidence,
            word_count=len(text.split()),
            line_count=sum(1 for line in text.splitlines() if line.strip()),
            page_count=raw.page_count,
        )
        Log.info(
            f"Text extraction completed for {file_ref}",
            chars=len(result.text),
            confidence=result.confidence,
            duration_ms=result.duration_ms,
        )
        return result

    def meets_confidence(self, confidence: float | None, threshold: float | None = None) -> bool:
        """Return True when ``confidence`` reaches the threshold.

        Results without a confidence score (PDF, plain text) always pass.
        """
        if confidence is None:
            return True
        limit = self._confidence_threshold if threshold is None else threshold
        return confidence >= limit
