"""Scanned-report OCR: Pillow preprocessing followed by Tesseract recognition.

Preprocessing bounds the image to ``max_dimension`` on its longest side (never
enlarging), stretches the histogram, sharpens, then lifts brightness and contrast
slightly before recognition.
"""

from pathlib import Path
from typing import Any, ClassVar

import pytesseract
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.exceptions import ImageExtractionError
from simplymedi.extraction.models import ExtractedText
from simplymedi.logging.logger import Log


class TesseractImageAdapter(BaseTextExtractor):
    """Extracts text and a 0-100 confidence from JPEG/PNG scans."""

    LANGUAGE_CODES: ClassVar[dict[str, str]] = {
        "english": "eng",
        "hindi": "hin",
        "bengali": "ben",
        "tamil": "tam",
        "telugu": "tel",
        "kannada": "kan",
        "marathi": "mar",
        "gujarati": "guj",
        "punjabi": "pan",
        "arabic": "ara",
        "french": "fra",
        "mandarin": "chi_sim",
    }
    DEFAULT_LANGUAGE_CODE: ClassVar[str] = "eng"

    BRIGHTNESS: ClassVar[float] = 1.1
    CONTRAST: ClassVar[float] = 1.2

    def __init__(self, max_dimension: int = 2000) -> None:
        self._max_dimension = max_dimension

    @classmethod
    def language_code(cls, language: str) -> str:
        return cls.LANGUAGE_CODES.get(language.lower(), cls.DEFAULT_LANGUAGE_CODE)

    @classmethod
    def supported_languages(cls) -> list[str]:
        return list(cls.LANGUAGE_CODES)

    def extract(self, path: Path, language: str) -> ExtractedText:
        try:
            with Image.open(path) as original:
                prepared = self.preprocess(original)
            data = pytesseract.image_to_data(
                prepared,
                lang=self.language_code(language),
                output_type=pytesseract.Output.DICT,
            )
        except Exception as exc:
            raise ImageExtractionError(f"Image text recognition failed: {exc}") from exc

        text, confidence = self._assemble(data)
        Log.debug(f"OCR recognized {len(text)} chars", confidence=round(confidence, 1))
        return ExtractedText(text=text, confidence=confidence)

    def preprocess(self, image: Image.Image) -> Image.Image:
        """Return a recognition-ready copy of ``image``."""
        prepared = ImageOps.exif_transpose(image) or image
        if prepared.mode not in ("RGB", "L"):
            prepared = prepared.convert("RGB")
        prepared = prepared.copy()
        prepared.thumbnail((self._max_dimension, self._max_dimension))
        prepared = ImageOps.autocontrast(prepared)
        prepared = prepared.filter(ImageFilter.SHARPEN)
        prepared = ImageEnhance.Brightness(prepared).enhance(self.BRIGHTNESS)
        return ImageEnhance.Contrast(prepared).enhance(self.CONTRAST)

    @staticmethod
    def _assemble(data: dict[str, list[Any]]) -> tuple[str, float]:
        """Rebuild line-structured text and the mean word confidence."""
        lines: dict[tuple[int, int, int], list[str]] = {}
        confidences: list[float] = []
        for index, word in enumerate(data.get("text", [])):
            word = str(word).strip()
            conf = float(data["conf"][index])
            if not word or conf < 0:
                continue
            key = (
                int(data["block_num"][index]),
                int(data["par_num"][index]),
                int(data["line_num"][index]),
            )
            lines.setdefault(key, []).append(word)
            confidences.append(conf)

        text = "\n".join(" ".join(words) for _key, words in sorted(lines.items()))
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return text, confidence
