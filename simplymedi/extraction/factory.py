from simplymedi.config.settings import Settings
from simplymedi.extraction.base import BaseTextExtractor
from simplymedi.extraction.engine import ExtractionEngine
from simplymedi.extraction.image_adapter import TesseractImageAdapter
from simplymedi.extraction.models import FileType
from simplymedi.extraction.pdfplumber_adapter import PdfPlumberAdapter
from simplymedi.extraction.pymupdf_adapter import PyMuPdfAdapter
from simplymedi.extraction.text_adapter import PlainTextAdapter
from simplymedi.storage.base import BaseStorage


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()


class ExtractionEngineFactory:
    """Wires one extractor per supported file type into an ExtractionEngine."""

    @classmethod
    def create(cls, settings: Settings, storage: BaseStorage) -> ExtractionEngine:
        extractors: dict[FileType, BaseTextExtractor] = {
            FileType.IMAGE: TesseractImageAdapter(max_dimension=settings.ocr_max_dimension),
            FileType.PDF: PdfExtractorFactory.create(settings),
            FileType.TEXT: PlainTextAdapter(encoding=settings.text_encoding),
        }
        return ExtractionEngine(
            storage=storage,
            extractors=extractors,
            confidence_threshold=settings.ocr_confidence_threshold,
        )
