class ExtractionFailure(Exception):
    """Raised when text cannot be extracted from a report. Fatal to the job."""


class UnsupportedFileTypeError(ExtractionFailure):
    """Raised when the declared file type has no extractor."""


class PdfExtractionError(ExtractionFailure):
    """Raised when a PDF cannot be parsed."""


class ImageExtractionError(ExtractionFailure):
    """Raised when an image cannot be preprocessed or recognized."""


class TextDecodingError(ExtractionFailure):
    """Raised when a plain-text upload is not valid in the assumed encoding."""
