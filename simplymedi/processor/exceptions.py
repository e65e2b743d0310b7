class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class ReportNotFoundError(ProcessorError):
    """Raised when a report cannot be found in the database."""


class InvalidStatusTransitionError(ProcessorError):
    """Raised when a report is asked to move to a status its current one does not allow."""
