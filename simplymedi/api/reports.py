from typing import Any

from pydantic import ValidationError

from simplymedi.api.exceptions import (
    InvalidStatusTransitionError,
    ReportNotFoundError,
    ValidationFailure,
)
from simplymedi.api.schemas import ReportResponse, ReportStatusResponse, UploadRequest
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.database.repositories.simplified_report_repository import (
    SimplifiedReportRepository,
)
from simplymedi.indexing.models import IndexingOutcome, IndexingRequest
from simplymedi.indexing.sidecar import IndexingSidecar
from simplymedi.logging.logger import Log
from simplymedi.processor.status import TERMINAL_STATUSES, ProcessingStatus
from simplymedi.storage.base import BaseStorage
from simplymedi.worker.dispatcher import JobDispatcher

UPLOAD_FOLDER = "reports"


class ReportService:
    """Upload, reprocess, reindex and status operations over document jobs.

    Upload returns as soon as the report row exists; processing runs on the
    dispatcher's thread pool.
    """

    def __init__(
        self,
        storage: BaseStorage,
        report_repo: ReportRepository,
        simplified_repo: SimplifiedReportRepository,
        dispatcher: JobDispatcher,
        max_file_size_bytes: int,
        indexing_sidecar: IndexingSidecar | None = None,
    ) -> None:
        self._storage = storage
        self._report_repo = report_repo
        self._simplified_repo = simplified_repo
        self._dispatcher = dispatcher
        self._max_file_size_bytes = max_file_size_bytes
        self._sidecar = indexing_sidecar or IndexingSidecar(None)

    def upload(self, data: dict[str, Any]) -> ReportResponse:
        """Validate, store and register an upload, then schedule it.

        The declared file type is not checked against the supported types here;
        an unsupported type fails the job during extraction.

        Raises:
            ValidationFailure: if the request is malformed or the file is too large.
        """
        try:
            request = UploadRequest.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailure.from_pydantic(exc) from exc

        size = len(request.content)
        if size > self._max_file_size_bytes:
            raise ValidationFailure(
                "File too large",
                [{"field": "content", "message": f"exceeds {self._max_file_size_bytes} bytes"}],
            )

        stored = self._storage.store(
            request.content, request.original_file_name, request.mime_type, UPLOAD_FOLDER
        )
        try:
            report = self._report_repo.create(
                user_id=request.user_id,
                file_name=stored.key.rsplit("/", 1)[-1],
                original_file_name=request.original_file_name,
                storage_key=stored.key,
                storage_url=stored.url,
                is_local=stored.is_local,
                file_type=request.file_type,
                mime_type=request.mime_type,
                file_size_bytes=size,
                report_type=request.report_type,
                language=request.language,
                metadata={"profile": request.profile} if request.profile else None,
            )
        except Exception:
            self._storage.delete(stored.key)
            raise

        Log.info(
            f"Report {report.id} uploaded",
            user_id=report.user_id,
            file_type=report.file_type,
            size=size,
        )
        self._dispatcher.dispatch(report.id)
        return ReportResponse.model_validate(report)

    def reprocess(self, report_id: int) -> None:
        """Discard the derived artifact and run a terminal report again.

        Raises:
            ReportNotFoundError: if the report does not exist.
            InvalidStatusTransitionError: if the report is not completed or failed.
        """
        report = self._report_repo.find_by_id(report_id)
        status = ProcessingStatus(report.processing_status)
        if status not in TERMINAL_STATUSES:
            raise InvalidStatusTransitionError(
                f"Report {report_id} cannot be reprocessed while '{status.value}'"
            )

        self._simplified_repo.delete_by_report_id(report_id)
        moved = self._report_repo.transition(
            report_id, TERMINAL_STATUSES, ProcessingStatus.PROCESSING
        )
        if not moved:
            raise InvalidStatusTransitionError(
                f"Report {report_id} changed status before it could be reprocessed"
            )
        Log.info(f"Report {report_id} queued for reprocessing", previous_status=status.value)
        self._dispatcher.dispatch_claimed(report_id)

    def status(self, report_id: int) -> ReportStatusResponse:
        """Return the processing status and, once completed, the artifact summary."""
        report = self._report_repo.find_by_id(report_id)
        response = ReportStatusResponse(
            report_id=report.id,
            processing_status=report.processing_status,
            processing_error=report.processing_error,
        )
        if report.processing_status != ProcessingStatus.COMPLETED.value:
            return response

        artifact = self._simplified_repo.find_by_report_id(report_id)
        if artifact is not None:
            response.summary = artifact.summary
            response.risk_level = artifact.risk_level
            response.language = artifact.language
            response.artifact_created_at = artifact.created_at
        return response

    def reindex(self, report_ids: list[int]) -> list[IndexingOutcome]:
        """Send already-extracted reports to the indexing workflow, one at a time.

        Unlike the pipeline's hand-off this waits for each submission. A missing
        report or one without extracted text is reported, not raised.
        """
        outcomes: list[IndexingOutcome] = []
        for report_id in report_ids:
            try:
                report = self._report_repo.find_by_id(report_id)
            except ReportNotFoundError:
                outcomes.append(IndexingOutcome(str(report_id), succeeded=False, error="not found"))
                continue
            if not report.extracted_text:
                outcomes.append(
                    IndexingOutcome(str(report_id), succeeded=False, error="no extracted text")
                )
                continue
            outcomes.append(
                self._sidecar.index(IndexingRequest.for_report(report, report.extracted_text))
            )

        Log.info(
            "Reindexed reports",
            requested=len(report_ids),
            succeeded=sum(1 for outcome in outcomes if outcome.succeeded),
        )
        return outcomes
