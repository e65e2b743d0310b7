from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.logging.logger import Log
from simplymedi.processor.processor import Processor
from simplymedi.processor.status import ProcessingStatus


class JobRunner:
    """Run one report to a terminal state; the outermost boundary for background work.

    There is no retry: a failed run leaves the report ``failed`` until someone
    explicitly reprocesses it.
    """

    def __init__(self, processor: Processor, report_repo: ReportRepository) -> None:
        self._processor = processor
        self._report_repo = report_repo

    def run(self, report_id: int) -> bool:
        """Claim an ``uploaded`` report and process it.

        Returns:
            True if the report completed, False if it failed or was not claimable.
        """
        claimed = self._report_repo.transition(
            report_id,
            {ProcessingStatus.UPLOADED},
            ProcessingStatus.PROCESSING,
        )
        if not claimed:
            Log.warning(f"Report {report_id} is not in 'uploaded', skipping")
            return False
        return self.run_claimed(report_id)

    def run_claimed(self, report_id: int) -> bool:
        """Process a report that is already in ``processing``."""
        Log.info(f"Running report {report_id}")
        try:
            self._processor.process(report_id)
        except Exception as exc:
            Log.error(f"Report {report_id} failed: {exc}")
            return False
        Log.info(f"Report {report_id} completed successfully")
        return True
