import time

from simplymedi.config.settings import Settings
from simplymedi.database.connection import get_connection
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.logging.logger import Log
from simplymedi.worker.dispatcher import JobDispatcher


class Worker:
    """Poll loop: sleep -> claim -> dispatch.

    Picks up reports left in ``uploaded``, e.g. ones created while the service
    was down.
    """

    def __init__(
        self,
        report_repo: ReportRepository,
        dispatcher: JobDispatcher,
        settings: Settings,
    ) -> None:
        self._report_repo = report_repo
        self._dispatcher = dispatcher
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after dispatching that many reports (for testing).
        """
        Log.info("Worker started, polling for uploaded reports")
        dispatched = 0
        try:
            while max_jobs is None or dispatched < max_jobs:
                if not self._dispatcher.has_capacity():
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                report_id = self._try_claim_report()
                if report_id is not None:
                    self._dispatcher.dispatch_claimed(report_id)
                    dispatched += 1
                else:
                    Log.debug("No reports available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _try_claim_report(self) -> int | None:
        """Attempt to claim the next uploaded report. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._report_repo.claim_next_uploaded(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
