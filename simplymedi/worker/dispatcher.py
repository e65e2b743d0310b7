import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from simplymedi.logging.logger import Log
from simplymedi.worker.job_runner import JobRunner


class JobDispatcher:
    """Bounded thread pool that runs reports independently of the request that created them."""

    def __init__(self, job_runner: JobRunner, max_workers: int) -> None:
        self._job_runner = job_runner
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="report")
        self._lock = threading.Lock()
        self._in_flight: set[Future[bool]] = set()

    def dispatch(self, report_id: int) -> Future[bool]:
        """Claim an ``uploaded`` report and run it in the background."""
        return self._submit(self._job_runner.run, report_id)

    def dispatch_claimed(self, report_id: int) -> Future[bool]:
        """Run a report that has already been moved to ``processing``."""
        return self._submit(self._job_runner.run_claimed, report_id)

    def has_capacity(self) -> bool:
        with self._lock:
            return len(self._in_flight) < self._max_workers

    def shutdown(self, wait: bool = True) -> None:
        Log.info("Dispatcher shutting down", in_flight=len(self._in_flight))
        self._executor.shutdown(wait=wait)

    def _submit(self, target: Callable[[int], bool], report_id: int) -> Future[bool]:
        future = self._executor.submit(target, report_id)
        with self._lock:
            self._in_flight.add(future)
        future.add_done_callback(self._forget)
        Log.debug(f"Dispatched report {report_id}")
        return future

    def _forget(self, future: Future[bool]) -> None:
        with self._lock:
            self._in_flight.discard(future)
