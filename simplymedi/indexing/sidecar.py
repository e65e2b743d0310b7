"""Fire-and-forget document indexing on a background thread.

The pipeline hands requests to a bounded queue and moves on. A single daemon
thread drains the queue; every outcome is kept in ``outcomes`` so failures
stay observable without ever reaching the pipeline.
"""

import queue
import threading
from collections import deque

from simplymedi.indexing.client import IndexingWebhookClient
from simplymedi.indexing.models import IndexingOutcome, IndexingRequest
from simplymedi.logging.logger import Log

_STOP = object()


class IndexingSidecar:
    def __init__(
        self,
        client: IndexingWebhookClient | None,
        queue_size: int = 100,
        history_size: int = 100,
    ) -> None:
        self._client = client
        self._queue: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._thread: threading.Thread | None = None
        self.outcomes: deque[IndexingOutcome] = deque(maxlen=history_size)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def submit(self, request: IndexingRequest) -> bool:
        """Queue ``request`` without blocking. Returns False if it was dropped."""
        if self._client is None:
            Log.debug(
                "Indexing workflow not configured, skipping", document_ref=request.document_ref
            )
            return False
        try:
            self._queue.put_nowait(request)
        except queue.Full:
            Log.warning("Indexing queue full, dropping document", document_ref=request.document_ref)
            return False
        return True

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="indexing-sidecar", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def run_once(self, timeout: float | None = None) -> IndexingOutcome | None:
        """Process one queued request; returns None if the queue stayed empty."""
        try:
            item = self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait()
        except queue.Empty:
            return None
        if not isinstance(item, IndexingRequest):
            return None
        return self.index(item)

    def index(self, request: IndexingRequest) -> IndexingOutcome:
        """Send one document to the indexing workflow. Never raises."""
        if self._client is None:
            outcome = IndexingOutcome(request.document_ref, succeeded=False, error="not configured")
            self.outcomes.append(outcome)
            return outcome
        try:
            self._client.submit(request.to_payload())
        except Exception as exc:
            Log.warning(
                "Document indexing failed",
                document_ref=request.document_ref,
                error=str(exc),
            )
            outcome = IndexingOutcome(request.document_ref, succeeded=False, error=str(exc))
        else:
            Log.info("Document indexed", document_ref=request.document_ref)
            outcome = IndexingOutcome(request.document_ref, succeeded=True)
        self.outcomes.append(outcome)
        return outcome

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            if isinstance(item, IndexingRequest):
                self.index(item)
