from dataclasses import dataclass
from pathlib import Path

from simplymedi.api.chat import ChatService
from simplymedi.api.knowledge import KnowledgeService
from simplymedi.api.reports import ReportService
from simplymedi.capabilities import CapabilityOrchestratorFactory
from simplymedi.capabilities.orchestrator import CapabilityOrchestrator
from simplymedi.config.settings import Settings
from simplymedi.database.connection import close_pool, init_pool
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.database.repositories.simplified_report_repository import (
    SimplifiedReportRepository,
)
from simplymedi.indexing.client import IndexingWebhookClient
from simplymedi.indexing.sidecar import IndexingSidecar
from simplymedi.logging.logger import Log
from simplymedi.processor.processor import build_processor
from simplymedi.retrieval.client import RetrievalWebhookClient
from simplymedi.retrieval.router import RetrievalQueryRouter
from simplymedi.storage.base import BaseStorage
from simplymedi.storage.local_storage import LocalStorage
from simplymedi.worker.dispatcher import JobDispatcher
from simplymedi.worker.job_runner import JobRunner
from simplymedi.worker.worker import Worker


@dataclass(frozen=True)
class Services:
    """Request-facing façades sharing the worker's collaborators."""

    reports: ReportService
    chat: ChatService
    knowledge: KnowledgeService


def build_sidecar(settings: Settings) -> IndexingSidecar:
    client = None
    if settings.rag_document_webhook_url:
        client = IndexingWebhookClient(
            url=settings.rag_document_webhook_url,
            timeout_seconds=settings.indexing_timeout_seconds,
        )
    else:
        Log.info("Indexing webhook not configured, documents will not be indexed")
    return IndexingSidecar(client, queue_size=settings.indexing_queue_size)


def build_router(settings: Settings, orchestrator: CapabilityOrchestrator) -> RetrievalQueryRouter:
    client = None
    if settings.rag_chat_webhook_url:
        client = RetrievalWebhookClient(
            url=settings.rag_chat_webhook_url,
            timeout_seconds=settings.retrieval_timeout_seconds,
        )
    else:
        Log.info("Retrieval webhook not configured, chat uses the capability cascade only")
    return RetrievalQueryRouter(
        orchestrator=orchestrator,
        retrieval_client=client,
        indexing_configured=bool(settings.rag_document_webhook_url),
    )


def build_services(
    settings: Settings,
    storage: BaseStorage,
    router: RetrievalQueryRouter,
    sidecar: IndexingSidecar,
    dispatcher: JobDispatcher,
    report_repo: ReportRepository,
    simplified_repo: SimplifiedReportRepository,
) -> Services:
    return Services(
        reports=ReportService(
            storage,
            report_repo,
            simplified_repo,
            dispatcher,
            settings.max_file_size_bytes,
            indexing_sidecar=sidecar,
        ),
        chat=ChatService(router, default_language=settings.default_language),
        knowledge=KnowledgeService(
            router, report_repo, simplified_repo, default_language=settings.default_language
        ),
    )


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    storage = LocalStorage(Path(settings.storage_root))
    orchestrator = CapabilityOrchestratorFactory.create(settings)
    sidecar = build_sidecar(settings)
    sidecar.start()
    router = build_router(settings, orchestrator)
    Log.info("Query router ready", **router.health())
    report_repo = ReportRepository()
    simplified_repo = SimplifiedReportRepository()
    dispatcher: JobDispatcher | None = None
    try:
        processor = build_processor(
            settings,
            storage,
            orchestrator,
            sidecar,
            report_repo=report_repo,
            simplified_repo=simplified_repo,
        )
        job_runner = JobRunner(processor, report_repo)
        dispatcher = JobDispatcher(job_runner, settings.max_concurrent_jobs)
        build_services(
            settings, storage, router, sidecar, dispatcher, report_repo, simplified_repo
        )
        worker = Worker(report_repo, dispatcher, settings)
        worker.run()
    finally:
        if dispatcher is not None:
            dispatcher.shutdown(wait=True)
        sidecar.stop()
        orchestrator.close()
        close_pool()


if __name__ == "__main__":
    main()
