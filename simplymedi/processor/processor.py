from simplymedi.capabilities.orchestrator import CapabilityOrchestrator
from simplymedi.config.settings import Settings
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.database.repositories.simplified_report_repository import (
    SimplifiedReportRepository,
)
from simplymedi.extraction.factory import ExtractionEngineFactory
from simplymedi.indexing.sidecar import IndexingSidecar
from simplymedi.logging.logger import Log
from simplymedi.processor.pipeline import PipelineContext, PipelineStep
from simplymedi.processor.steps import (
    AnalyzeRiskStep,
    ExtractEntitiesStep,
    ExtractFieldsStep,
    ExtractTextStep,
    LoadReportStep,
    MarkCompletedStep,
    MarkFailedStep,
    PersistArtifactStep,
    PersistExtractionStep,
    RecommendStep,
    SimplifyStep,
    SubmitIndexingStep,
    SummarizeStep,
)
from simplymedi.storage.base import BaseStorage


class Processor:
    """Runs the report pipeline for a report already in ``processing``.

    Pipeline: load -> extract -> persist extraction -> queue indexing -> fields
    -> simplify -> entities -> risk -> recommend -> summarize -> persist
    artifact -> completed. Any exception marks the report failed and is re-raised.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, report_id: int) -> PipelineContext:
        Log.info(f"Processing report {report_id}")
        context = PipelineContext(report_id=report_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or exc.__class__.__name__
            try:
                self._failed_step.run(context)
            except Exception as mark_exc:
                Log.error(f"Could not mark report {report_id} as failed: {mark_exc}")
            raise
        return context


def build_processor(
    settings: Settings,
    storage: BaseStorage,
    orchestrator: CapabilityOrchestrator,
    sidecar: IndexingSidecar,
    report_repo: ReportRepository | None = None,
    simplified_repo: SimplifiedReportRepository | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    report_repo = report_repo or ReportRepository()
    simplified_repo = simplified_repo or SimplifiedReportRepository()
    engine = ExtractionEngineFactory.create(settings, storage)
    steps: list[PipelineStep] = [
        LoadReportStep(report_repo),
        ExtractTextStep(engine),
        PersistExtractionStep(report_repo, engine),
        SubmitIndexingStep(sidecar),
        ExtractFieldsStep(),
        SimplifyStep(orchestrator),
        ExtractEntitiesStep(orchestrator),
        AnalyzeRiskStep(orchestrator),
        RecommendStep(orchestrator),
        SummarizeStep(orchestrator),
        PersistArtifactStep(simplified_repo),
        MarkCompletedStep(report_repo),
    ]
    return Processor(steps=steps, failed_step=MarkFailedStep(report_repo, simplified_repo))
