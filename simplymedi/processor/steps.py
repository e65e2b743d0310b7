from abc import abstractmethod
from typing import Any, ClassVar

from simplymedi.capabilities.models import (
    Capability,
    CapabilityResult,
    EntitiesInput,
    RecommendInput,
    RiskInput,
    SimplifyInput,
    SummarizeInput,
)
from simplymedi.capabilities.orchestrator import CapabilityOrchestrator
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.database.repositories.simplified_report_repository import (
    SimplifiedReportRepository,
)
from simplymedi.extraction.engine import ExtractionEngine
from simplymedi.fields.extractor import extract_fields
from simplymedi.indexing.models import IndexingRequest
from simplymedi.indexing.sidecar import IndexingSidecar
from simplymedi.logging.logger import Log
from simplymedi.processor.exceptions import InvalidStatusTransitionError
from simplymedi.processor.models import DerivedArtifact
from simplymedi.processor.pipeline import PipelineContext, PipelineStep
from simplymedi.processor.status import ProcessingStatus, sources_for


class MarkFailedStep(PipelineStep):
    """Record the failure and drop any artifact written before it happened."""

    def __init__(
        self,
        report_repo: ReportRepository,
        simplified_repo: SimplifiedReportRepository,
    ) -> None:
        self._report_repo = report_repo
        self._simplified_repo = simplified_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._simplified_repo.delete_by_report_id(context.report_id)
        moved = self._report_repo.transition(
            context.report_id,
            sources_for(ProcessingStatus.FAILED),
            ProcessingStatus.FAILED,
            error=context.error_message,
        )
        if moved:
            Log.error(f"Report {context.report_id} marked as failed: {context.error_message}")
        else:
            Log.warning(
                f"Report {context.report_id} was no longer processing; failure not recorded"
            )
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, report_repo: ReportRepository) -> None:
        self._report_repo = report_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        moved = self._report_repo.transition(
            context.report_id,
            sources_for(ProcessingStatus.COMPLETED),
            ProcessingStatus.COMPLETED,
        )
        if not moved:
            raise InvalidStatusTransitionError(
                f"Report {context.report_id} left 'processing' before completion"
            )
        Log.info(f"Report {context.report_id} completed")
        return context


class LoadReportStep(PipelineStep):
    def __init__(self, report_repo: ReportRepository) -> None:
        self._report_repo = report_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.report = self._report_repo.find_by_id(context.report_id)
        Log.info(
            f"Loaded report {context.report_id}",
            file_type=context.report.file_type,
            language=context.report.language,
        )
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, engine: ExtractionEngine) -> None:
        self._engine = engine

    def run(self, context: PipelineContext) -> PipelineContext:
        report = context.require_report()
        context.extraction = self._engine.extract(
            report.storage_key,
            report.file_type,
            report.language,
        )
        Log.info(f"Extracted {len(context.extraction.text)} chars from report {context.report_id}")
        return context


class PersistExtractionStep(PipelineStep):
    def __init__(self, report_repo: ReportRepository, engine: ExtractionEngine) -> None:
        self._report_repo = report_repo
        self._engine = engine

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.extraction is None:
            raise ValueError("PipelineContext.extraction must be set before persist")
        extraction = context.extraction
        self._report_repo.update_extraction(
            context.report_id,
            extraction.text,
            extraction.confidence,
        )
        self._report_repo.merge_metadata(
            context.report_id,
            {
                "extraction": {
                    "duration_ms": extraction.duration_ms,
                    "word_count": extraction.word_count,
                    "line_count": extraction.line_count,
                    "page_count": extraction.page_count,
                    "low_confidence": not self._engine.meets_confidence(extraction.confidence),
                }
            },
        )
        return context


class SubmitIndexingStep(PipelineStep):
    """Hand the extracted text to the indexing sidecar without waiting."""

    def __init__(self, sidecar: IndexingSidecar) -> None:
        self._sidecar = sidecar

    def run(self, context: PipelineContext) -> PipelineContext:
        report = context.require_report()
        self._sidecar.submit(IndexingRequest.for_report(report, context.text))
        return context


class ExtractFieldsStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.fields = extract_fields(context.text)
        Log.info(
            f"Extracted structured fields for report {context.report_id}",
            findings=len(context.fields.findings),
        )
        return context


class CapabilityStep(PipelineStep):
    """Run one capability; an exception from the orchestrator falls back in place.

    The outcome is always a CapabilityResult, so a misbehaving integration can
    never keep later steps from running.
    """

    capability: ClassVar[Capability]

    def __init__(self, orchestrator: CapabilityOrchestrator) -> None:
        self._orchestrator = orchestrator

    def run(self, context: PipelineContext) -> PipelineContext:
        payload = self.build_input(context)
        try:
            result = self._orchestrator.invoke(self.capability, payload)
        except Exception as exc:
            Log.error(
                f"{self.capability.value} failed outside its cascade for report "
                f"{context.report_id}: {exc}"
            )
            result = self._orchestrator.fallback(self.capability, payload, reason=str(exc))
        context.providers[self.capability.value] = result.provenance()
        self.apply(context, result)
        return context

    @abstractmethod
    def build_input(self, context: PipelineContext) -> Any:
        """Build the capability input from what earlier steps produced."""

    @abstractmethod
    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        """Store the capability value on the context."""


class SimplifyStep(CapabilityStep):
    capability = Capability.SIMPLIFY

    def build_input(self, context: PipelineContext) -> SimplifyInput:
        return SimplifyInput(text=context.text, language=context.require_report().language)

    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        context.simplified_text = result.value


class ExtractEntitiesStep(CapabilityStep):
    capability = Capability.EXTRACT_ENTITIES

    def build_input(self, context: PipelineContext) -> EntitiesInput:
        return EntitiesInput(text=context.text)

    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        context.medical_terms = list(result.value or [])


class AnalyzeRiskStep(CapabilityStep):
    capability = Capability.ANALYZE_RISK

    def build_input(self, context: PipelineContext) -> RiskInput:
        return RiskInput(text=context.text, fields=context.fields)

    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        context.risk = result.value


class RecommendStep(CapabilityStep):
    capability = Capability.RECOMMEND

    def build_input(self, context: PipelineContext) -> RecommendInput:
        profile = context.require_report().metadata.get("profile") or {}
        return RecommendInput(
            fields=context.fields,
            profile=profile if isinstance(profile, dict) else {},
            risk_level=context.risk.risk_level.value if context.risk else None,
        )

    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        context.recommendations = result.value


class SummarizeStep(CapabilityStep):
    capability = Capability.SUMMARIZE

    def build_input(self, context: PipelineContext) -> SummarizeInput:
        return SummarizeInput(
            original_text=context.text,
            simplified_text=context.simplified_text,
            medical_terms=context.medical_terms,
        )

    def apply(self, context: PipelineContext, result: CapabilityResult) -> None:
        context.summary = result.value


class PersistArtifactStep(PipelineStep):
    def __init__(self, simplified_repo: SimplifiedReportRepository) -> None:
        self._simplified_repo = simplified_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        report = context.require_report()
        if context.risk is None or context.recommendations is None:
            raise ValueError("Risk and recommendations must be set before persisting the artifact")
        recommendations = context.recommendations.to_dict()
        context.artifact = DerivedArtifact(
            report_id=report.id,
            original_text=context.text,
            simplified_text=context.simplified_text,
            language=report.language,
            risk_level=context.risk.risk_level.value,
            risk_explanation=context.risk.explanation,
            summary=context.summary,
            medical_terms=[entity.to_dict() for entity in context.medical_terms],
            health_recommendations=recommendations,
            key_findings=context.fields.key_findings,
            follow_up_actions=recommendations["followUpActions"],
            providers=dict(context.providers),
            confidence=context.extraction.confidence if context.extraction else None,
            processing_time_ms=context.elapsed_ms(),
            metadata={"structured_fields": context.fields.to_dict()},
        )
        artifact_id = self._simplified_repo.create(context.artifact)
        Log.info(
            f"Persisted artifact {artifact_id} for report {report.id}",
            risk_level=context.artifact.risk_level,
        )
        return context
