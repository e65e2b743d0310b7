import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from simplymedi.capabilities.models import HealthRecommendations, MedicalEntity, RiskAnalysis
from simplymedi.database.models import ReportRecord
from simplymedi.extraction.models import ExtractionResult
from simplymedi.fields.models import StructuredFields
from simplymedi.processor.models import DerivedArtifact


@dataclass(slots=True)
class PipelineContext:
    report_id: int
    report: ReportRecord | None = None
    extraction: ExtractionResult | None = None
    fields: StructuredFields = field(default_factory=StructuredFields)
    simplified_text: str = ""
    medical_terms: list[MedicalEntity] = field(default_factory=list)
    risk: RiskAnalysis | None = None
    recommendations: HealthRecommendations | None = None
    summary: str = ""
    providers: dict[str, dict[str, Any]] = field(default_factory=dict)
    artifact: DerivedArtifact | None = None
    started_at: float = field(default_factory=time.monotonic)
    error_message: str = ""

    @property
    def text(self) -> str:
        if self.extraction is None:
            raise ValueError("PipelineContext.extraction must be set before reading text")
        return self.extraction.text

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    def require_report(self) -> ReportRecord:
        if self.report is None:
            raise ValueError("PipelineContext.report must be set before this step")
        return self.report


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
