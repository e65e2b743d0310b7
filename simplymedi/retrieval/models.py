from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from simplymedi.capabilities.models import ChatTurn
from simplymedi.fields.models import StructuredFields

DEFAULT_RETRIEVAL_CONFIDENCE = 0.8


class SourceTier(str, Enum):
    RETRIEVAL = "retrieval"
    CHAT = "chat"
    RECOMMEND = "recommend"


@dataclass(frozen=True)
class QueryContext:
    """Per-request chat context. Never persisted."""

    user_id: str
    session_id: str
    document_ref: str | None = None
    language: str = "english"
    history: list[ChatTurn] = field(default_factory=list)

    def to_payload(self, query: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": query,
            "sessionId": self.session_id,
            "userId": self.user_id,
            "language": self.language,
        }
        if self.document_ref:
            payload["documentRef"] = self.document_ref
        return payload


@dataclass(frozen=True)
class RetrievalResponse:
    """Answer text plus the citations the workflow attached to it."""

    text: str
    sources: list[Any] = field(default_factory=list)
    confidence: float = DEFAULT_RETRIEVAL_CONFIDENCE
    documents_referenced: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ChatAnswer:
    text: str
    source_tier: SourceTier
    provider: str
    used_fallback: bool = False
    sources: list[Any] = field(default_factory=list)
    confidence: float | None = None


@dataclass(frozen=True)
class KnowledgeSearchResult:
    """Outcome of a knowledge-base search. ``results`` is empty on failure."""

    success: bool
    query: str
    results: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def total_results(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class RecommendationAnswer:
    """Care recommendations for one report, grouped into numbered sections.

    ``full_response`` holds the raw workflow answer and is empty when the
    recommendation capability answered instead.
    """

    follow_up_care: str
    lifestyle_modifications: str
    monitoring: str
    urgent_care: str
    references: str
    full_response: str
    source_tier: SourceTier
    provider: str
    used_fallback: bool
    sources: list[Any] = field(default_factory=list)
    confidence: float | None = None
    related_documents: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "followUpCare": self.follow_up_care,
            "lifestyleModifications": self.lifestyle_modifications,
            "monitoring": self.monitoring,
            "urgentCare": self.urgent_care,
            "references": self.references,
            "fullResponse": self.full_response,
        }


@dataclass(frozen=True)
class RecommendationQuery:
    """What is known about one report when asking for care recommendations."""

    report_ref: str
    report_type: str = "medical_report"
    fields: StructuredFields = field(default_factory=StructuredFields)
    symptoms: list[str] = field(default_factory=list)
    profile: dict[str, Any] = field(default_factory=dict)
    risk_level: str | None = None

    def to_query(self) -> str:
        age_group = self.profile.get("ageGroup") or "adult"
        gender = self.profile.get("gender") or self.fields.gender or "not specified"
        return (
            f"Based on this {self.report_type} with findings: "
            f"{', '.join(self.fields.key_findings)} and symptoms: {', '.join(self.symptoms)}, "
            "provide comprehensive medical recommendations including:\n"
            "1. Follow-up care suggestions\n"
            "2. Lifestyle modifications\n"
            "3. Monitoring recommendations\n"
            "4. When to seek immediate care\n"
            "5. Similar case references from medical literature\n"
            f"Patient context: Age group {age_group}, Gender: {gender}"
        )
