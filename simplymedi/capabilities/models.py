from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from simplymedi.fields.models import StructuredFields


class Capability(str, Enum):
    """One named AI-backed operation."""

    SIMPLIFY = "simplify"
    EXTRACT_ENTITIES = "extract_entities"
    ANALYZE_RISK = "analyze_risk"
    RECOMMEND = "recommend"
    SUMMARIZE = "summarize"
    CHAT = "chat"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Inputs


@dataclass(frozen=True)
class SimplifyInput:
    text: str
    language: str = "english"


@dataclass(frozen=True)
class EntitiesInput:
    text: str


@dataclass(frozen=True)
class RiskInput:
    text: str
    fields: StructuredFields = field(default_factory=StructuredFields)


@dataclass(frozen=True)
class RecommendInput:
    fields: StructuredFields = field(default_factory=StructuredFields)
    profile: dict[str, Any] = field(default_factory=dict)
    risk_level: str | None = None


@dataclass(frozen=True)
class SummarizeInput:
    original_text: str
    simplified_text: str = ""
    medical_terms: list["MedicalEntity"] = field(default_factory=list)


@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str


@dataclass(frozen=True)
class ChatInput:
    message: str
    language: str = "english"
    history: list[ChatTurn] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)


# Outputs


@dataclass(frozen=True)
class MedicalEntity:
    text: str
    label: str
    confidence: float
    start: int | None = None
    end: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "text": self.text,
            "label": self.label,
            "confidence": self.confidence,
        }
        if self.start is not None:
            data["start"] = self.start
        if self.end is not None:
            data["end"] = self.end
        return data


@dataclass(frozen=True)
class RiskAnalysis:
    risk_level: RiskLevel
    explanation: str


@dataclass(frozen=True)
class HealthRecommendations:
    dietary: list[str] = field(default_factory=list)
    lifestyle: list[str] = field(default_factory=list)
    exercise: list[str] = field(default_factory=list)
    follow_up_actions: list[str] = field(default_factory=list)
    warning_signs_to_watch: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "dietary": list(self.dietary),
            "lifestyle": list(self.lifestyle),
            "exercise": list(self.exercise),
            "followUpActions": list(self.follow_up_actions),
            "warningSignsToWatch": list(self.warning_signs_to_watch),
        }

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())


# Envelope


@dataclass(frozen=True)
class ProviderAttempt:
    """A provider that was tried and did not produce a usable result."""

    provider: str
    error: str


@dataclass(frozen=True)
class CapabilityResult:
    """Value plus provenance for one orchestrated capability call.

    ``used_fallback`` is True when the answering provider was not the first
    in the chain, which always includes the deterministic last tier.
    """

    capability: Capability
    value: Any
    provider: str
    used_fallback: bool
    tier: int
    confidence: float | None = None
    failures: list[ProviderAttempt] = field(default_factory=list)

    def provenance(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "tier": self.tier,
            "used_fallback": self.used_fallback,
            "confidence": self.confidence,
            "failures": [attempt.provider for attempt in self.failures],
        }
