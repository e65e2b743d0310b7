from dataclasses import dataclass, field
from typing import Any


@dataclass
class DerivedArtifact:
    """AI-derived output for one completed report.

    ``providers`` maps each capability name to the provider that answered and
    whether a fallback tier was used, so degraded answers stay distinguishable.
    """

    report_id: int
    original_text: str
    simplified_text: str
    language: str
    risk_level: str
    summary: str
    medical_terms: list[dict[str, Any]] = field(default_factory=list)
    health_recommendations: dict[str, list[str]] = field(default_factory=dict)
    risk_explanation: str = ""
    key_findings: list[str] = field(default_factory=list)
    follow_up_actions: list[str] = field(default_factory=list)
    providers: dict[str, dict[str, Any]] = field(default_factory=dict)
    confidence: float | None = None
    processing_time_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
