from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class ReportRecord:
    """Represents a row from the reports table (one document job)."""

    id: int
    user_id: int
    file_name: str
    storage_key: str
    file_type: str
    mime_type: str
    file_size_bytes: int
    processing_status: str
    original_file_name: str = ""
    storage_url: str = ""
    is_local: bool = True
    report_type: str = "other"
    language: str = "english"
    processing_error: str | None = None
    extracted_text: str | None = None
    extraction_confidence: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class SimplifiedReportRecord:
    """Represents a row from the simplified_reports table (the derived artifact)."""

    id: int
    report_id: int
    original_text: str
    simplified_text: str
    language: str
    risk_level: str
    summary: str
    medical_terms: list[dict[str, Any]] = field(default_factory=list)
    health_recommendations: dict[str, Any] = field(default_factory=dict)
    risk_explanation: str = ""
    key_findings: list[str] = field(default_factory=list)
    follow_up_actions: list[str] = field(default_factory=list)
    providers: dict[str, Any] = field(default_factory=dict)
    confidence: float | None = None
    processing_time_ms: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
