"""Pydantic schemas for the report and chat façades."""

from datetime import datetime
from pathlib import PurePath
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ReportType = Literal["blood_test", "urine_test", "xray", "mri", "ct_scan", "ecg", "other"]


class UploadRequest(BaseModel):
    """Schema for a report upload. ``file_type`` defaults to the file extension."""

    user_id: int = Field(gt=0)
    original_file_name: str = Field(min_length=1, max_length=255)
    mime_type: str = Field(min_length=1, max_length=128)
    content: bytes = Field(min_length=1)
    file_type: str = Field("", max_length=32)
    report_type: ReportType = "other"
    language: str = Field("english", min_length=2, max_length=32)
    profile: dict[str, Any] = Field(default_factory=dict)

    @field_validator("language")
    @classmethod
    def _lowercase_language(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def _default_file_type(self) -> "UploadRequest":
        if not self.file_type.strip():
            self.file_type = PurePath(self.original_file_name).suffix.lstrip(".").lower()
        if not self.file_type:
            raise ValueError("file_type is required when the file name has no extension")
        return self


class ReportResponse(BaseModel):
    """Response schema for an uploaded report."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    original_file_name: str
    file_type: str
    file_size_bytes: int
    report_type: str
    language: str
    processing_status: str
    created_at: datetime | None = None


class ReportStatusResponse(BaseModel):
    """Processing status plus the artifact summary once one exists."""

    report_id: int
    processing_status: str
    processing_error: str | None = None
    summary: str | None = None
    risk_level: str | None = None
    language: str | None = None
    artifact_created_at: datetime | None = None


class ChatHistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(max_length=4000)


class ChatRequest(BaseModel):
    """Schema for a chat message."""

    message: str = Field(min_length=1, max_length=1000)
    user_id: str = Field("anonymous-user", min_length=1)
    session_id: str | None = None
    document_ref: str | None = None
    language: str | None = Field(None, min_length=2, max_length=32)
    history: list[ChatHistoryTurn] = Field(default_factory=list, max_length=20)

    @field_validator("message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("message must not be blank")
        return stripped


class ChatReply(BaseModel):
    """Chat response envelope. Always returned, whichever tier answered."""

    id: str
    message: str
    source: str
    provider: str
    used_fallback: bool
    sources: list[Any] = Field(default_factory=list)
    confidence: float | None = None
    processing_time_ms: int
    timestamp: datetime


class KnowledgeSearchRequest(BaseModel):
    """Schema for a knowledge-base search."""

    query: str = Field(min_length=1, max_length=1000)
    user_id: str = Field("anonymous-user", min_length=1)
    session_id: str | None = None
    category: str = "general"
    audience: str = "patient"
    language: str | None = Field(None, min_length=2, max_length=32)


class KnowledgeSearchResponse(BaseModel):
    success: bool
    query: str
    results: list[dict[str, Any]] = Field(default_factory=list)
    total_results: int = 0
    error: str | None = None


class RecommendationRequest(BaseModel):
    """Optional context for report recommendations."""

    user_id: str = Field("anonymous-user", min_length=1)
    session_id: str | None = None
    symptoms: list[str] = Field(default_factory=list, max_length=20)
    profile: dict[str, Any] = Field(default_factory=dict)


class RecommendationResponse(BaseModel):
    report_id: int
    recommendations: dict[str, str]
    source: str
    provider: str
    used_fallback: bool
    sources: list[Any] = Field(default_factory=list)
    confidence: float | None = None
    related_documents: list[Any] = Field(default_factory=list)
