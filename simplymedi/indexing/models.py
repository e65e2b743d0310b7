from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from simplymedi.database.models import ReportRecord

DOCUMENT_CATEGORY = "medical_report"


@dataclass(frozen=True)
class IndexingRequest:
    document_ref: str
    file_name: str
    file_type: str
    content: str
    uploader_id: str
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def for_report(cls, report: ReportRecord, content: str) -> "IndexingRequest":
        return cls(
            document_ref=str(report.id),
            file_name=report.original_file_name or report.file_name,
            file_type=report.file_type,
            content=content,
            uploader_id=str(report.user_id),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "document": {
                "content": self.content,
                "fileName": self.file_name,
                "type": self.file_type,
                "metadata": {
                    "uploaderId": self.uploader_id,
                    "documentRef": self.document_ref,
                    "uploadedAt": self.uploaded_at.isoformat(),
                    "category": DOCUMENT_CATEGORY,
                },
            }
        }


@dataclass(frozen=True)
class IndexingOutcome:
    document_ref: str
    succeeded: bool
    error: str | None = None
