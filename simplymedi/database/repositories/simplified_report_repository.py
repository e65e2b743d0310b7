from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from simplymedi.database.connection import get_connection
from simplymedi.database.models import SimplifiedReportRecord
from simplymedi.processor.models import DerivedArtifact


class SimplifiedReportRepository:
    """Database operations for the simplified_reports table."""

    def create(self, artifact: DerivedArtifact) -> int:
        """Insert the derived artifact for a report and return its row ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO simplified_reports (
                        report_id, original_text, simplified_text, language,
                        medical_terms, health_recommendations, risk_level,
                        risk_explanation, summary, key_findings, follow_up_actions,
                        providers, confidence, processing_time_ms, metadata
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING id
                    """,
                    (
                        artifact.report_id,
                        artifact.original_text,
                        artifact.simplified_text,
                        artifact.language,
                        Jsonb(artifact.medical_terms),
                        Jsonb(artifact.health_recommendations),
                        artifact.risk_level,
                        artifact.risk_explanation,
                        artifact.summary,
                        Jsonb(artifact.key_findings),
                        Jsonb(artifact.follow_up_actions),
                        Jsonb(artifact.providers),
                        artifact.confidence,
                        artifact.processing_time_ms,
                        Jsonb(artifact.metadata),
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError("INSERT INTO simplified_reports returned no row")
        return int(row[0])

    def find_by_report_id(self, report_id: int) -> SimplifiedReportRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, report_id, original_text, simplified_text, language,
                           medical_terms, health_recommendations, risk_level,
                           risk_explanation, summary, key_findings, follow_up_actions,
                           providers, confidence, processing_time_ms, metadata, created_at
                    FROM simplified_reports
                    WHERE report_id = %s
                    """,
                    (report_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return self._row_to_record(row)

    def delete_by_report_id(self, report_id: int) -> bool:
        """Delete the artifact for a report. Returns True if one existed."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM simplified_reports WHERE report_id = %s",
                    (report_id,),
                )
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    @staticmethod
    def _row_to_record(row: dict[str, Any]) -> SimplifiedReportRecord:
        confidence = row["confidence"]
        return SimplifiedReportRecord(
            id=row["id"],
            report_id=row["report_id"],
            original_text=row["original_text"],
            simplified_text=row["simplified_text"],
            language=row["language"],
            risk_level=row["risk_level"],
            summary=row["summary"],
            medical_terms=row["medical_terms"] or [],
            health_recommendations=row["health_recommendations"] or {},
            risk_explanation=row["risk_explanation"],
            key_findings=row["key_findings"] or [],
            follow_up_actions=row["follow_up_actions"] or [],
            providers=row["providers"] or {},
            confidence=float(confidence) if confidence is not None else None,
            processing_time_ms=row["processing_time_ms"],
            metadata=row["metadata"] or {},
            created_at=row["created_at"],
        )
