from collections.abc import Iterable
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from simplymedi.database.connection import get_connection
from simplymedi.database.models import ReportRecord
from simplymedi.processor.exceptions import ReportNotFoundError
from simplymedi.processor.status import ProcessingStatus, check_transition

_REPORT_COLUMNS = """
    id, user_id, file_name, original_file_name, storage_key, storage_url, is_local,
    file_type, mime_type, file_size_bytes, report_type, language, processing_status,
    processing_error, extracted_text, extraction_confidence, metadata,
    created_at, updated_at
"""


def _row_to_record(row: dict[str, Any]) -> ReportRecord:
    confidence = row["extraction_confidence"]
    return ReportRecord(
        id=row["id"],
        user_id=row["user_id"],
        file_name=row["file_name"],
        original_file_name=row["original_file_name"],
        storage_key=row["storage_key"],
        storage_url=row["storage_url"],
        is_local=row["is_local"],
        file_type=row["file_type"],
        mime_type=row["mime_type"],
        file_size_bytes=row["file_size_bytes"],
        report_type=row["report_type"],
        language=row["language"],
        processing_status=row["processing_status"],
        processing_error=row["processing_error"],
        extracted_text=row["extracted_text"],
        extraction_confidence=float(confidence) if confidence is not None else None,
        metadata=row["metadata"] or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ReportRepository:
    """Database operations for the reports table.

    Status changes go through :meth:`transition`, a single conditional UPDATE, so
    concurrent runners cannot both move the same report out of a given status.
    """

    def create(
        self,
        *,
        user_id: int,
        file_name: str,
        original_file_name: str,
        storage_key: str,
        storage_url: str,
        is_local: bool,
        file_type: str,
        mime_type: str,
        file_size_bytes: int,
        report_type: str,
        language: str,
        metadata: dict[str, Any] | None = None,
    ) -> ReportRecord:
        """Insert a new report in the ``uploaded`` status and return it."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO reports (
                        user_id, file_name, original_file_name, storage_key,
                        storage_url, is_local, file_type, mime_type, file_size_bytes,
                        report_type, language, processing_status, metadata
                    )
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_REPORT_COLUMNS}
                    """,
                    (
                        user_id,
                        file_name,
                        original_file_name,
                        storage_key,
                        storage_url,
                        is_local,
                        file_type,
                        mime_type,
                        file_size_bytes,
                        report_type,
                        language,
                        ProcessingStatus.UPLOADED.value,
                        Jsonb(metadata or {}),
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError("INSERT INTO reports returned no row")
        return _row_to_record(row)

    def find_by_id(self, report_id: int) -> ReportRecord:
        """Find a report by ID.

        Raises:
            ReportNotFoundError: if no report with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_REPORT_COLUMNS} FROM reports WHERE id = %s",
                    (report_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise ReportNotFoundError(f"Report {report_id} not found")
        return _row_to_record(row)

    def transition(
        self,
        report_id: int,
        from_statuses: Iterable[ProcessingStatus],
        to_status: ProcessingStatus,
        error: str | None = None,
    ) -> bool:
        """Move a report to ``to_status`` if it is currently in one of ``from_statuses``.

        ``processing_error`` is overwritten with ``error`` (cleared when ``None``).

        Returns:
            True if the row was updated, False if its status did not match.

        Raises:
            InvalidStatusTransitionError: if any source status may not move to
                ``to_status``. Nothing is written.
        """
        allowed = [status.value for status in check_transition(from_statuses, to_status)]
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE reports
                    SET processing_status = %s, processing_error = %s, updated_at = NOW()
                    WHERE id = %s AND processing_status = ANY(%s)
                    """,
                    (to_status.value, error, report_id, allowed),
                )
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def claim_next_uploaded(self, conn: psycopg.Connection[Any]) -> int | None:
        """Claim the oldest ``uploaded`` report using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id
                FROM reports
                WHERE processing_status = %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (ProcessingStatus.UPLOADED.value,),
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE reports
            SET processing_status = %s, processing_error = NULL, updated_at = NOW()
            WHERE id = %s
            """,
            (ProcessingStatus.PROCESSING.value, row["id"]),
        )
        conn.commit()
        return int(row["id"])

    def update_extraction(
        self,
        report_id: int,
        extracted_text: str,
        extraction_confidence: float | None,
    ) -> None:
        """Persist extracted text and recognition confidence.

        Raises:
            ReportNotFoundError: if no report with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE reports
                    SET extracted_text = %s, extraction_confidence = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (extracted_text, extraction_confidence, report_id),
                )
                if cur.rowcount == 0:
                    raise ReportNotFoundError(f"Report {report_id} not found")
            conn.commit()

    def merge_metadata(self, report_id: int, metadata: dict[str, Any]) -> None:
        """Shallow-merge keys into the report's metadata map."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE reports
                    SET metadata = COALESCE(metadata, '{}'::jsonb) || %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (Jsonb(metadata), report_id),
                )
                if cur.rowcount == 0:
                    raise ReportNotFoundError(f"Report {report_id} not found")
            conn.commit()
