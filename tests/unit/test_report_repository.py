from datetime import datetime
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from simplymedi.database.models import ReportRecord
from simplymedi.database.repositories.report_repository import ReportRepository
from simplymedi.processor.exceptions import InvalidStatusTransitionError, ReportNotFoundError
from simplymedi.processor.status import ProcessingStatus

REPO_MODULE = "simplymedi.database.repositories.report_repository"


def _make_row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": 1,
        "user_id": 10,
        "file_name": "1700000000000-abcd1234-cbc.pdf",
        "original_file_name": "cbc.pdf",
        "storage_key": "reports/1700000000000-abcd1234-cbc.pdf",
        "storage_url": "/uploads/reports/1700000000000-abcd1234-cbc.pdf",
        "is_local": True,
        "file_type": "pdf",
        "mime_type": "application/pdf",
        "file_size_bytes": 2048,
        "report_type": "blood_test",
        "language": "english",
        "processing_status": "uploaded",
        "processing_error": None,
        "extracted_text": None,
        "extraction_confidence": None,
        "metadata": None,
        "created_at": datetime(2024, 1, 1),
        "updated_at": datetime(2024, 1, 1),
    }
    row.update(overrides)
    return row


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestCreate:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_inserts_uploaded_report(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        result = ReportRepository().create(
            user_id=10,
            file_name="1700000000000-abcd1234-cbc.pdf",
            original_file_name="cbc.pdf",
            storage_key="reports/1700000000000-abcd1234-cbc.pdf",
            storage_url="/uploads/reports/1700000000000-abcd1234-cbc.pdf",
            is_local=True,
            file_type="pdf",
            mime_type="application/pdf",
            file_size_bytes=2048,
            report_type="blood_test",
            language="english",
        )

        assert isinstance(result, ReportRecord)
        assert result.processing_status == "uploaded"
        params = mock_cursor.execute.call_args[0][1]
        assert "uploaded" in params
        mock_conn.commit.assert_called_once()

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_when_no_row_returned(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(RuntimeError):
            ReportRepository().create(
                user_id=10,
                file_name="f",
                original_file_name="f.txt",
                storage_key="reports/f",
                storage_url="/uploads/reports/f",
                is_local=True,
                file_type="txt",
                mime_type="text/plain",
                file_size_bytes=1,
                report_type="other",
                language="english",
            )


class TestFindById:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_returns_record_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row(
            extraction_confidence=Decimal("87.50"),
            metadata={"profile": {"age": 70}},
        )

        result = ReportRepository().find_by_id(1)

        assert result.id == 1
        assert result.file_type == "pdf"
        assert result.extraction_confidence == 87.5
        assert result.metadata == {"profile": {"age": 70}}

    @patch(f"{REPO_MODULE}.get_connection")
    def test_null_metadata_becomes_empty_dict(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        assert ReportRepository().find_by_id(1).metadata == {}

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_report_not_found_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(ReportNotFoundError, match="Report 999 not found"):
            ReportRepository().find_by_id(999)


class TestTransition:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_returns_true_when_row_updated(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        moved = ReportRepository().transition(
            1, {ProcessingStatus.UPLOADED}, ProcessingStatus.PROCESSING
        )

        assert moved is True
        params = mock_cursor.execute.call_args[0][1]
        assert params == ("processing", None, 1, ["uploaded"])

    @patch(f"{REPO_MODULE}.get_connection")
    def test_returns_false_when_status_did_not_match(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        moved = ReportRepository().transition(
            1, {ProcessingStatus.PROCESSING}, ProcessingStatus.COMPLETED
        )

        assert moved is False

    @patch(f"{REPO_MODULE}.get_connection")
    def test_writes_processing_error(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        ReportRepository().transition(
            1, {ProcessingStatus.PROCESSING}, ProcessingStatus.FAILED, error="boom"
        )

        params = mock_cursor.execute.call_args[0][1]
        assert params[:2] == ("failed", "boom")

    @pytest.mark.parametrize(
        ("from_statuses", "to_status"),
        [
            ({ProcessingStatus.UPLOADED}, ProcessingStatus.COMPLETED),
            ({ProcessingStatus.PROCESSING, ProcessingStatus.FAILED}, ProcessingStatus.COMPLETED),
            ({ProcessingStatus.COMPLETED}, ProcessingStatus.FAILED),
            ({ProcessingStatus.PROCESSING}, ProcessingStatus.UPLOADED),
        ],
    )
    @patch(f"{REPO_MODULE}.get_connection")
    def test_rejects_transition_outside_lifecycle(
        self,
        mock_get_conn: MagicMock,
        from_statuses: set[ProcessingStatus],
        to_status: ProcessingStatus,
    ) -> None:
        with pytest.raises(InvalidStatusTransitionError):
            ReportRepository().transition(1, from_statuses, to_status)

        mock_get_conn.assert_not_called()

    @patch(f"{REPO_MODULE}.get_connection")
    def test_reprocess_from_terminal_statuses_is_allowed(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        moved = ReportRepository().transition(
            1, [ProcessingStatus.COMPLETED, ProcessingStatus.FAILED], ProcessingStatus.PROCESSING
        )

        assert moved is True
        assert mock_cursor.execute.call_args[0][1][3] == ["completed", "failed"]


class TestClaimNextUploaded:
    def test_returns_none_when_queue_empty(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = None

        assert ReportRepository().claim_next_uploaded(mock_conn) is None
        mock_conn.execute.assert_not_called()
        mock_conn.commit.assert_called_once()

    def test_moves_claimed_report_to_processing(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = {"id": 7}

        assert ReportRepository().claim_next_uploaded(mock_conn) == 7
        assert mock_conn.execute.call_args[0][1] == ("processing", 7)


class TestUpdateExtraction:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_persists_text_and_confidence(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        ReportRepository().update_extraction(1, "text", 91.0)

        assert mock_cursor.execute.call_args[0][1] == ("text", 91.0, 1)

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_when_report_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(ReportNotFoundError):
            ReportRepository().update_extraction(5, "text", None)


class TestMergeMetadata:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_when_report_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(ReportNotFoundError):
            ReportRepository().merge_metadata(5, {"extraction": {}})
