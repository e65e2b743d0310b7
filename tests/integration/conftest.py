import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from simplymedi.config.settings import Settings
from simplymedi.database.connection import close_pool, get_connection, init_pool
from simplymedi.database.models import ReportRecord
from simplymedi.database.repositories.report_repository import ReportRepository

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "simplymedi" / "database" / "schema.sql"

_PROVIDER_OVERRIDES = {
    "gemini_api_key": "",
    "perplexity_api_key": "",
    "openai_api_key": "",
    "openrouter_api_key": "",
    "groq_api_key": "",
    "huggingface_api_key": "",
    "rag_chat_webhook_url": "",
    "rag_document_webhook_url": "",
}


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "simplymedi_test")
    return Settings().model_copy(update=_PROVIDER_OVERRIDES)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    """Report ids to delete after the test; artifacts go with them via ON DELETE CASCADE."""
    report_ids: list[int] = []
    yield report_ids
    if not report_ids:
        return
    with get_connection() as conn:
        conn.execute("DELETE FROM reports WHERE id = ANY(%s)", (report_ids,))
        conn.commit()


@pytest.fixture
def seed_report(integration_cleanup: list[int]) -> Callable[..., ReportRecord]:
    """Insert a report row through the repository and register it for cleanup."""
    repo = ReportRepository()

    def _seed(**overrides: Any) -> ReportRecord:
        values: dict[str, Any] = {
            "user_id": 42,
            "file_name": "1700000000000-abcd1234-lipids.txt",
            "original_file_name": "lipids.txt",
            "storage_key": "reports/1700000000000-abcd1234-lipids.txt",
            "storage_url": "/uploads/reports/1700000000000-abcd1234-lipids.txt",
            "is_local": True,
            "file_type": "txt",
            "mime_type": "text/plain",
            "file_size_bytes": 58,
            "report_type": "blood_test",
            "language": "english",
        }
        values.update(overrides)
        report = repo.create(**values)
        integration_cleanup.append(report.id)
        return report

    return _seed
