import pytest
from pydantic import ValidationError

from simplymedi.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.db_port == 5432

    def test_default_pdf_engine(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.pdf_engine == "pdfplumber"

    def test_default_ocr_settings(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.ocr_confidence_threshold == 60
        assert s.ocr_max_dimension == 2000

    def test_chat_timeout_is_shorter_than_document_timeout(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.chat_timeout_seconds < s.document_capability_timeout_seconds

    def test_high_risk_keywords_include_high(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert "high" in s.high_risk_keywords

    def test_default_max_file_size_is_ten_megabytes(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.max_file_size_bytes == 10 * 1024 * 1024


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.log_level == "DEBUG"

    def test_loads_db_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "5433")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.db_port == 5433

    def test_loads_provider_chain_from_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHAT_PROVIDERS", '["groq", "openai"]')
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.chat_providers == ["groq", "openai"]

    def test_loads_webhook_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RAG_CHAT_WEBHOOK_URL", "http://rag.local/webhook/chat")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.rag_chat_webhook_url == "http://rag.local/webhook/chat"


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_invalid_timeout_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHAT_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]
