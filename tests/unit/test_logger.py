import logging

import pytest

from simplymedi.logging.logger import Log


class TestRender:
    def test_message_without_fields_is_unchanged(self) -> None:
        assert Log._render("hello", {}) == "hello"

    def test_appends_fields_in_call_order(self) -> None:
        assert Log._render("done", {"b": 2, "a": 1}) == "done | b=2 a=1"

    def test_skips_none_fields(self) -> None:
        assert Log._render("done", {"provider": None, "tier": 0}) == "done | tier=0"


class TestLogMethods:
    def test_warning_emits_rendered_message(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="simplymedi"):
            Log.warning("Provider failed", provider="gemini")

        assert "Provider failed | provider=gemini" in caplog.text

    def test_configure_sets_level(self) -> None:
        Log.configure("debug")
        assert logging.getLogger("simplymedi").level == logging.DEBUG
        Log.configure("INFO")
