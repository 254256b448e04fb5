"""Tests for configuration and the audit logger."""

import logging

import pytest
from pydantic import ValidationError

from finsight.audit import AuditLogger, create_correlation_id
from finsight.config import AppSettings, FirebaseSettings, GeminiSettings, get_settings, validate_all_settings
from finsight.models.audit import AuditEventType


class TestSettings:
    def test_app_defaults(self, app_settings):
        assert app_settings.currency_code == "INR"
        assert app_settings.recent_transactions_limit == 5
        assert app_settings.future_date_tolerance_days == 7

    def test_log_level_number(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings(_env_file=None).log_level_number == logging.DEBUG
        monkeypatch.setenv("LOG_LEVEL", "nonsense")
        assert AppSettings(_env_file=None).log_level_number == logging.INFO

    def test_gemini_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(ValidationError):
            GeminiSettings(_env_file=None)

    def test_gemini_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setenv("GEMINI_TEMPERATURE", "0.1")
        settings = GeminiSettings(_env_file=None)
        assert settings.api_key == "k"
        assert settings.temperature == 0.1
        assert settings.model_name == "gemini-2.5-flash"

    def test_firebase_from_env(self, monkeypatch, tmp_path):
        credentials = tmp_path / "sa.json"
        credentials.write_text("{}")
        monkeypatch.setenv("FIREBASE_PROJECT_ID", "demo")
        monkeypatch.setenv("FIREBASE_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("FIREBASE_WEB_API_KEY", "web")
        settings = FirebaseSettings(_env_file=None)
        assert settings.database == "(default)"
        assert settings.auth_timeout_seconds == 10.0

    def test_validate_all_settings_reports_missing(self, monkeypatch):
        for name in ("FIREBASE_PROJECT_ID", "FIREBASE_CREDENTIALS_PATH", "FIREBASE_WEB_API_KEY"):
            monkeypatch.delenv(name, raising=False)
        get_settings.cache_clear()
        status = validate_all_settings()
        assert status["app"] is True
        if not status["firebase"]:
            assert "firebase_error" in status


class TestAuditLogger:
    async def test_buffer_is_newest_first_and_bounded(self):
        audit_logger = AuditLogger(buffer_size=2)
        await audit_logger.log_signed_in("u1", anonymous=False)
        await audit_logger.log_sign_in_failed("INVALID_PASSWORD")
        await audit_logger.log_records_cleared("u1", "all", 3, create_correlation_id())

        events = audit_logger.recent_events
        assert [e.event_type for e in events] == [
            AuditEventType.RECORDS_CLEARED,
            AuditEventType.SIGN_IN_FAILED,
        ]

    async def test_external_service_error_is_buffered(self):
        audit_logger = AuditLogger()
        await audit_logger.log_external_service_error("gemini:insights", "quota")
        assert audit_logger.recent_events[0].error_message == "quota"
