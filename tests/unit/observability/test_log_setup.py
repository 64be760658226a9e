"""Tests for structured logging."""

import pytest
import structlog

from docaudit.observability.logging import PayloadRedactor, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=True)
        get_logger("test").debug("test_message", doc={"_id": "1"})

    def test_redactor_in_processor_chain(self) -> None:
        """Redaction runs before rendering only when enabled."""
        setup_logging(level="INFO", format="json", redact_pii=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-2], PayloadRedactor)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

        setup_logging(level="INFO", format="json", redact_pii=False)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, PayloadRedactor) for p in processors)


@pytest.fixture
def redactor() -> PayloadRedactor:
    return PayloadRedactor()


class TestPayloadRedactor:
    """Tests for PayloadRedactor processor."""

    def test_redacts_credentials(self, redactor) -> None:
        result = redactor(None, "info", {"event": "x", "password": "hunter2", "Token": "t"})
        assert result["password"] == "[REDACTED]"
        assert result["Token"] == "[REDACTED]"
        assert result["event"] == "x"

    def test_summarizes_single_document(self, redactor) -> None:
        """Document bodies are replaced by their field count."""
        result = redactor(None, "info", {"doc": {"_id": "1", "patient_name": "Jane"}})
        assert result["doc"] == "[DOCUMENT fields=2]"

    def test_summarizes_document_lists(self, redactor) -> None:
        result = redactor(None, "info", {"docs": [{"_id": "1"}, {"_id": "2"}]})
        assert result["docs"] == "[DOCUMENTS count=2]"

    def test_summarizes_other_payloads(self, redactor) -> None:
        result = redactor(None, "info", {"snapshot": "raw"})
        assert result["snapshot"] == "[DOCUMENT]"

    def test_recurses_into_nested_dicts(self, redactor) -> None:
        result = redactor(
            None,
            "info",
            {"request": {"auth": "Basic abc", "path": "/medic/1"}},
        )
        assert result["request"] == {"auth": "[REDACTED]", "path": "/medic/1"}

    def test_leaves_ordinary_fields(self, redactor) -> None:
        event = {"event": "audit_failed", "stage": "persist", "doc_id": "1"}
        assert redactor(None, "error", event) == event
