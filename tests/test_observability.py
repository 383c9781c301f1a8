"""Tests for the observability module."""

import json
import logging

from claim_tracker.observability.logger import (
    ClaimLogger,
    HumanReadableFormatter,
    StructuredFormatter,
    _get_claim_context,
    claim_context,
    get_logger,
    log_claim_event,
)


def _record(msg="hello", **attrs):
    record = logging.LogRecord("claims", logging.INFO, "claims.py", 10, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestStructuredLogging:
    def test_get_logger_returns_claim_logger(self):
        assert isinstance(get_logger("test_logger"), ClaimLogger)

    def test_get_logger_writes_to_stderr_only_once(self):
        first = get_logger("test_logger_handlers")
        get_logger("test_logger_handlers")
        assert len(first.logger.handlers) == 1
        assert first.logger.propagate is False

    def test_claim_context_stamped_on_records(self, caplog):
        logger = get_logger("test_logger_with_context")
        # Enable propagation for test capture
        logger.logger.propagate = True
        with caplog.at_level(logging.INFO):
            with claim_context(claim_number="CLM-2025-00001", actor="admin:42"):
                logger.info("Progress updated")
                logger.info("Explicit", extra={"claim_number": "CLM-2025-00009"})
            logger.info("Outside")
        stamped, explicit, outside = caplog.records[-3:]
        assert stamped.claim_number == "CLM-2025-00001"
        assert stamped.actor == "admin:42"
        assert explicit.claim_number == "CLM-2025-00009"
        assert explicit.actor == "admin:42"
        assert not hasattr(outside, "claim_number")

    def test_claim_context_sets_and_restores(self):
        assert _get_claim_context() == {}
        with claim_context(claim_number="CLM-2025-00002", actor="member:7", source="cli"):
            ctx = _get_claim_context()
            assert ctx["claim_number"] == "CLM-2025-00002"
            assert ctx["actor"] == "member:7"
            assert ctx["source"] == "cli"
        assert _get_claim_context() == {}

    def test_structured_formatter_outputs_json(self):
        record = _record(claim_number="CLM-2025-00003", extra_data={"event": "claim_submitted"})
        data = json.loads(StructuredFormatter().format(record))
        assert data["level"] == "INFO"
        assert data["message"] == "hello"
        assert data["claim_number"] == "CLM-2025-00003"
        assert data["data"] == {"event": "claim_submitted"}
        assert data["source"]["line"] == 10

    def test_structured_formatter_uses_context(self):
        with claim_context(claim_number="CLM-2025-00004", actor="admin:1"):
            data = json.loads(StructuredFormatter(include_timestamp=False).format(_record()))
        assert data["claim_number"] == "CLM-2025-00004"
        assert data["actor"] == "admin:1"
        assert "timestamp" not in data

    def test_human_formatter_prefix(self):
        line = HumanReadableFormatter().format(_record(claim_number="CLM-2025-00005", actor="admin:1"))
        assert "[claim=CLM-2025-00005, actor=admin:1]" in line
        assert line.endswith("claims: hello")

    def test_log_claim_event(self, caplog):
        logger = logging.getLogger("test_claim_events")
        with caplog.at_level(logging.INFO, logger="test_claim_events"):
            log_claim_event(logger, "progress_updated", claim_number="CLM-2025-00006", progress=80)
        record = caplog.records[-1]
        assert record.getMessage() == "[progress_updated] progress=80"
        assert record.extra_data == {"event": "progress_updated", "progress": 80}
        assert record.claim_number == "CLM-2025-00006"
