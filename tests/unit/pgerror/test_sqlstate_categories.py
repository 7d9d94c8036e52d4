"""Unit tests for SQLSTATE-based error categories and telemetry."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from pgerror.categories import (
    RECOVERY_HINTS,
    ErrorCategory,
    classify_error,
    classify_error_info,
    emit_classified_error,
)


class _PostgresError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


@pytest.mark.parametrize(
    "sqlstate,category,retryable",
    [
        ("40P01", ErrorCategory.DEADLOCK, True),
        ("40001", ErrorCategory.SERIALIZATION, True),
        ("57014", ErrorCategory.TIMEOUT, True),
        ("53300", ErrorCategory.THROTTLING, True),
        ("53100", ErrorCategory.RESOURCE_EXHAUSTED, True),
        ("08006", ErrorCategory.CONNECTIVITY, True),
        ("57P01", ErrorCategory.CONNECTIVITY, True),
        ("55P03", ErrorCategory.TRANSIENT, True),
        ("28P01", ErrorCategory.AUTH, False),
        ("42501", ErrorCategory.AUTH, False),
        ("42601", ErrorCategory.SYNTAX, False),
        ("42P01", ErrorCategory.SYNTAX, False),
        ("0A000", ErrorCategory.UNSUPPORTED, False),
        ("25006", ErrorCategory.UNSUPPORTED, False),
        ("23505", ErrorCategory.INTEGRITY, False),
        ("22012", ErrorCategory.DATA, False),
        ("XX001", ErrorCategory.INTERNAL, False),
        ("P0001", ErrorCategory.UNKNOWN, False),
    ],
)
def test_classify_by_sqlstate(sqlstate, category, retryable):
    """Codes map to categories with the expected retryability."""
    info = classify_error_info(_PostgresError("boom", sqlstate))

    assert info.category == category
    assert info.sqlstate == sqlstate
    assert info.error_class == sqlstate[:2]
    assert info.is_retryable is retryable


def test_classify_error_without_sqlstate():
    """Errors lacking a SQLSTATE are unknown, never guessed from the message."""
    info = classify_error_info(Exception("deadlock detected"))

    assert info.category == ErrorCategory.UNKNOWN
    assert info.sqlstate is None
    assert info.error_class is None
    assert info.is_retryable is False
    assert classify_error(None) == "unknown"


def test_classify_error_returns_plain_value():
    """classify_error returns the category string."""
    assert classify_error(_PostgresError("dup", "23505")) == "integrity"


def test_every_category_has_recovery_hint():
    """Telemetry never lacks a recovery hint."""
    assert set(RECOVERY_HINTS) == set(ErrorCategory)


def test_emit_classified_error_logs_when_enabled(monkeypatch, caplog) -> None:
    """Structured telemetry is emitted when enabled."""
    monkeypatch.setenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", "true")
    with caplog.at_level(logging.ERROR, logger="pgerror.categories"):
        info = emit_classified_error("insert_user", _PostgresError("dup", "23505"))

    assert info.category == ErrorCategory.INTEGRITY
    record = next(r for r in caplog.records if r.message == "pgerror_error_classified")
    assert record.operation == "insert_user"
    assert record.error_category == "integrity"
    assert record.sqlstate == "23505"
    assert record.error_class == "23"
    assert record.is_retryable is False


def test_emit_classified_error_defaults_to_enabled(monkeypatch, caplog) -> None:
    """Telemetry is on unless explicitly disabled."""
    monkeypatch.delenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", raising=False)
    with caplog.at_level(logging.ERROR, logger="pgerror.categories"):
        emit_classified_error("select", _PostgresError("cancel", "57014"))

    assert any(r.message == "pgerror_error_classified" for r in caplog.records)


def test_emit_classified_error_disabled(monkeypatch, caplog) -> None:
    """Structured telemetry is suppressed when disabled."""
    monkeypatch.setenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", "false")
    with caplog.at_level(logging.ERROR):
        info = emit_classified_error("insert_user", _PostgresError("dup", "23505"))

    assert info.category == ErrorCategory.INTEGRITY
    assert not caplog.records


def test_emit_classified_error_sets_span_attributes(monkeypatch) -> None:
    """A recording span receives error.classification.* attributes."""
    monkeypatch.setenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", "on")
    span = MagicMock()
    span.is_recording.return_value = True

    with patch("pgerror.categories.trace.get_current_span", return_value=span):
        emit_classified_error("update_order", _PostgresError("serialize", "40001"))

    span.set_attribute.assert_any_call("error.classification.category", "serialization")
    span.set_attribute.assert_any_call("error.classification.operation", "update_order")
    span.set_attribute.assert_any_call("error.classification.is_retryable", True)
    span.set_attribute.assert_any_call("error.classification.sqlstate", "40001")
    event_name, attributes = span.add_event.call_args.args
    assert event_name == "pgerror.error.classified"
    assert attributes["category"] == "serialization"


def test_emit_classified_error_skips_non_recording_span(monkeypatch) -> None:
    """Non-recording spans are left untouched."""
    monkeypatch.setenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", "on")
    span = MagicMock()
    span.is_recording.return_value = False

    with patch("pgerror.categories.trace.get_current_span", return_value=span):
        emit_classified_error("update_order", _PostgresError("serialize", "40001"))

    span.set_attribute.assert_not_called()
    span.add_event.assert_not_called()
