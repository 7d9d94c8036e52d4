from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from opentelemetry import trace

from pgerror.classify import error_class_of, sqlstate_of
from pgerror.codes import ErrorClass, ErrorCode
from pgerror.config.env import get_env_bool

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Provider-agnostic error categories derived from SQLSTATE."""

    CONNECTIVITY = "connectivity"
    AUTH = "auth"
    SYNTAX = "syntax"
    UNSUPPORTED = "unsupported"
    DEADLOCK = "deadlock"
    SERIALIZATION = "serialization"
    TIMEOUT = "timeout"
    THROTTLING = "throttling"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    TRANSIENT = "transient"
    INTEGRITY = "integrity"
    DATA = "data"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorClassification:
    """Structured SQLSTATE-based error classification."""

    category: ErrorCategory
    sqlstate: Optional[str]
    error_class: Optional[str]
    is_retryable: bool


# Specific codes that classify differently from the rest of their class.
_CODE_CATEGORIES: dict[str, ErrorCategory] = {
    ErrorCode.DEADLOCK_DETECTED.value: ErrorCategory.DEADLOCK,
    ErrorCode.SERIALIZATION_FAILURE.value: ErrorCategory.SERIALIZATION,
    ErrorCode.QUERY_CANCELED.value: ErrorCategory.TIMEOUT,
    ErrorCode.IDLE_IN_TRANSACTION_SESSION_TIMEOUT.value: ErrorCategory.TIMEOUT,
    ErrorCode.LOCK_NOT_AVAILABLE.value: ErrorCategory.TRANSIENT,
    ErrorCode.TOO_MANY_CONNECTIONS.value: ErrorCategory.THROTTLING,
    ErrorCode.INSUFFICIENT_PRIVILEGE.value: ErrorCategory.AUTH,
    ErrorCode.READ_ONLY_SQL_TRANSACTION.value: ErrorCategory.UNSUPPORTED,
    ErrorCode.ADMIN_SHUTDOWN.value: ErrorCategory.CONNECTIVITY,
    ErrorCode.CRASH_SHUTDOWN.value: ErrorCategory.CONNECTIVITY,
    ErrorCode.CANNOT_CONNECT_NOW.value: ErrorCategory.CONNECTIVITY,
    ErrorCode.FDW_UNABLE_TO_ESTABLISH_CONNECTION.value: ErrorCategory.CONNECTIVITY,
    ErrorCode.FDW_OUT_OF_MEMORY.value: ErrorCategory.RESOURCE_EXHAUSTED,
}

_CLASS_CATEGORIES: dict[str, ErrorCategory] = {
    ErrorClass.CONNECTION_EXCEPTION.value: ErrorCategory.CONNECTIVITY,
    ErrorClass.FEATURE_NOT_SUPPORTED.value: ErrorCategory.UNSUPPORTED,
    ErrorClass.INVALID_GRANTOR.value: ErrorCategory.AUTH,
    ErrorClass.INVALID_ROLE_SPECIFICATION.value: ErrorCategory.AUTH,
    ErrorClass.CARDINALITY_VIOLATION.value: ErrorCategory.DATA,
    ErrorClass.DATA_EXCEPTION.value: ErrorCategory.DATA,
    ErrorClass.INTEGRITY_CONSTRAINT_VIOLATION.value: ErrorCategory.INTEGRITY,
    ErrorClass.INVALID_AUTHORIZATION_SPECIFICATION.value: ErrorCategory.AUTH,
    ErrorClass.INVALID_CATALOG_NAME.value: ErrorCategory.SYNTAX,
    ErrorClass.INVALID_SCHEMA_NAME.value: ErrorCategory.SYNTAX,
    ErrorClass.TRANSACTION_ROLLBACK.value: ErrorCategory.TRANSIENT,
    ErrorClass.SYNTAX_ERROR_OR_ACCESS_RULE_VIOLATION.value: ErrorCategory.SYNTAX,
    ErrorClass.WITH_CHECK_OPTION_VIOLATION.value: ErrorCategory.INTEGRITY,
    ErrorClass.INSUFFICIENT_RESOURCES.value: ErrorCategory.RESOURCE_EXHAUSTED,
    ErrorClass.PROGRAM_LIMIT_EXCEEDED.value: ErrorCategory.RESOURCE_EXHAUSTED,
    ErrorClass.OPERATOR_INTERVENTION.value: ErrorCategory.TRANSIENT,
    ErrorClass.SYSTEM_ERROR.value: ErrorCategory.INTERNAL,
    ErrorClass.SNAPSHOT_TOO_OLD.value: ErrorCategory.TRANSIENT,
    ErrorClass.INTERNAL_ERROR.value: ErrorCategory.INTERNAL,
}

_RETRYABLE_CATEGORIES = frozenset(
    {
        ErrorCategory.CONNECTIVITY,
        ErrorCategory.DEADLOCK,
        ErrorCategory.SERIALIZATION,
        ErrorCategory.TIMEOUT,
        ErrorCategory.THROTTLING,
        ErrorCategory.RESOURCE_EXHAUSTED,
        ErrorCategory.TRANSIENT,
    }
)

# Recovery hints for each error category
RECOVERY_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.CONNECTIVITY: "Check network configuration and database availability",
    ErrorCategory.AUTH: "Verify credentials and permission grants for the requested operation",
    ErrorCategory.SYNTAX: "Review SQL syntax; the query may reference invalid identifiers",
    ErrorCategory.UNSUPPORTED: "This operation is not supported in the current context",
    ErrorCategory.DEADLOCK: "Retry the transaction; consider a consistent lock ordering",
    ErrorCategory.SERIALIZATION: "Retry the transaction; reduce concurrent conflicts",
    ErrorCategory.TIMEOUT: "Consider reducing query complexity or increasing the timeout",
    ErrorCategory.THROTTLING: "Reduce connection count or wait before reconnecting",
    ErrorCategory.RESOURCE_EXHAUSTED: "Query exceeds server resource limits; simplify or paginate",
    ErrorCategory.TRANSIENT: "Retry after a short delay",
    ErrorCategory.INTEGRITY: "The write conflicts with a constraint; fix the data, do not retry",
    ErrorCategory.DATA: "A value is invalid for its type or operation; fix the input",
    ErrorCategory.INTERNAL: "Server-side failure; inspect server logs",
    ErrorCategory.UNKNOWN: "Inspect error details for root cause",
}


def classify_error(err: Any) -> str:
    """Classify an error into a provider-agnostic category value."""
    return classify_error_info(err).category.value


def classify_error_info(err: Any) -> ErrorClassification:
    """Classify an error by its SQLSTATE into a category with retryability."""
    sqlstate = sqlstate_of(err)
    error_class = error_class_of(err)

    if sqlstate is None:
        category = ErrorCategory.UNKNOWN
    elif sqlstate in _CODE_CATEGORIES:
        category = _CODE_CATEGORIES[sqlstate]
    else:
        category = _CLASS_CATEGORIES.get(error_class, ErrorCategory.UNKNOWN)

    return ErrorClassification(
        category=category,
        sqlstate=sqlstate,
        error_class=error_class,
        is_retryable=category in _RETRYABLE_CATEGORIES,
    )


def emit_classified_error(operation: str, err: Any) -> ErrorClassification:
    """Emit structured telemetry for a classified error when enabled.

    Sets error.classification.* span attributes for observability dashboards.
    """
    info = classify_error_info(err)
    if not get_env_bool("PGERROR_CLASSIFIED_ERROR_TELEMETRY", True):
        return info

    recovery_hint = RECOVERY_HINTS[info.category]

    span = trace.get_current_span()
    if span.is_recording():
        span.set_attribute("error.classification.category", info.category.value)
        span.set_attribute("error.classification.operation", operation)
        span.set_attribute("error.classification.is_retryable", info.is_retryable)
        span.set_attribute("error.classification.recovery_hint", recovery_hint)
        if info.sqlstate is not None:
            span.set_attribute("error.classification.sqlstate", info.sqlstate)
        span.add_event(
            "pgerror.error.classified",
            {
                "category": info.category.value,
                "operation": operation,
                "is_retryable": info.is_retryable,
                "recovery_hint": recovery_hint,
            },
        )

    logger.error(
        "pgerror_error_classified",
        extra={
            "event": "pgerror_error_classified",
            "operation": operation,
            "error_category": info.category.value,
            "sqlstate": info.sqlstate,
            "error_class": info.error_class,
            "error_type": type(err).__name__,
            "is_retryable": info.is_retryable,
            "recovery_hint": recovery_hint,
        },
    )
    return info
