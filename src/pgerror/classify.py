"""SQLSTATE predicates over opaque driver errors.

Drivers disagree on where they keep the SQLSTATE: asyncpg and psycopg 3 use
``sqlstate``, psycopg2 uses ``pgcode`` and structured error payloads (such as
:class:`pgerror.metadata.ErrorMetadata`) use ``sql_state``. The predicates here
narrow any value to "carries a SQLSTATE" before comparing, so callers never
depend on a concrete driver type.

Usage::

    from pgerror import ErrorClass, ErrorCode, is_class, is_code

    try:
        await conn.execute(sql)
    except Exception as exc:
        if is_code(exc, ErrorCode.UNIQUE_VIOLATION):
            ...
        elif is_class(exc, ErrorClass.TRANSACTION_ROLLBACK):
            ...
        else:
            raise
"""

from __future__ import annotations

from typing import Any, Optional

from pgerror.codes import ErrorClass, ErrorCode

SQLSTATE_LENGTH = 5
CLASS_LENGTH = 2

# Checked in order; the first well-formed value wins.
SQLSTATE_ATTRIBUTES = ("sqlstate", "pgcode", "sql_state")


def sqlstate_of(err: Any) -> Optional[str]:
    """Return the SQLSTATE carried by ``err``, or None when it has none."""
    if err is None:
        return None
    for attr in SQLSTATE_ATTRIBUTES:
        value = _normalize(_read_attr(err, attr), SQLSTATE_LENGTH)
        if value is not None:
            return value
    return None


def error_class_of(err: Any) -> Optional[str]:
    """Return the SQLSTATE class of ``err``, or None when it carries no code.

    An explicitly attached ``error_class`` takes precedence over the code prefix.
    """
    code = sqlstate_of(err)
    if code is None:
        return None
    explicit = _normalize(_read_attr(err, "error_class"), CLASS_LENGTH)
    if explicit is not None:
        return explicit
    return code[:CLASS_LENGTH]


def is_class(err: Any, error_class: ErrorClass) -> bool:
    """Report whether ``err`` carries a SQLSTATE of the given class."""
    actual = error_class_of(err)
    return actual is not None and actual == _normalize(error_class, CLASS_LENGTH)


def is_code(err: Any, code: ErrorCode) -> bool:
    """Report whether ``err`` carries exactly the given SQLSTATE."""
    actual = sqlstate_of(err)
    return actual is not None and actual == _normalize(code, SQLSTATE_LENGTH)


def _read_attr(err: Any, attr: str) -> Any:
    # A failed read counts as "no code".
    try:
        return getattr(err, attr, None)
    except Exception:
        return None


def _normalize(value: Any, length: int) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().upper()
    if len(normalized) == length and normalized.isalnum():
        return normalized
    return None
