"""Structured error metadata models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pgerror.categories import ErrorCategory, classify_error_info

MAX_MESSAGE_LENGTH = 2048

# Optional diagnostic fields exposed by asyncpg and psycopg errors.
_DRIVER_FIELDS = ("hint", "detail", "constraint_name", "table_name", "column_name")


class ErrorMetadata(BaseModel):
    """Structured view of a database error for API responses and telemetry.

    Legacy aliases are accepted on input:
    - sqlstate / code -> sql_state
    - retryable -> is_retryable
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    category: ErrorCategory = Field(..., description="Provider-agnostic error category")
    message: str = Field(..., description="Error message, bounded in length")
    sql_state: Optional[str] = Field(
        None, min_length=5, max_length=5, description="Five-character SQLSTATE"
    )
    error_class: Optional[str] = Field(
        None, min_length=2, max_length=2, description="Two-character SQLSTATE class"
    )
    is_retryable: bool = Field(False, description="Whether the error is retryable")
    provider: str = Field("postgres", description="Originating database provider")
    hint: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    detail: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    position: Optional[int] = Field(None, description="Character position of the error")
    constraint_name: Optional[str] = None
    table_name: Optional[str] = None
    column_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy_fields(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value

        data = dict(value)
        for legacy in ("sqlstate", "code"):
            if "sql_state" not in data and legacy in data:
                data["sql_state"] = data.pop(legacy)
        if "is_retryable" not in data and "retryable" in data:
            data["is_retryable"] = data.pop("retryable")
        message = data.get("message")
        if isinstance(message, str) and len(message) > MAX_MESSAGE_LENGTH:
            data["message"] = message[:MAX_MESSAGE_LENGTH]
        return data

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses/telemetry."""
        return self.model_dump(mode="json", exclude_none=True)


def extract_error_metadata(err: BaseException, provider: str = "postgres") -> ErrorMetadata:
    """Build :class:`ErrorMetadata` from any exception raised by a database driver."""
    info = classify_error_info(err)

    fields: dict[str, Any] = {}
    for name in _DRIVER_FIELDS:
        value = getattr(err, name, None)
        if value is not None:
            fields[name] = str(value)[:MAX_MESSAGE_LENGTH]

    return ErrorMetadata(
        category=info.category,
        message=str(err) or type(err).__name__,
        sql_state=info.sqlstate,
        error_class=info.error_class,
        is_retryable=info.is_retryable,
        provider=(provider or "unknown").lower(),
        position=_coerce_position(getattr(err, "position", None)),
        **fields,
    )


def _coerce_position(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
