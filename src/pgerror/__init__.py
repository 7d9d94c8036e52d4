"""PostgreSQL SQLSTATE taxonomy and error classification.

Test driver errors against SQLSTATE classes and codes without parsing messages::

    from pgerror import ErrorClass, ErrorCode, is_class, is_code

    if is_code(exc, ErrorCode.UNIQUE_VIOLATION):
        ...
    if is_class(exc, ErrorClass.CONNECTION_EXCEPTION):
        ...

Works with any error exposing ``sqlstate`` (asyncpg, psycopg 3), ``pgcode``
(psycopg2) or ``sql_state``.
"""

from pgerror.catalog import (
    all_classes,
    all_codes,
    code_aliases,
    codes_in_class,
    lookup_class,
    lookup_code,
    validate_catalog,
)
from pgerror.categories import (
    ErrorCategory,
    ErrorClassification,
    classify_error,
    classify_error_info,
    emit_classified_error,
)
from pgerror.classify import error_class_of, is_class, is_code, sqlstate_of
from pgerror.codes import PG_VERSION, ErrorClass, ErrorCode
from pgerror.errors import PGErrorError, UnknownSQLStateError
from pgerror.metadata import ErrorMetadata, extract_error_metadata

__all__ = [
    "PG_VERSION",
    "ErrorCategory",
    "ErrorClass",
    "ErrorClassification",
    "ErrorCode",
    "ErrorMetadata",
    "PGErrorError",
    "UnknownSQLStateError",
    "all_classes",
    "all_codes",
    "classify_error",
    "classify_error_info",
    "code_aliases",
    "codes_in_class",
    "emit_classified_error",
    "error_class_of",
    "extract_error_metadata",
    "is_class",
    "is_code",
    "lookup_class",
    "lookup_code",
    "sqlstate_of",
    "validate_catalog",
]
