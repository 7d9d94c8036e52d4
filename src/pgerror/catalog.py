"""Read-only lookups over the SQLSTATE catalog."""

from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar, Union

from pgerror.classify import CLASS_LENGTH, SQLSTATE_LENGTH
from pgerror.codes import ErrorClass, ErrorCode
from pgerror.errors import UnknownSQLStateError

E = TypeVar("E", bound=Enum)


def all_classes() -> list[ErrorClass]:
    """Return every error class in catalog order."""
    return list(ErrorClass)


def all_codes() -> list[ErrorCode]:
    """Return every canonical error code in catalog order (aliases excluded)."""
    return list(ErrorCode)


def codes_in_class(error_class: Union[ErrorClass, str]) -> list[ErrorCode]:
    """Return the codes whose two-character prefix equals ``error_class``."""
    prefix = error_class.value if isinstance(error_class, ErrorClass) else str(error_class)
    return [code for code in ErrorCode if code.value[:CLASS_LENGTH] == prefix]


def lookup_code(value_or_name: str) -> ErrorCode:
    """Resolve a SQLSTATE value (``"23505"``) or name (``"unique_violation"``)."""
    return _lookup(ErrorCode, value_or_name)


def lookup_class(value_or_name: str) -> ErrorClass:
    """Resolve a class value (``"23"``) or name (``"integrity_constraint_violation"``)."""
    return _lookup(ErrorClass, value_or_name)


def code_aliases() -> dict[ErrorCode, list[str]]:
    """Return codes that are bound to more than one name, with all of their names."""
    names: dict[ErrorCode, list[str]] = {}
    for name, member in ErrorCode.__members__.items():
        names.setdefault(member, []).append(name)
    return {member: bound for member, bound in names.items() if len(bound) > 1}


def validate_catalog() -> list[str]:
    """Return a list of catalog consistency violations; empty when consistent."""
    violations: list[str] = []
    class_values = {member.value for member in ErrorClass}

    for error_class in ErrorClass:
        if len(error_class.value) != CLASS_LENGTH or not error_class.value.isalnum():
            violations.append(f"malformed class {error_class.name}={error_class.value!r}")

    for name, code in ErrorCode.__members__.items():
        if len(code.value) != SQLSTATE_LENGTH or not code.value.isalnum():
            violations.append(f"malformed code {name}={code.value!r}")
            continue
        if code.value[:CLASS_LENGTH] not in class_values:
            violations.append(f"code {name}={code.value!r} has no class in the catalog")

    return violations


def _lookup(enum_type: type[E], value_or_name: Union[E, str, None]) -> E:
    if isinstance(value_or_name, enum_type):
        return value_or_name
    raw = str(value_or_name or "").strip()
    try:
        return enum_type(raw.upper())
    except ValueError:
        pass
    member: Optional[E] = enum_type.__members__.get(raw.upper())
    if member is None:
        raise UnknownSQLStateError(f"Unknown {enum_type.__name__}: {value_or_name!r}")
    return member
