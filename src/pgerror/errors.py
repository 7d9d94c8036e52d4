"""Exception hierarchy for pgerror."""


class PGErrorError(Exception):
    """Base for all pgerror errors."""


class UnknownSQLStateError(PGErrorError, LookupError):
    """Raised when a SQLSTATE value or name is not in the catalog."""
