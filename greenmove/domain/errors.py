"""Ledger error kinds.

Each error also derives from the builtin the API layer already maps
(ValueError -> 400, LookupError -> 404, RuntimeError -> 409).
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""


class ValidationError(LedgerError, ValueError):
    """Malformed input reached the engine."""


class NotFoundError(LedgerError, LookupError):
    """Operation on an unknown user, activity or reward id."""


class ConflictError(LedgerError, RuntimeError):
    """A concurrent update won the race. Caller must retry."""
