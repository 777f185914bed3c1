"""
Accounting errors.

Every failure the ledger reports carries a stable ``kind`` for callers and a
human readable message. ``status_code`` is the HTTP status the API maps it to.
"""


class AccountingError(Exception):
    """Base exception for all ledger failures."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_dict(self) -> dict:
        return {"ok": False, "error": self.kind, "message": self.message}


class ValidationError(AccountingError):
    """Bad input: date range, unbalanced or empty journal, non-postable target."""

    kind = "validation_error"
    status_code = 400


class ConflictError(AccountingError):
    """Duplicate code, reference number or successor fiscal year."""

    kind = "conflict"
    status_code = 409


class StateError(AccountingError):
    """Operation not allowed in the current lifecycle state."""

    kind = "invalid_state"
    status_code = 400


class NotFoundError(AccountingError):
    """Unknown id."""

    kind = "not_found"
    status_code = 404
