"""Exceptions raised by the calorie ledger core."""


class CalorieLedgerError(Exception):
    """Base class for application errors."""


class InferenceError(CalorieLedgerError):
    """The inference collaborator failed or returned unusable data."""


class RecalculationError(InferenceError):
    """Macros for an edited entry could not be re-estimated."""


class ReviewError(CalorieLedgerError):
    """A review action does not match the current edit session."""


class EntryNotFoundError(CalorieLedgerError, LookupError):
    """No ledger entry exists with the requested id."""


class LedgerStoreError(CalorieLedgerError):
    """Persisted ledger data could not be decoded."""
