class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class RecordNotFound(ValidationError):
    """Raised when a referenced record does not exist."""


class AuthorizationError(DomainError):
    """Raised when the acting user lacks permission for an action."""


class PaidRecordLocked(DomainError):
    """Raised on any mutation of a PAID attendance record."""


class VerifiedRecordImmutable(DomainError):
    """Raised when a non-admin tries to alter a VERIFIED record."""


class InsufficientVerifiedRecords(DomainError):
    """Raised when a settlement asks for more lectures than are verified."""


class ConcurrencyConflict(DomainError):
    """Raised when a guarded write observes a state that changed after it was read."""


class StorageError(Exception):
    """Raised when the storage backing fails after retries."""
