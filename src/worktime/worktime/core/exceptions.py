class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when a date, time or range input is malformed."""


class NotFoundError(DomainError):
    """Raised when the user is unknown and must register again."""


class StorageError(Exception):
    """Raised when the persistence layer fails or times out."""
