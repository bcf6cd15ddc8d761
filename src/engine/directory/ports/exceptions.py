"""Domain exceptions for the directory bounded context.

Every error carries an ``ErrorKind`` so callers that prefer to branch on a
classification (the reconciliation tally, the SCIM error mapping) do not
have to enumerate exception types.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of directory errors."""

    DUPLICATE_KEY = "duplicate_key"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SOURCE_READ = "source_read"
    AUTHENTICATION = "authentication"
    LOCKED_ACCOUNT = "locked_account"
    INACTIVE_ACCOUNT = "inactive_account"
    INVALID_TRANSITION = "invalid_transition"


class DirectoryError(Exception):
    """Base class for all directory domain errors."""

    kind: ErrorKind


class DuplicateKeyError(DirectoryError):
    """Raised when a natural key (loginName, email, group name) is already taken.

    Surfaced to the caller and never retried.
    """

    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, entity: str, key: str, value: str):
        self.entity = entity
        self.key = key
        self.value = value
        super().__init__(f"{entity} with {key} '{value}' already exists")


class NotFoundError(DirectoryError):
    """Raised when an identity does not resolve to a stored record."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found with id: {identifier}")


class FieldValidationError(DirectoryError):
    """Raised when a required field is missing or malformed."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Field '{field}' is required")


class SourceReadError(DirectoryError):
    """Raised when a provisioning feed cannot be read.

    Aborts the whole job; the message is recorded on the job.
    """

    kind = ErrorKind.SOURCE_READ


class InvalidJobTransitionError(DirectoryError):
    """Raised when a job lifecycle transition is attempted out of order."""

    kind = ErrorKind.INVALID_TRANSITION


class AuthenticationError(DirectoryError):
    """Raised when a login attempt is rejected.

    The message is identical for every rejection reason so that callers
    cannot use it to learn whether an account exists.
    """

    kind = ErrorKind.AUTHENTICATION
    public_message = "Invalid credentials"

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(self.public_message)


class LockedAccountError(AuthenticationError):
    """Raised when the account is inside its lockout window."""

    kind = ErrorKind.LOCKED_ACCOUNT


class InactiveAccountError(AuthenticationError):
    """Raised when the account has been deactivated."""

    kind = ErrorKind.INACTIVE_ACCOUNT
