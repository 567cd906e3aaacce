"""Exception hierarchy for skinscores.

Every error that may reach a caller carries a ``kind`` string; the API layer
maps kinds to HTTP status codes and the message is returned verbatim.
"""

from __future__ import annotations


class SkinScoresError(Exception):
    """Base exception for all skinscores errors."""

    kind = "internal"


class UnauthenticatedError(SkinScoresError):
    """No caller identity was presented."""

    kind = "unauthenticated"


class InvalidArgumentError(SkinScoresError):
    """Malformed request or an input that failed template validation."""

    kind = "invalid-argument"


class NotFoundError(SkinScoresError):
    """Unknown template slug or session id."""

    kind = "not-found"


class PermissionDeniedError(SkinScoresError):
    """The caller does not own the targeted session."""

    kind = "permission-denied"


class TemplateSchemaError(SkinScoresError):
    """A stored template document does not match the template schema."""


class PersistenceError(SkinScoresError):
    """Raised when a document store operation fails."""


class TransactionConflictError(PersistenceError):
    """A transaction lost a write race and was rolled back. Caller may retry."""


__all__ = [
    "SkinScoresError",
    "UnauthenticatedError",
    "InvalidArgumentError",
    "NotFoundError",
    "PermissionDeniedError",
    "TemplateSchemaError",
    "PersistenceError",
    "TransactionConflictError",
]
