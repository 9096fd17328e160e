"""Domain error taxonomy shared by every module.

Services raise subclasses of these bases; the API layer maps each base
to one HTTP status and one ``type`` in the standard error body.  The
fourth kind, internal/transactional failure, is Django's own
``DatabaseError`` and is handled in ``modules.core.exception_handler``.
"""

from __future__ import annotations

from typing import Any, Dict


class DomainError(Exception):
    """Base class for business-rule violations.

    ``kind`` groups errors for the API layer; ``code`` identifies the
    specific rule.  ``details`` carries structured context for clients.
    """

    kind = "error"
    code = "domain_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details: Dict[str, Any] = details


class DomainValidationError(DomainError):
    """Malformed input or a forbidden operation; rejected before side effects."""

    kind = "validation_error"
    code = "invalid"


class DomainNotFound(DomainError):
    """A referenced entity does not exist (or has been soft-deleted)."""

    kind = "not_found"
    code = "not_found"


class DomainConflict(DomainError):
    """The request conflicts with the current state of the store."""

    kind = "conflict"
    code = "conflict"
