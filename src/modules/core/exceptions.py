"""Domain exception hierarchy shared by every module.

Services raise these inside a unit of work so the surrounding database
transaction rolls back. ``modules.core.decorators.unit_of_work`` converts
them into ``Err`` values at the service boundary.
"""

from __future__ import annotations

from typing import Any

from modules.core.results import Err, ErrorKind


class DomainError(Exception):
    """Base class for business-level failures.

    ``details`` carries structured context (ids, quantities) that ends up
    in the ``meta`` block of the API error payload.
    """

    kind: ErrorKind = ErrorKind.BUSINESS_RULE

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_result(self) -> Err:
        return Err(kind=self.kind, message=self.message, details=dict(self.details))


class ValidationFailed(DomainError):
    """Input is malformed before any store is consulted."""

    kind = ErrorKind.VALIDATION


class NotFound(DomainError):
    """A referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class Duplicate(DomainError):
    """A uniqueness rule would be broken."""

    kind = ErrorKind.DUPLICATE


class BusinessRuleViolation(DomainError):
    """The request is well-formed but not allowed in the current state."""

    kind = ErrorKind.BUSINESS_RULE
