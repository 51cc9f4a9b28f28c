"""Account domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BusinessRuleViolation, Duplicate, NotFound


class AccountNotFound(NotFound):
    """The requested account does not exist."""


class AccountAlreadyExists(Duplicate):
    """Username or email is already registered."""


class AccountHasOrders(BusinessRuleViolation):
    """Accounts with order history must be disabled instead of deleted."""
