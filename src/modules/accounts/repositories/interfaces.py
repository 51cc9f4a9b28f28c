"""Account repository interface (the Account Store)."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    """Repository contract for accounts.

    The order engine only needs ``get_by_id`` and the ``is_enabled`` flag;
    the rest supports account management.
    """

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[Account]:
        """Retrieve an account by username."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Account]:
        """Retrieve an account by email (case-insensitive)."""
