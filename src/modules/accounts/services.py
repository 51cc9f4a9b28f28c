"""Account service layer (Use Cases).

Orchestrates business logic for accounts, delegating persistence to the
injected ``IAccountRepository``. Order statistics come from the order
repository so the account module never touches order tables directly.

Business rules enforced here:
- Username and email must be unique.
- An account with orders cannot be deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db.models import QuerySet

from modules.accounts.dtos import AccountProfileDTO
from modules.accounts.exceptions import (
    AccountAlreadyExists,
    AccountHasOrders,
    AccountNotFound,
)
from modules.accounts.models import Account
from modules.core.decorators import returns_result, unit_of_work
from modules.core.money import money

if TYPE_CHECKING:
    from modules.accounts.dtos import CreateAccountDTO, UpdateAccountDTO
    from modules.accounts.repositories.interfaces import IAccountRepository
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for Account use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        account_repository: IAccountRepository,
        order_repository: IOrderRepository,
    ) -> None:
        self._repo = account_repository
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @unit_of_work
    def create_account(self, dto: CreateAccountDTO) -> Account:
        """Register a new account after enforcing uniqueness rules.

        Raises:
            AccountAlreadyExists: username or email is taken.
        """
        log = logger.bind(username=dto.username)

        if self._repo.get_by_username(dto.username):
            log.warning("account.duplicate_username")
            raise AccountAlreadyExists(
                f"Username '{dto.username}' is already registered.",
                field="username",
            )
        if self._repo.get_by_email(dto.email):
            log.warning("account.duplicate_email")
            raise AccountAlreadyExists("Email already registered.", field="email")

        account = Account(
            username=dto.username,
            email=dto.email,
            alias=dto.alias,
            role=dto.role.value,
        )
        account.set_password(dto.password)
        account = self._repo.save(account)
        log.info("account.created", account_id=account.id)
        return account

    @unit_of_work
    def update_account(self, id: int, dto: UpdateAccountDTO) -> Account:
        """Update alias, email, role or enabled flag.

        Raises:
            AccountNotFound: the account does not exist.
            AccountAlreadyExists: the new email belongs to another account.
        """
        account = self._require(id)
        log = logger.bind(account_id=id)

        if dto.email is not None and dto.email.lower() != account.email.lower():
            existing = self._repo.get_by_email(dto.email)
            if existing and existing.id != account.id:
                log.warning("account.duplicate_email")
                raise AccountAlreadyExists("Email already registered.", field="email")

        for field in ("alias", "email", "role", "is_enabled"):
            value = getattr(dto, field)
            if value is not None:
                setattr(account, field, value)

        account = self._repo.save(account)
        log.info("account.updated", is_enabled=account.is_enabled)
        return account

    @unit_of_work
    def delete_account(self, id: int) -> None:
        """Raises ``AccountHasOrders`` while any order references the account."""
        account = self._require(id)
        order_count = self._order_repo.count_by_account(id)
        if order_count > 0:
            raise AccountHasOrders(
                f"Account {id} has {order_count} orders; disable it instead.",
                account_id=id,
                order_count=order_count,
            )
        self._repo.delete(account)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_accounts(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Account]:
        return self._repo.list(filters)

    @returns_result
    def get_account(self, id: int) -> Account:
        return self._require(id)

    @returns_result
    def get_by_username(self, username: str) -> Account:
        account = self._repo.get_by_username(username)
        if not account:
            raise AccountNotFound(f"Account '{username}' not found.", username=username)
        return account

    @returns_result
    def profile(self, id: int) -> AccountProfileDTO:
        """Account details plus order count, total spent and average order."""
        account = self._require(id)
        return AccountProfileDTO.from_entity(
            account,
            order_count=self._order_repo.count_by_account(id),
            total_spent=money(self._order_repo.sum_total_by_account(id)),
            average_order_amount=money(self._order_repo.avg_total_by_account(id)),
        )

    def _require(self, id: int) -> Account:
        account = self._repo.get_by_id(id)
        if not account:
            raise AccountNotFound(f"Account {id} not found.", account_id=id)
        return account
