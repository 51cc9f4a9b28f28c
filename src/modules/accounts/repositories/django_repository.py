"""Django ORM implementation of the Account repository.

Error handling follows the Null Object pattern: methods return ``None``
instead of raising; the service decides how to report a missing account.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import transaction
from django.db.models import QuerySet

from modules.accounts.models import Account
from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    """Concrete Account repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Account]:
        return Account.objects.filter(id=id).first()

    def get_by_username(self, username: str) -> Optional[Account]:
        return Account.objects.filter(username=username).first()

    def get_by_email(self, email: str) -> Optional[Account]:
        return Account.objects.filter(email__iexact=email).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Account]:
        """List accounts with optional ORM look-ups, e.g. ``{"is_enabled": True}``."""
        queryset = Account.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        entity.save()
        logger.info("account.saved", account_id=entity.id, username=entity.username)
        return entity

    @transaction.atomic
    def delete(self, entity: Account) -> None:
        account_id = entity.id
        entity.delete()
        logger.info("account.deleted", account_id=account_id)
