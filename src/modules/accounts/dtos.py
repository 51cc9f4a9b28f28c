"""Account DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateAccountDTO``: input for account registration.
- ``UpdateAccountDTO``: partial update (alias, email, role, enabled flag).
- ``AccountProfileDTO``: account plus order statistics.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

if TYPE_CHECKING:
    from modules.accounts.models import Account


class RoleEnum(StrEnum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateAccountDTO(BaseModel):
    """Immutable DTO for account creation requests.

    ``password`` is the raw secret; the service hashes it before saving and
    it is never logged.
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, repr=False)
    alias: Optional[str] = Field(default=None, max_length=50)
    role: RoleEnum = RoleEnum.USER

    @field_validator("username")
    @classmethod
    def username_is_trimmed(cls, v: str) -> str:
        if v != v.strip():
            raise ValueError("Username must not start or end with whitespace.")
        return v


class UpdateAccountDTO(BaseModel):
    """All fields optional; only supplied (non-null) fields are applied."""

    model_config = ConfigDict(frozen=True)

    alias: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[RoleEnum] = None
    is_enabled: Optional[bool] = None


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class AccountProfileDTO(BaseModel):
    """Account details with order statistics (zeros when no orders)."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    alias: Optional[str]
    role: str
    is_enabled: bool
    created_at: datetime
    last_login_at: Optional[datetime]
    order_count: int
    total_spent: Decimal
    average_order_amount: Decimal

    @classmethod
    def from_entity(
        cls,
        account: Account,
        order_count: int,
        total_spent: Decimal,
        average_order_amount: Decimal,
    ) -> AccountProfileDTO:
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            alias=account.alias,
            role=account.role,
            is_enabled=account.is_enabled,
            created_at=account.created_at,
            last_login_at=account.last_login_at,
            order_count=order_count,
            total_spent=total_spent,
            average_order_amount=average_order_amount,
        )
