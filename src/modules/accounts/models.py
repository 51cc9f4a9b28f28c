"""Account model.

Business rules implemented:
- Username and email are unique in the system.
- Only a password hash is stored (Django password hashers).
- A disabled account cannot place orders (enforced by the order engine).
- An account with orders cannot be deleted (PROTECT from ``Order``).
"""

from __future__ import annotations

from django.contrib.auth.hashers import check_password, make_password
from django.db import models

from modules.core.models import BaseModel


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    MANAGER = "MANAGER", "Manager"
    USER = "USER", "User"


class Account(BaseModel):
    """Customer account that owns orders.

    Separate from ``django.contrib.auth`` users, which only authenticate
    API callers.
    """

    username = models.CharField(max_length=50, unique=True)
    email = models.EmailField(max_length=254, unique=True)
    password = models.CharField(max_length=128)
    alias = models.CharField(max_length=50, blank=True, null=True)  # noqa: DJ01
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER)
    is_enabled = models.BooleanField(default=True)
    last_login_at = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        db_table = "accounts"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["is_enabled"], name="accounts_enabled_idx"),
        ]

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)

    def __str__(self) -> str:
        return self.username
