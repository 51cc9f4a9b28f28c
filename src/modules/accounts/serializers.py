"""Account DRF serializers for API input/output.

The password is write-only and never rendered.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.models import Account, Role

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateAccountSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=50)
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(min_length=8, write_only=True, trim_whitespace=False)
    alias = serializers.CharField(
        max_length=50, required=False, allow_null=True, allow_blank=True, default=None
    )
    role = serializers.ChoiceField(choices=Role.choices, required=False, default=Role.USER)


class UpdateAccountSerializer(serializers.Serializer):
    alias = serializers.CharField(max_length=50, required=False, allow_blank=True)
    email = serializers.EmailField(max_length=254, required=False)
    role = serializers.ChoiceField(choices=Role.choices, required=False)
    is_enabled = serializers.BooleanField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class AccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = [
            "id",
            "username",
            "email",
            "alias",
            "role",
            "is_enabled",
            "created_at",
            "last_login_at",
        ]
        read_only_fields = fields
