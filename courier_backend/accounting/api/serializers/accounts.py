# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account

RULE_CHOICES = [("", "Unset")] + Account.RULES


class AccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "category",
            "account_type",
            "debit_rule",
            "credit_rule",
            "description",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class _UpperChoicesMixin:
    """category / rules are accepted case-insensitively."""

    upper_fields = ("category", "debit_rule", "credit_rule")

    def to_internal_value(self, data):
        if hasattr(data, "copy"):
            data = data.copy()
            for key in self.upper_fields:
                if isinstance(data.get(key), str):
                    data[key] = data[key].strip().upper()
        return super().to_internal_value(data)


class AccountCreateSerializer(_UpperChoicesMixin, serializers.Serializer):
    """
    Input shape only; uniqueness and rule defaults are enforced by
    accounting.services.chart_service.create_account.
    """

    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    category = serializers.ChoiceField(choices=Account.CATEGORIES)
    account_type = serializers.CharField(max_length=60)
    debit_rule = serializers.ChoiceField(
        choices=RULE_CHOICES, required=False, allow_blank=True, default=""
    )
    credit_rule = serializers.ChoiceField(
        choices=RULE_CHOICES, required=False, allow_blank=True, default=""
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AccountUpdateSerializer(_UpperChoicesMixin, serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    category = serializers.ChoiceField(choices=Account.CATEGORIES, required=False)
    account_type = serializers.CharField(max_length=60, required=False)
    debit_rule = serializers.ChoiceField(choices=RULE_CHOICES, required=False, allow_blank=True)
    credit_rule = serializers.ChoiceField(choices=RULE_CHOICES, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
