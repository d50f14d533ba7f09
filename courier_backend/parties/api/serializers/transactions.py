# parties/api/serializers/transactions.py

"""
======================================================
PATH: parties/api/serializers/transactions.py
======================================================
PARTY TRANSACTION SERIALIZERS

Read side: one serializer per ledger (rows are append-only).
Write side: ManualPostingSerializer validates input shape only;
balance rules live in parties.services.balance_service.
"""

from decimal import Decimal

from rest_framework import serializers

from parties.models import (
    CompanyTransaction,
    CustomerTransaction,
    PartyTransaction,
    VendorTransaction,
)

TRANSACTION_FIELDS = (
    "id",
    "direction",
    "amount",
    "description",
    "reference",
    "invoice_number",
    "previous_balance",
    "new_balance",
    "created_at",
)


class CustomerTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerTransaction
        fields = TRANSACTION_FIELDS + ("customer",)
        read_only_fields = fields


class VendorTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = VendorTransaction
        fields = TRANSACTION_FIELDS + ("vendor",)
        read_only_fields = fields


class CompanyTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanyTransaction
        fields = TRANSACTION_FIELDS + ("company_account",)
        read_only_fields = fields


class ManualPostingSerializer(serializers.Serializer):
    # "type" is accepted as an alias for direction
    direction = serializers.ChoiceField(
        choices=[c for c, _ in PartyTransaction.DIRECTIONS], required=False
    )
    type = serializers.ChoiceField(
        choices=[c for c, _ in PartyTransaction.DIRECTIONS],
        required=False,
        write_only=True,
    )
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    description = serializers.CharField(max_length=255)
    reference = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    invoice_number = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True
    )

    def validate(self, attrs):
        direction = attrs.pop("type", None) or attrs.get("direction")
        if not direction:
            raise serializers.ValidationError(
                {"direction": "Type must be CREDIT or DEBIT"}
            )
        attrs["direction"] = direction
        return attrs
