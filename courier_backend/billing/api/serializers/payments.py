# billing/api/serializers/payments.py

from decimal import Decimal

from rest_framework import serializers

from billing.models import Payment
from billing.services.payment_service import PAYMENT_TYPES


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(
        source="invoice.invoice_number", read_only=True, default=None
    )
    entry_number = serializers.CharField(
        source="journal_entry.entry_number", read_only=True, default=None
    )

    class Meta:
        model = Payment
        fields = (
            "id",
            "transaction_type",
            "category",
            "date",
            "currency",
            "amount",
            "from_party_type",
            "to_party_type",
            "from_customer",
            "to_vendor",
            "mode",
            "invoice",
            "invoice_number",
            "source_invoice",
            "reference",
            "description",
            "journal_entry",
            "entry_number",
            "created_at",
        )
        read_only_fields = fields


class ProcessPaymentSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=64)
    payment_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPES)
    payment_method = serializers.ChoiceField(
        choices=[m for m, _ in Payment.MODES], required=False, default=Payment.CASH
    )
    reference = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    debit_account_id = serializers.IntegerField(required=False, allow_null=True)
    credit_account_id = serializers.IntegerField(required=False, allow_null=True)
    payment_date = serializers.DateField(required=False, allow_null=True)


class AllocateExcessSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(choices=PAYMENT_TYPES)
    excess_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    original_invoice_number = serializers.CharField(max_length=64)
    payment_reference = serializers.CharField(max_length=100)
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    vendor_id = serializers.IntegerField(required=False, allow_null=True)
    specific_invoices = serializers.ListField(
        child=serializers.CharField(max_length=64), required=False, allow_empty=True
    )
    payment_date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs["payment_type"] == "CUSTOMER_PAYMENT" and not attrs.get("customer_id"):
            raise serializers.ValidationError(
                {"customer_id": "customer_id is required for customer payments"}
            )
        if attrs["payment_type"] == "VENDOR_PAYMENT" and not attrs.get("vendor_id"):
            raise serializers.ValidationError(
                {"vendor_id": "vendor_id is required for vendor payments"}
            )
        return attrs


class PaymentUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    date = serializers.DateField(required=False)
    mode = serializers.ChoiceField(choices=[m for m, _ in Payment.MODES], required=False)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No editable fields supplied")
        return attrs
