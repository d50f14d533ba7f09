# billing/api/serializers/credit_notes.py

from decimal import Decimal

from rest_framework import serializers

from billing.models import CreditNote


class CreditNoteSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.company_name", read_only=True)
    invoice_number = serializers.CharField(
        source="invoice.invoice_number", read_only=True, default=None
    )

    class Meta:
        model = CreditNote
        fields = (
            "id",
            "credit_note_number",
            "customer",
            "customer_name",
            "invoice",
            "invoice_number",
            "amount",
            "date",
            "description",
            "currency",
            "payment",
            "journal_entry",
            "created_at",
        )
        read_only_fields = fields


class CreditNoteCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    date = serializers.DateField()
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    invoice_id = serializers.IntegerField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=10, required=False, allow_blank=True)
