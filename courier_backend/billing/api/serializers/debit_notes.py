# billing/api/serializers/debit_notes.py

from decimal import Decimal

from rest_framework import serializers

from billing.models import DebitNote


class DebitNoteSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.company_name", read_only=True)
    invoice_number = serializers.CharField(
        source="invoice.invoice_number", read_only=True, default=None
    )

    class Meta:
        model = DebitNote
        fields = (
            "id",
            "debit_note_number",
            "vendor",
            "vendor_name",
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


class DebitNoteCreateSerializer(serializers.Serializer):
    vendor_id = serializers.IntegerField()
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    date = serializers.DateField()
    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True, default=""
    )
    invoice_id = serializers.IntegerField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=10, required=False, allow_blank=True)
