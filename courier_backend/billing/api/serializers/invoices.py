# billing/api/serializers/invoices.py

"""
======================================================
PATH: billing/api/serializers/invoices.py
======================================================
INVOICE SERIALIZERS

Read: InvoiceSerializer (status is derived, never writable)
Write: InvoiceCreateSerializer validates shape + profile/party pairing;
InvoiceUpdateSerializer takes a partial edit. Posting rules live in
billing.services.invoice_service
"""

from decimal import Decimal

from rest_framework import serializers

from billing.models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    party_name = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = (
            "id",
            "invoice_number",
            "invoice_date",
            "profile",
            "customer",
            "vendor",
            "party_name",
            "total_amount",
            "currency",
            "status",
            "line_items",
            "tracking_number",
            "destination",
            "journal_entry",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_party_name(self, obj):
        party = obj.party
        return party.display_name if party else None


class InvoiceCreateSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=64)
    invoice_date = serializers.DateField(required=False)
    profile = serializers.CharField(max_length=10)
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    vendor_id = serializers.IntegerField(required=False, allow_null=True)
    total_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01")
    )
    currency = serializers.CharField(max_length=10, required=False, allow_blank=True)
    line_items = serializers.ListField(
        child=serializers.DictField(), required=False, default=list
    )
    tracking_number = serializers.CharField(
        max_length=100, required=False, allow_blank=True, default=""
    )
    destination = serializers.CharField(
        max_length=200, required=False, allow_blank=True, default=""
    )

    def validate_profile(self, value):
        value = (value or "").strip().lower()
        if value == "customer":
            return Invoice.CUSTOMER
        if value == "vendor":
            return Invoice.VENDOR
        raise serializers.ValidationError("profile must be 'Customer' or 'Vendor'")

    def validate(self, attrs):
        if attrs["profile"] == Invoice.CUSTOMER:
            if not attrs.get("customer_id"):
                raise serializers.ValidationError({"customer_id": "Required for customer invoices"})
            attrs["vendor_id"] = None
        else:
            if not attrs.get("vendor_id"):
                raise serializers.ValidationError({"vendor_id": "Required for vendor invoices"})
            attrs["customer_id"] = None
        return attrs


class InvoiceUpdateSerializer(serializers.Serializer):
    invoice_date = serializers.DateField(required=False)
    total_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    currency = serializers.CharField(max_length=10, required=False)
    line_items = serializers.ListField(child=serializers.DictField(), required=False)
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    destination = serializers.CharField(max_length=200, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("No editable fields supplied")
        return attrs
