# parties/api/serializers/parties.py

from rest_framework import serializers

from parties.models import CompanyAccount, Customer, Vendor

PARTY_FIELDS = (
    "id",
    "company_name",
    "person_name",
    "phone",
    "email",
    "address",
    "city",
    "country",
    "current_balance",
    "is_active",
    "created_at",
    "updated_at",
)


class CustomerSerializer(serializers.ModelSerializer):
    """
    current_balance is read-only: it only moves through ledger postings.
    """

    class Meta:
        model = Customer
        fields = PARTY_FIELDS + ("credit_limit",)
        read_only_fields = ("id", "current_balance", "created_at", "updated_at")

    def validate_company_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("company_name is required")
        return value


class VendorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vendor
        fields = PARTY_FIELDS
        read_only_fields = ("id", "current_balance", "created_at", "updated_at")

    def validate_company_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("company_name is required")
        return value


class CompanyAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = CompanyAccount
        fields = ("id", "name", "current_balance", "created_at", "updated_at")
        read_only_fields = fields
