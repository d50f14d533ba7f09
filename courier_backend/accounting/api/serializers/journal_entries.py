# accounting/api/serializers/journal_entries.py

"""
======================================================
PATH: accounting/api/serializers/journal_entries.py
======================================================
JOURNAL ENTRY SERIALIZERS

Read side: entry header + nested lines with account summaries.
Write side: shape validation only. Balancing, the one-side rule and
account resolution belong to journal_entry_service.create_journal_entry,
which reports them with typed errors (unbalanced_entry / invalid_line).
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.models.journal import JournalEntry, JournalEntryLine
from accounting.services.period_close_service import CLOSING_PREFIX


class JournalEntryLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalEntryLine
        fields = (
            "id",
            "account",
            "account_code",
            "account_name",
            "debit_amount",
            "credit_amount",
            "description",
            "reference",
        )
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalEntryLineSerializer(many=True, read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "entry_number",
            "date",
            "description",
            "reference",
            "total_debit",
            "total_credit",
            "is_posted",
            "posted_at",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False, allow_null=True)
    debit = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, default=Decimal("0.00")
    )
    credit = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, default=Decimal("0.00")
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="")


class JournalEntryCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    description = serializers.CharField()
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    post = serializers.BooleanField(required=False, default=False)
    lines = JournalLineInputSerializer(many=True)

    def validate_reference(self, value):
        value = (value or "").strip()
        if value.upper().startswith(CLOSING_PREFIX):
            raise serializers.ValidationError(
                f"References starting with {CLOSING_PREFIX} are reserved for closing entries"
            )
        return value
