# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.api.serializers.close_period import ClosePeriodSerializer
from accounting.api.serializers.journal_entries import (
    JournalEntryCreateSerializer,
    JournalEntryLineSerializer,
    JournalEntrySerializer,
)

__all__ = [
    "AccountSerializer",
    "AccountCreateSerializer",
    "AccountUpdateSerializer",
    "JournalEntrySerializer",
    "JournalEntryLineSerializer",
    "JournalEntryCreateSerializer",
    "ClosePeriodSerializer",
]
