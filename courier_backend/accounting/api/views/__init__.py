# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import (
    AccountDetailView,
    AccountListCreateView,
    InitializeAccountsView,
)
from accounting.api.views.close_period import ClosePeriodView
from accounting.api.views.journal_entries import (
    JournalEntryDetailView,
    JournalEntryListCreateView,
    PostJournalEntryView,
)

__all__ = [
    "AccountListCreateView",
    "AccountDetailView",
    "InitializeAccountsView",
    "JournalEntryListCreateView",
    "JournalEntryDetailView",
    "PostJournalEntryView",
    "ClosePeriodView",
]
