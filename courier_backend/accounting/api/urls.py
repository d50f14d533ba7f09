# accounting/api/urls.py

from django.urls import path

from accounting.api.views import (
    AccountDetailView,
    AccountListCreateView,
    ClosePeriodView,
    InitializeAccountsView,
    JournalEntryDetailView,
    JournalEntryListCreateView,
    PostJournalEntryView,
)

urlpatterns = [
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path(
        "accounts/initialize/",
        InitializeAccountsView.as_view(),
        name="accounts-initialize",
    ),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),
    # Journal
    path("journal-entries/", JournalEntryListCreateView.as_view(), name="journal-entries"),
    path(
        "journal-entries/<int:pk>/",
        JournalEntryDetailView.as_view(),
        name="journal-entry-detail",
    ),
    path(
        "journal-entries/<int:pk>/post/",
        PostJournalEntryView.as_view(),
        name="journal-entry-post",
    ),
    # Period close
    path("close-period/", ClosePeriodView.as_view(), name="close-period"),
]
