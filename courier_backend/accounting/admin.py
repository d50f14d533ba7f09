# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    Account,
    EntryNumberSequence,
    JournalEntry,
    JournalEntryLine,
    PeriodClose,
)

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "category",
        "account_type",
        "is_active",
    )
    list_filter = ("category", "account_type", "is_active")
    search_fields = ("code", "name", "description")
    ordering = ("category", "code")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("code", "name", "category", "account_type", "description"),
            },
        ),
        (
            "Posting Rules",
            {
                "fields": ("debit_rule", "credit_rule"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active",),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# JOURNAL ENTRY (READ-ONLY)
# ============================================================


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class JournalEntryLineInline(admin.TabularInline):
    model = JournalEntryLine
    extra = 0
    can_delete = False
    fields = ("account", "debit_amount", "credit_amount", "description", "reference")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "entry_number",
        "date",
        "description",
        "reference",
        "total_debit",
        "is_posted",
        "posted_at",
    )
    list_filter = ("is_posted", "date")
    search_fields = ("entry_number", "description", "reference")
    ordering = ("-date", "-entry_number")
    inlines = [JournalEntryLineInline]

    readonly_fields = (
        "entry_number",
        "date",
        "description",
        "reference",
        "total_debit",
        "total_credit",
        "is_posted",
        "posted_at",
        "created_at",
    )


@admin.register(JournalEntryLine)
class JournalEntryLineAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "journal_entry",
        "account",
        "debit_amount",
        "credit_amount",
        "reference",
    )
    list_filter = ("account__category",)
    search_fields = ("journal_entry__entry_number", "account__code", "reference")
    list_select_related = ("journal_entry", "account")


@admin.register(EntryNumberSequence)
class EntryNumberSequenceAdmin(ReadOnlyAdmin):
    list_display = ("name", "last_value")


# ============================================================
# PERIOD CLOSE (AUDIT)
# ============================================================


@admin.register(PeriodClose)
class PeriodCloseAdmin(ReadOnlyAdmin):
    list_display = (
        "start_date",
        "end_date",
        "total_revenue",
        "total_expenses",
        "net_income",
        "journal_entry",
        "created_at",
    )
    ordering = ("-end_date",)
