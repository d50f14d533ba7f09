# billing/admin.py

from django.contrib import admin

from billing.models import CreditNote, DebitNote, Invoice, Payment

# ============================================================
# INVOICE (amounts and status change only through billing services)
# ============================================================


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "invoice_date",
        "profile",
        "customer",
        "vendor",
        "total_amount",
        "currency",
        "status",
    )
    list_filter = ("profile", "status", "currency")
    search_fields = ("invoice_number", "tracking_number", "customer__company_name", "vendor__company_name")
    ordering = ("-invoice_date",)
    readonly_fields = (
        "invoice_date",
        "total_amount",
        "currency",
        "status",
        "journal_entry",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# PAYMENTS / CREDIT & DEBIT NOTES (created only by billing services)
# ============================================================


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "date",
        "transaction_type",
        "category",
        "amount",
        "mode",
        "invoice",
        "reference",
        "journal_entry",
    )
    list_filter = ("transaction_type", "category", "mode")
    search_fields = ("reference", "description", "invoice__invoice_number")
    ordering = ("-date", "-id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "customer", "invoice", "amount", "date", "currency")
    search_fields = ("credit_note_number", "description", "customer__company_name")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DebitNote)
class DebitNoteAdmin(admin.ModelAdmin):
    list_display = ("debit_note_number", "vendor", "invoice", "amount", "date", "currency")
    search_fields = ("debit_note_number", "description", "vendor__company_name")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
