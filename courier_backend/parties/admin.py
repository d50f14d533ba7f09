# parties/admin.py

from django.contrib import admin

from parties.models import (
    CompanyAccount,
    CompanyTransaction,
    Customer,
    CustomerTransaction,
    Vendor,
    VendorTransaction,
)

# ============================================================
# PARTIES (balance is read-only; it moves via postings)
# ============================================================


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "company_name",
        "person_name",
        "phone",
        "current_balance",
        "credit_limit",
        "is_active",
    )
    list_filter = ("is_active", "country")
    search_fields = ("company_name", "person_name", "email", "phone")
    ordering = ("company_name",)
    readonly_fields = ("current_balance", "created_at", "updated_at")


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = (
        "company_name",
        "person_name",
        "phone",
        "current_balance",
        "is_active",
    )
    list_filter = ("is_active", "country")
    search_fields = ("company_name", "person_name", "email", "phone")
    ordering = ("company_name",)
    readonly_fields = ("current_balance", "created_at", "updated_at")


@admin.register(CompanyAccount)
class CompanyAccountAdmin(admin.ModelAdmin):
    list_display = ("name", "current_balance", "updated_at")
    readonly_fields = ("current_balance", "created_at", "updated_at")


# ============================================================
# TRANSACTIONS (STRICTLY IMMUTABLE)
# ============================================================


class ImmutableTransactionAdmin(admin.ModelAdmin):
    list_filter = ("direction",)
    search_fields = ("description", "reference", "invoice_number")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CustomerTransaction)
class CustomerTransactionAdmin(ImmutableTransactionAdmin):
    list_display = (
        "id",
        "customer",
        "direction",
        "amount",
        "previous_balance",
        "new_balance",
        "invoice_number",
        "created_at",
    )


@admin.register(VendorTransaction)
class VendorTransactionAdmin(ImmutableTransactionAdmin):
    list_display = (
        "id",
        "vendor",
        "direction",
        "amount",
        "previous_balance",
        "new_balance",
        "invoice_number",
        "created_at",
    )


@admin.register(CompanyTransaction)
class CompanyTransactionAdmin(ImmutableTransactionAdmin):
    list_display = (
        "id",
        "company_account",
        "direction",
        "amount",
        "previous_balance",
        "new_balance",
        "created_at",
    )
