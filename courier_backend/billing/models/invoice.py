# billing/models/invoice.py

"""
======================================================
PATH: billing/models/invoice.py
======================================================
INVOICE MODEL

A commercial document billed to a Customer (income) or received from a
Vendor (expense).

Rules:
- Exactly one party FK is set, and it matches `profile`
- `status` is derived from the payment sum
  (billing.services.invoice_status); it is never set by hand
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from accounting.models.journal import JournalEntry
from parties.models import Customer, Vendor


class Invoice(models.Model):
    CUSTOMER = "Customer"
    VENDOR = "Vendor"

    PROFILES = [
        (CUSTOMER, "Customer"),
        (VENDOR, "Vendor"),
    ]

    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"

    STATUSES = [
        (UNPAID, "Unpaid"),
        (PARTIAL, "Partial"),
        (PAID, "Paid"),
    ]

    OUTSTANDING = (UNPAID, PARTIAL)

    invoice_number = models.CharField(max_length=64, unique=True)
    invoice_date = models.DateField()

    profile = models.CharField(max_length=10, choices=PROFILES)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="invoices",
        null=True,
        blank=True,
    )
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="invoices",
        null=True,
        blank=True,
    )

    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=10, default="USD")
    status = models.CharField(max_length=10, choices=STATUSES, default=UNPAID)

    line_items = models.JSONField(default=list, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True, default="")
    destination = models.CharField(max_length=200, blank=True, default="")

    # posted entry recognising the invoice; reissued when total or date change
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.SET_NULL,
        related_name="invoices",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-invoice_date", "-id"]
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"
        indexes = [
            models.Index(fields=["invoice_date"], name="inv_date_idx"),
            models.Index(fields=["status"], name="inv_status_idx"),
            models.Index(fields=["profile", "status"], name="inv_profile_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(profile="Customer", customer__isnull=False, vendor__isnull=True)
                    | Q(profile="Vendor", vendor__isnull=False, customer__isnull=True)
                ),
                name="chk_invoice_party_matches_profile",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.profile}) {self.total_amount} {self.status}"

    @property
    def is_customer_invoice(self) -> bool:
        return self.profile == self.CUSTOMER

    @property
    def party(self):
        return self.customer if self.is_customer_invoice else self.vendor

    def clean(self):
        self.invoice_number = (self.invoice_number or "").strip()
        if not self.invoice_number:
            raise ValidationError({"invoice_number": "invoice_number is required"})

        if self.profile == self.CUSTOMER and (not self.customer_id or self.vendor_id):
            raise ValidationError("Customer invoices must reference a customer only")
        if self.profile == self.VENDOR and (not self.vendor_id or self.customer_id):
            raise ValidationError("Vendor invoices must reference a vendor only")

    def save(self, *args, **kwargs):
        # status refreshes pass update_fields and skip full validation
        if not kwargs.get("update_fields"):
            self.full_clean()
        return super().save(*args, **kwargs)
