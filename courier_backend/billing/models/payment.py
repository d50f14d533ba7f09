# billing/models/payment.py

"""
======================================================
PATH: billing/models/payment.py
======================================================
PAYMENT MODEL

One recorded cash movement. Created once per business event by the
billing services; `invoice` is a real FK so payment sums are joins,
not string matches. Edits and deletes go through payment_service so
the party ledgers and the journal follow.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.journal import JournalEntry
from billing.models.invoice import Invoice
from parties.models import Customer, Vendor


class Payment(models.Model):
    # transaction types
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    RETURN = "RETURN"

    TRANSACTION_TYPES = [
        (INCOME, "Income"),
        (EXPENSE, "Expense"),
        (TRANSFER, "Transfer"),
        (RETURN, "Return"),
    ]

    # party types
    CUSTOMER = "CUSTOMER"
    VENDOR = "VENDOR"
    US = "US"
    SYSTEM = "SYSTEM"

    PARTY_TYPES = [
        (CUSTOMER, "Customer"),
        (VENDOR, "Vendor"),
        (US, "Us"),
        (SYSTEM, "System"),
    ]

    # modes
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CARD = "CARD"
    CHEQUE = "CHEQUE"

    MODES = [
        (CASH, "Cash"),
        (BANK_TRANSFER, "Bank Transfer"),
        (CARD, "Card"),
        (CHEQUE, "Cheque"),
    ]

    transaction_type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    category = models.CharField(max_length=100, blank=True, default="")
    date = models.DateField()
    currency = models.CharField(max_length=10, default="USD")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    from_party_type = models.CharField(max_length=10, choices=PARTY_TYPES)
    to_party_type = models.CharField(max_length=10, choices=PARTY_TYPES)

    from_customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="payments",
        null=True,
        blank=True,
    )
    to_vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="payments",
        null=True,
        blank=True,
    )

    mode = models.CharField(max_length=15, choices=MODES, default=CASH)

    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="payments",
        null=True,
        blank=True,
    )
    # "Balance Applied" payments: the invoice whose overpayment credit funded them
    source_invoice = models.ForeignKey(
        Invoice,
        on_delete=models.PROTECT,
        related_name="applied_payments",
        null=True,
        blank=True,
    )

    reference = models.CharField(max_length=100, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.SET_NULL,
        related_name="payments",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-id"]
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        indexes = [
            models.Index(fields=["invoice", "transaction_type"], name="pay_invoice_type_idx"),
            models.Index(fields=["date"], name="pay_date_idx"),
            models.Index(fields=["reference"], name="pay_reference_idx"),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} {self.currency} ({self.category})"
