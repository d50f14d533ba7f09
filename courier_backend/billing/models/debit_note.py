# billing/models/debit_note.py

"""
DEBIT NOTE MODEL

The vendor-side mirror of a credit note ("#DEBIT00001"): an amount
settled against a vendor outside the regular bill payment flow, backed
by an EXPENSE payment, a posted journal entry and a vendor ledger CREDIT.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.journal import JournalEntry
from billing.models.invoice import Invoice
from billing.models.payment import Payment
from parties.models import Vendor


class DebitNote(models.Model):
    NUMBER_PREFIX = "#DEBIT"

    debit_note_number = models.CharField(max_length=20, unique=True)

    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="debit_notes",
    )
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.SET_NULL,
        related_name="debit_notes",
        null=True,
        blank=True,
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    date = models.DateField()
    description = models.CharField(max_length=255, blank=True, default="")
    currency = models.CharField(max_length=10, default="USD")

    payment = models.OneToOneField(
        Payment,
        on_delete=models.PROTECT,
        related_name="debit_note",
        null=True,
        blank=True,
    )
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.SET_NULL,
        related_name="debit_notes",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Debit Note"
        verbose_name_plural = "Debit Notes"

    def __str__(self):
        return f"{self.debit_note_number} {self.amount} {self.currency}"
