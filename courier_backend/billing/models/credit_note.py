# billing/models/credit_note.py

"""
CREDIT NOTE MODEL

A customer credit ("#CREDIT00001") backed by an INCOME payment, a posted
journal entry and a customer ledger CREDIT.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.journal import JournalEntry
from billing.models.invoice import Invoice
from billing.models.payment import Payment
from parties.models import Customer


class CreditNote(models.Model):
    NUMBER_PREFIX = "#CREDIT"

    credit_note_number = models.CharField(max_length=20, unique=True)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="credit_notes",
    )
    invoice = models.ForeignKey(
        Invoice,
        on_delete=models.SET_NULL,
        related_name="credit_notes",
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
        related_name="credit_note",
        null=True,
        blank=True,
    )
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.SET_NULL,
        related_name="credit_notes",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Credit Note"
        verbose_name_plural = "Credit Notes"

    def __str__(self):
        return f"{self.credit_note_number} {self.amount} {self.currency}"
