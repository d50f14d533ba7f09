# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODELS

JournalEntry is the header of one balanced accounting transaction;
JournalEntryLine is one leg of it.

Guarantees:
- Header fields and lines are immutable once created
- The only permitted update is the one-way posting transition
  (is_posted False -> True, posted_at stamped)
- total_debit == total_credit is enforced by a DB constraint
- Each line carries exactly one non-zero side (DB constraint)
- Entries are created ONLY via accounting.services.journal_entry_service
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.account import Account

POSTING_FIELDS = frozenset({"is_posted", "posted_at"})


class JournalEntry(models.Model):
    entry_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Sequential human-readable number (JE-0001)",
    )

    date = models.DateField(help_text="Accounting effective date")

    description = models.TextField(help_text="Narrative description of the journal entry")

    reference = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="External reference (invoice number, CLOSE-<start>-<end>, etc.)",
    )

    total_debit = models.DecimalField(max_digits=14, decimal_places=2)
    total_credit = models.DecimalField(max_digits=14, decimal_places=2)

    is_posted = models.BooleanField(default=False)
    posted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-entry_number"]
        indexes = [
            models.Index(fields=["date"], name="je_date_idx"),
            models.Index(fields=["reference"], name="je_reference_idx"),
            models.Index(fields=["is_posted"], name="je_posted_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_debit=F("total_credit")),
                name="chk_journal_entry_balanced",
            ),
            models.CheckConstraint(
                condition=Q(total_debit__gt=Decimal("0.00")),
                name="chk_journal_entry_total_positive",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"{self.entry_number} – {self.date}"

    def clean(self):
        self.reference = (self.reference or "").strip()
        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

    def save(self, *args, **kwargs):
        if self.pk:
            update_fields = kwargs.get("update_fields")
            if not update_fields or not set(update_fields) <= POSTING_FIELDS:
                raise ValidationError(
                    "JournalEntry records are immutable once created (only posting is allowed)"
                )
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "JournalEntry records cannot be deleted directly; delete the parent document instead"
        )


class JournalEntryLine(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    credit_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    description = models.CharField(max_length=255, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        ordering = ["id"]
        verbose_name = "Journal Entry Line"
        verbose_name_plural = "Journal Entry Lines"
        indexes = [
            models.Index(fields=["account"], name="jel_account_idx"),
            models.Index(fields=["journal_entry"], name="jel_entry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(debit_amount__gt=Decimal("0.00"), credit_amount=Decimal("0.00"))
                    | Q(debit_amount=Decimal("0.00"), credit_amount__gt=Decimal("0.00"))
                ),
                name="chk_journal_line_one_side",
            ),
        ]

    def __str__(self):
        side = "Dr" if self.debit_amount else "Cr"
        amount = self.debit_amount or self.credit_amount
        return f"{side} {amount} → {self.account}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntryLine records are immutable once created")
        return super().save(*args, **kwargs)


class EntryNumberSequence(models.Model):
    """
    Named document counter, one row per sequence ("journal_entry",
    "credit_note", "debit_note").

    Locked with select_for_update() by the journal service so that two
    concurrent writers can never derive the same number, and numbers of
    deleted documents are never reused.
    """

    name = models.CharField(max_length=50, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Entry Number Sequence"

    def __str__(self):
        return f"{self.name}={self.last_value}"
