# accounting/models/period_close.py

"""
======================================================
PATH: accounting/models/period_close.py
======================================================
PERIOD CLOSE MODEL

Audit record of a closing entry (net income -> Current Year Earnings).

Audit guarantees:
- Immutable once created
- Non-deletable
- One record per (start_date, end_date); the unique constraint is the
  race backstop for the CLOSE-<start>-<end> idempotency lookup
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.journal import JournalEntry


class PeriodClose(models.Model):
    start_date = models.DateField()
    end_date = models.DateField()

    journal_entry = models.OneToOneField(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="period_close",
        help_text="The closing journal entry (net income -> equity).",
    )

    total_revenue = models.DecimalField(max_digits=14, decimal_places=2)
    total_expenses = models.DecimalField(max_digits=14, decimal_places=2)
    net_income = models.DecimalField(max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-end_date", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["start_date", "end_date"],
                name="uniq_period_close_start_end",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_close_end_gte_start",
            ),
        ]
        verbose_name = "Period Close"
        verbose_name_plural = "Period Closes"

    def __str__(self):
        return f"PeriodClose {self.start_date} → {self.end_date}"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("PeriodClose records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PeriodClose records are immutable and cannot be deleted")
