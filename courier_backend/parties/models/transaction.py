# parties/models/transaction.py

"""
PARTY TRANSACTION MODELS

One posting against a party's running balance.

Guarantees:
- Append-only (no updates, no deletes)
- Amount is always positive; direction is via `direction`
- previous_balance / new_balance are snapshots taken at post time
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from parties.models.party import CompanyAccount, Customer, Vendor


class PartyTransaction(models.Model):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"

    DIRECTIONS = [
        (CREDIT, "Credit"),
        (DEBIT, "Debit"),
    ]

    direction = models.CharField(max_length=6, choices=DIRECTIONS)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    description = models.CharField(max_length=255)
    reference = models.CharField(max_length=100, blank=True, default="")
    invoice_number = models.CharField(max_length=64, blank=True, default="")

    previous_balance = models.DecimalField(max_digits=14, decimal_places=2)
    new_balance = models.DecimalField(max_digits=14, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.direction} {self.amount} ({self.previous_balance} → {self.new_balance})"

    def clean(self):
        if self.direction not in (self.CREDIT, self.DEBIT):
            raise ValidationError("Invalid direction")
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Transaction amount must be > 0")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError(
                f"{self.__class__.__name__} records are immutable and cannot be modified"
            )

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            f"{self.__class__.__name__} records are immutable and cannot be deleted"
        )


class CustomerTransaction(PartyTransaction):
    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    class Meta(PartyTransaction.Meta):
        verbose_name = "Customer Transaction"
        verbose_name_plural = "Customer Transactions"
        indexes = [
            models.Index(
                fields=["customer", "created_at"], name="custtx_customer_created_idx"
            ),
            models.Index(fields=["invoice_number"], name="custtx_invoice_idx"),
        ]


class VendorTransaction(PartyTransaction):
    vendor = models.ForeignKey(
        Vendor,
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    class Meta(PartyTransaction.Meta):
        verbose_name = "Vendor Transaction"
        verbose_name_plural = "Vendor Transactions"
        indexes = [
            models.Index(
                fields=["vendor", "created_at"], name="vendtx_vendor_created_idx"
            ),
            models.Index(fields=["invoice_number"], name="vendtx_invoice_idx"),
        ]


class CompanyTransaction(PartyTransaction):
    company_account = models.ForeignKey(
        CompanyAccount,
        on_delete=models.PROTECT,
        related_name="transactions",
    )

    class Meta(PartyTransaction.Meta):
        verbose_name = "Company Transaction"
        verbose_name_plural = "Company Transactions"
        indexes = [
            models.Index(
                fields=["company_account", "created_at"], name="comptx_account_created_idx"
            ),
        ]
