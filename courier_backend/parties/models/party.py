# parties/models/party.py

"""
PARTY MODELS

Customer, Vendor and the single CompanyAccount each carry a running
`current_balance`. The balance is only ever changed by
parties.services.balance_service, together with an appended transaction row.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class BaseParty(models.Model):
    company_name = models.CharField(max_length=200)
    person_name = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    country = models.CharField(max_length=100, blank=True, default="")

    current_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["company_name"]

    def __str__(self):
        return self.company_name

    @property
    def display_name(self) -> str:
        return self.company_name or self.person_name

    def clean(self):
        self.company_name = (self.company_name or "").strip()
        self.person_name = (self.person_name or "").strip()
        if not self.company_name:
            raise ValidationError({"company_name": "company_name is required"})


class Customer(BaseParty):
    """Balance = amount the customer owes us (negative = prepaid credit)."""

    credit_limit = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    class Meta(BaseParty.Meta):
        verbose_name = "Customer"
        verbose_name_plural = "Customers"
        indexes = [
            models.Index(fields=["company_name"], name="cust_company_name_idx"),
            models.Index(fields=["is_active"], name="cust_active_idx"),
        ]


class Vendor(BaseParty):
    """Balance = amount we owe the vendor."""

    class Meta(BaseParty.Meta):
        verbose_name = "Vendor"
        verbose_name_plural = "Vendors"
        indexes = [
            models.Index(fields=["company_name"], name="vend_company_name_idx"),
            models.Index(fields=["is_active"], name="vend_active_idx"),
        ]


class CompanyAccount(models.Model):
    """Our own cash/bank position. Created on first use."""

    DEFAULT_NAME = "Main Company Account"

    name = models.CharField(max_length=100, default=DEFAULT_NAME)
    current_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        verbose_name = "Company Account"
        verbose_name_plural = "Company Accounts"

    def __str__(self):
        return self.name
