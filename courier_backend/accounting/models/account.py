# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A single node in the Chart of Accounts.

    Guarantees:
    - Account codes are globally unique
    - Code + name are normalized (trimmed)
    - debit_rule / credit_rule describe how each side moves the balance
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    CATEGORIES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    INCREASES = "INCREASES"
    DECREASES = "DECREASES"

    RULES = [
        (INCREASES, "Increases"),
        (DECREASES, "Decreases"),
    ]

    # Categories whose balance grows on the debit side
    DEBIT_NORMAL = (ASSET, EXPENSE)

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)

    category = models.CharField(max_length=20, choices=CATEGORIES)
    account_type = models.CharField(
        max_length=60,
        help_text="Sub-classification, e.g. 'Current Asset' or 'Direct Costs'",
    )

    debit_rule = models.CharField(max_length=10, choices=RULES, blank=True, default="")
    credit_rule = models.CharField(max_length=10, choices=RULES, blank=True, default="")

    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["category", "code"], name="acct_category_code_idx"),
            models.Index(fields=["account_type"], name="acct_type_idx"),
            models.Index(fields=["is_active"], name="acct_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @classmethod
    def default_rules(cls, category: str) -> tuple[str, str]:
        """(debit_rule, credit_rule) implied by the category's normal balance."""
        if category in cls.DEBIT_NORMAL:
            return cls.INCREASES, cls.DECREASES
        return cls.DECREASES, cls.INCREASES

    @property
    def is_debit_normal(self) -> bool:
        if self.debit_rule:
            return self.debit_rule == self.INCREASES
        return self.category in self.DEBIT_NORMAL

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.account_type = (self.account_type or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")
        if not self.account_type:
            raise ValidationError("Account type is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
