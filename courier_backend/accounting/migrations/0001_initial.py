"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: CHART OF ACCOUNTS + JOURNAL + PERIOD CLOSE

DB-level guarantees:
- Account code unique and non-blank
- Journal entry totals balanced and positive
- Journal lines carry exactly one non-zero side
- One period close per (start_date, end_date)
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=150)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "account_type",
                    models.CharField(
                        help_text="Sub-classification, e.g. 'Current Asset' or 'Direct Costs'",
                        max_length=60,
                    ),
                ),
                (
                    "debit_rule",
                    models.CharField(
                        blank=True,
                        choices=[("INCREASES", "Increases"), ("DECREASES", "Decreases")],
                        default="",
                        max_length=10,
                    ),
                ),
                (
                    "credit_rule",
                    models.CharField(
                        blank=True,
                        choices=[("INCREASES", "Increases"), ("DECREASES", "Decreases")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["category", "code"],
                "indexes": [
                    models.Index(fields=["category", "code"], name="acct_category_code_idx"),
                    models.Index(fields=["account_type"], name="acct_type_idx"),
                    models.Index(fields=["is_active"], name="acct_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=~models.Q(code=""), name="chk_account_code_not_blank"
                    ),
                    models.CheckConstraint(
                        condition=~models.Q(name=""), name="chk_account_name_not_blank"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EntryNumberSequence",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=50, unique=True)),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
            options={
                "verbose_name": "Entry Number Sequence",
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "entry_number",
                    models.CharField(
                        help_text="Sequential human-readable number (JE-0001)",
                        max_length=20,
                        unique=True,
                    ),
                ),
                ("date", models.DateField(help_text="Accounting effective date")),
                (
                    "description",
                    models.TextField(help_text="Narrative description of the journal entry"),
                ),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="External reference (invoice number, CLOSE-<start>-<end>, etc.)",
                        max_length=100,
                    ),
                ),
                ("total_debit", models.DecimalField(decimal_places=2, max_digits=14)),
                ("total_credit", models.DecimalField(decimal_places=2, max_digits=14)),
                ("is_posted", models.BooleanField(default=False)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-date", "-entry_number"],
                "indexes": [
                    models.Index(fields=["date"], name="je_date_idx"),
                    models.Index(fields=["reference"], name="je_reference_idx"),
                    models.Index(fields=["is_posted"], name="je_posted_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total_debit=models.F("total_credit")),
                        name="chk_journal_entry_balanced",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(total_debit__gt=Decimal("0.00")),
                        name="chk_journal_entry_total_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntryLine",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "debit_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "credit_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry Line",
                "verbose_name_plural": "Journal Entry Lines",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account"], name="jel_account_idx"),
                    models.Index(fields=["journal_entry"], name="jel_entry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(
                                debit_amount__gt=Decimal("0.00"),
                                credit_amount=Decimal("0.00"),
                            )
                            | models.Q(
                                debit_amount=Decimal("0.00"),
                                credit_amount__gt=Decimal("0.00"),
                            )
                        ),
                        name="chk_journal_line_one_side",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PeriodClose",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("total_revenue", models.DecimalField(decimal_places=2, max_digits=14)),
                ("total_expenses", models.DecimalField(decimal_places=2, max_digits=14)),
                ("net_income", models.DecimalField(decimal_places=2, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "journal_entry",
                    models.OneToOneField(
                        help_text="The closing journal entry (net income -> equity).",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_close",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Period Close",
                "verbose_name_plural": "Period Closes",
                "ordering": ["-end_date", "-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("start_date", "end_date"),
                        name="uniq_period_close_start_end",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="chk_period_close_end_gte_start",
                    ),
                ],
            },
        ),
    ]
