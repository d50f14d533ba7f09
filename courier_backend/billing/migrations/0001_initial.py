"""
======================================================
PATH: billing/migrations/0001_initial.py
======================================================
MIGRATION: INVOICES, PAYMENTS, CREDIT NOTES
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


def _id():
    return (
        "id",
        models.BigAutoField(
            auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
        ),
    )


def _positive_amount():
    return models.DecimalField(
        decimal_places=2,
        max_digits=14,
        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounting", "0001_initial"),
        ("parties", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                _id(),
                ("invoice_number", models.CharField(max_length=64, unique=True)),
                ("invoice_date", models.DateField()),
                (
                    "profile",
                    models.CharField(
                        choices=[("Customer", "Customer"), ("Vendor", "Vendor")],
                        max_length=10,
                    ),
                ),
                ("total_amount", _positive_amount()),
                ("currency", models.CharField(default="USD", max_length=10)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Unpaid", "Unpaid"),
                            ("Partial", "Partial"),
                            ("Paid", "Paid"),
                        ],
                        default="Unpaid",
                        max_length=10,
                    ),
                ),
                ("line_items", models.JSONField(blank=True, default=list)),
                ("tracking_number", models.CharField(blank=True, default="", max_length=100)),
                ("destination", models.CharField(blank=True, default="", max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="parties.customer",
                    ),
                ),
                (
                    "vendor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="parties.vendor",
                    ),
                ),
            ],
            options={
                "verbose_name": "Invoice",
                "verbose_name_plural": "Invoices",
                "ordering": ["-invoice_date", "-id"],
                "indexes": [
                    models.Index(fields=["invoice_date"], name="inv_date_idx"),
                    models.Index(fields=["status"], name="inv_status_idx"),
                    models.Index(fields=["profile", "status"], name="inv_profile_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(
                                profile="Customer",
                                customer__isnull=False,
                                vendor__isnull=True,
                            )
                            | models.Q(
                                profile="Vendor",
                                vendor__isnull=False,
                                customer__isnull=True,
                            )
                        ),
                        name="chk_invoice_party_matches_profile",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                _id(),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("INCOME", "Income"),
                            ("EXPENSE", "Expense"),
                            ("TRANSFER", "Transfer"),
                            ("RETURN", "Return"),
                        ],
                        max_length=10,
                    ),
                ),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("date", models.DateField()),
                ("currency", models.CharField(default="USD", max_length=10)),
                ("amount", _positive_amount()),
                (
                    "from_party_type",
                    models.CharField(
                        choices=[
                            ("CUSTOMER", "Customer"),
                            ("VENDOR", "Vendor"),
                            ("US", "Us"),
                            ("SYSTEM", "System"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "to_party_type",
                    models.CharField(
                        choices=[
                            ("CUSTOMER", "Customer"),
                            ("VENDOR", "Vendor"),
                            ("US", "Us"),
                            ("SYSTEM", "System"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "mode",
                    models.CharField(
                        choices=[
                            ("CASH", "Cash"),
                            ("BANK_TRANSFER", "Bank Transfer"),
                            ("CARD", "Card"),
                            ("CHEQUE", "Cheque"),
                        ],
                        default="CASH",
                        max_length=15,
                    ),
                ),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "from_customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="parties.customer",
                    ),
                ),
                (
                    "to_vendor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="parties.vendor",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="billing.invoice",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payment",
                "verbose_name_plural": "Payments",
                "ordering": ["-date", "-id"],
                "indexes": [
                    models.Index(
                        fields=["invoice", "transaction_type"], name="pay_invoice_type_idx"
                    ),
                    models.Index(fields=["date"], name="pay_date_idx"),
                    models.Index(fields=["reference"], name="pay_reference_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CreditNote",
            fields=[
                _id(),
                ("credit_note_number", models.CharField(max_length=20, unique=True)),
                ("amount", _positive_amount()),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("currency", models.CharField(default="USD", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_notes",
                        to="parties.customer",
                    ),
                ),
                (
                    "invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="credit_notes",
                        to="billing.invoice",
                    ),
                ),
                (
                    "payment",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_note",
                        to="billing.payment",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="credit_notes",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Credit Note",
                "verbose_name_plural": "Credit Notes",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
