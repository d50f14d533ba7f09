"""
======================================================
PATH: parties/migrations/0001_initial.py
======================================================
MIGRATION: PARTIES + BALANCE LEDGERS

Creates Customer, Vendor, CompanyAccount and their append-only
transaction tables.
"""

from __future__ import annotations

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


def _party_fields():
    return [
        (
            "id",
            models.BigAutoField(
                auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
            ),
        ),
        ("company_name", models.CharField(max_length=200)),
        ("person_name", models.CharField(blank=True, default="", max_length=200)),
        ("phone", models.CharField(blank=True, default="", max_length=50)),
        ("email", models.EmailField(blank=True, default="", max_length=254)),
        ("address", models.TextField(blank=True, default="")),
        ("city", models.CharField(blank=True, default="", max_length=100)),
        ("country", models.CharField(blank=True, default="", max_length=100)),
        (
            "current_balance",
            models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
        ),
        ("is_active", models.BooleanField(default=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def _transaction_fields():
    return [
        (
            "id",
            models.BigAutoField(
                auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
            ),
        ),
        (
            "direction",
            models.CharField(
                choices=[("CREDIT", "Credit"), ("DEBIT", "Debit")], max_length=6
            ),
        ),
        (
            "amount",
            models.DecimalField(
                decimal_places=2,
                help_text="Positive monetary value",
                max_digits=14,
                validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
            ),
        ),
        ("description", models.CharField(max_length=255)),
        ("reference", models.CharField(blank=True, default="", max_length=100)),
        ("invoice_number", models.CharField(blank=True, default="", max_length=64)),
        ("previous_balance", models.DecimalField(decimal_places=2, max_digits=14)),
        ("new_balance", models.DecimalField(decimal_places=2, max_digits=14)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
    ]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=_party_fields()
            + [
                (
                    "credit_limit",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=14
                    ),
                ),
            ],
            options={
                "verbose_name": "Customer",
                "verbose_name_plural": "Customers",
                "ordering": ["company_name"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["company_name"], name="cust_company_name_idx"),
                    models.Index(fields=["is_active"], name="cust_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=_party_fields(),
            options={
                "verbose_name": "Vendor",
                "verbose_name_plural": "Vendors",
                "ordering": ["company_name"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["company_name"], name="vend_company_name_idx"),
                    models.Index(fields=["is_active"], name="vend_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CompanyAccount",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(default="Main Company Account", max_length=100),
                ),
                (
                    "current_balance",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=14
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Company Account",
                "verbose_name_plural": "Company Accounts",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="CustomerTransaction",
            fields=_transaction_fields()
            + [
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="parties.customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Customer Transaction",
                "verbose_name_plural": "Customer Transactions",
                "ordering": ["-created_at", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["customer", "created_at"],
                        name="custtx_customer_created_idx",
                    ),
                    models.Index(fields=["invoice_number"], name="custtx_invoice_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="VendorTransaction",
            fields=_transaction_fields()
            + [
                (
                    "vendor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="parties.vendor",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vendor Transaction",
                "verbose_name_plural": "Vendor Transactions",
                "ordering": ["-created_at", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["vendor", "created_at"],
                        name="vendtx_vendor_created_idx",
                    ),
                    models.Index(fields=["invoice_number"], name="vendtx_invoice_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CompanyTransaction",
            fields=_transaction_fields()
            + [
                (
                    "company_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="parties.companyaccount",
                    ),
                ),
            ],
            options={
                "verbose_name": "Company Transaction",
                "verbose_name_plural": "Company Transactions",
                "ordering": ["-created_at", "-id"],
                "abstract": False,
                "indexes": [
                    models.Index(
                        fields=["company_account", "created_at"],
                        name="comptx_account_created_idx",
                    ),
                ],
            },
        ),
    ]
