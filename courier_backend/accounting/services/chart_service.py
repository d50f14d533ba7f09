# accounting/services/chart_service.py

"""
CHART OF ACCOUNTS SERVICE

Reference-data CRUD for Account rows plus the standard courier/logistics
chart used to bootstrap a fresh database.

Rules:
- Codes are globally unique
- An account referenced by journal lines cannot be deleted and cannot
  change category (its history would be reclassified)
- Default seeding only runs against an empty chart
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalEntryLine
from accounting.services.exceptions import (
    AlreadyInitializedError,
    DuplicateCodeError,
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)

logger = logging.getLogger("accounting")

A, L, E, R, X = (
    Account.ASSET,
    Account.LIABILITY,
    Account.EQUITY,
    Account.REVENUE,
    Account.EXPENSE,
)

# (code, name, category, type, description)
DEFAULT_ACCOUNTS = [
    # Assets
    ("1101", "Cash", A, "Current Asset", "Physical cash and bank accounts"),
    ("1102", "Accounts Receivable", A, "Current Asset", "Money owed by customers for transportation or logistics services"),
    ("1103", "Fuel Inventory", A, "Current Asset", "Fuel stock for transportation vehicles"),
    ("1104", "Spare Parts Inventory", A, "Current Asset", "Spare parts and accessories for vehicle maintenance"),
    ("1105", "Fleet Vehicles", A, "Fixed Asset", "Trucks, vans, and other vehicles used for transportation"),
    ("1106", "Warehousing Facilities", A, "Fixed Asset", "Storage warehouses used in logistics operations"),
    ("1107", "Office Equipment", A, "Fixed Asset", "Office furniture, computers, and administrative equipment"),
    ("1108", "Prepaid Insurance", A, "Prepayment", "Insurance premiums paid in advance for vehicles and cargo"),
    ("1109", "Prepaid Rent", A, "Prepayment", "Advance rent payments for warehouses or office spaces"),
    # Liabilities
    ("2101", "Accounts Payable", L, "Current Liability", "Money owed to suppliers, contractors, or vendors"),
    ("2102", "Taxes Payable", L, "Current Liability", "Taxes owed to government authorities"),
    ("2103", "Wages Payable", L, "Current Liability", "Unpaid salaries and wages owed to drivers and staff"),
    ("2201", "Vehicle Loan Payable", L, "Non-Current Liability", "Long-term loans for purchasing fleet vehicles"),
    ("2202", "Warehouse Mortgage Payable", L, "Non-Current Liability", "Mortgage loans for warehousing facilities"),
    # Equity
    ("3101", "Owner's Equity", E, "Equity", "Owner's initial and additional investments in the business"),
    ("3102", "Retained Earnings", E, "Equity", "Cumulative profits retained in the business for reinvestment"),
    ("3103", "Current Year Earnings", E, "Equity", "Current year's net income or loss"),
    # Expenses
    ("4101", "Depreciation Expense - Fleet Vehicles", X, "Depreciation", "Depreciation of trucks, vans, and other vehicles"),
    ("4102", "Depreciation Expense - Warehousing Facilities", X, "Depreciation", "Depreciation of warehouses and storage facilities"),
    ("4201", "Fuel Costs", X, "Direct Costs", "Expenses related to fuel consumption for fleet vehicles"),
    ("4202", "Vehicle Maintenance", X, "Direct Costs", "Costs for repairing and maintaining fleet vehicles"),
    ("4203", "Driver Salaries", X, "Direct Costs", "Wages paid to vehicle drivers"),
    ("4301", "Warehouse Rent", X, "Overhead", "Rental costs for warehouses"),
    ("4302", "Utilities Expense", X, "Overhead", "Electricity, water, and internet expenses for facilities"),
    ("4303", "Administrative Salaries", X, "Overhead", "Salaries for administrative and office staff"),
    ("4304", "Insurance Expense", X, "Overhead", "Insurance costs for vehicles and cargo"),
    ("4305", "Vendor Expense", X, "Direct Costs", "Expenses paid to vendors for transportation and logistics services"),
    # Revenue
    ("5101", "Freight Revenue", R, "Revenue", "Revenue earned from freight and cargo transportation"),
    ("5102", "Logistics Services Revenue", R, "Revenue", "Revenue earned from logistics and warehousing services"),
    ("5103", "Vehicle Leasing Revenue", R, "Revenue", "Revenue earned from leasing vehicles to third parties"),
]

UPDATABLE_FIELDS = (
    "name",
    "category",
    "account_type",
    "debit_rule",
    "credit_rule",
    "description",
    "is_active",
)

VALID_CATEGORIES = {c for c, _ in Account.CATEGORIES}
VALID_RULES = {r for r, _ in Account.RULES} | {""}


def _clean_category(category) -> str:
    value = str(category or "").strip().upper()
    if value not in VALID_CATEGORIES:
        raise LedgerValidationError(
            f"Invalid category {category!r}. Use one of: {', '.join(sorted(VALID_CATEGORIES))}"
        )
    return value


def _clean_rule(rule, *, field: str) -> str:
    value = str(rule or "").strip().upper()
    if value not in VALID_RULES:
        raise LedgerValidationError(f"Invalid {field} {rule!r}. Use INCREASES or DECREASES")
    return value


def get_account(account_id) -> Account:
    try:
        return Account.objects.get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc


def get_account_by_code(code: str, *, active_only: bool = True) -> Account:
    code = (code or "").strip()
    if not code:
        raise LedgerValidationError("Account code is required")

    qs = Account.objects.filter(code=code)
    if active_only:
        qs = qs.filter(is_active=True)

    account = qs.first()
    if account is None:
        raise NotFoundError(
            f"Account with code={code} not found. Seed the chart with "
            "'python manage.py seed_courier_chart' or create it."
        )
    return account


def is_referenced(account: Account) -> bool:
    return JournalEntryLine.objects.filter(account=account).exists()


def create_account(
    *,
    code: str,
    name: str,
    category: str,
    account_type: str,
    debit_rule: str = "",
    credit_rule: str = "",
    description: str = "",
) -> Account:
    code = (code or "").strip()
    name = (name or "").strip()
    account_type = (account_type or "").strip()

    if not code or not name or not account_type:
        raise LedgerValidationError("Code, account name, category, and type are required")

    category = _clean_category(category)
    debit_rule = _clean_rule(debit_rule, field="debit_rule")
    credit_rule = _clean_rule(credit_rule, field="credit_rule")

    if not debit_rule and not credit_rule:
        debit_rule, credit_rule = Account.default_rules(category)

    if Account.objects.filter(code=code).exists():
        raise DuplicateCodeError(f"Account code {code} already exists")

    account = Account.objects.create(
        code=code,
        name=name,
        category=category,
        account_type=account_type,
        debit_rule=debit_rule,
        credit_rule=credit_rule,
        description=(description or "").strip(),
        is_active=True,
    )
    logger.info("Account created", extra={"account_code": code})
    return account


@transaction.atomic
def update_account(account_id, **fields) -> Account:
    try:
        account = Account.objects.select_for_update().get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Account not found") from exc

    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise LedgerValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    if "category" in fields and fields["category"] not in (None, ""):
        category = _clean_category(fields["category"])
        if category != account.category and is_referenced(account):
            raise ReferencedError(
                f"Cannot change category of account {account.code}: it has journal entries"
            )
        account.category = category

    for field in ("name", "account_type"):
        value = fields.get(field)
        if value not in (None, ""):
            setattr(account, field, str(value).strip())

    for field in ("debit_rule", "credit_rule"):
        if field in fields and fields[field] is not None:
            setattr(account, field, _clean_rule(fields[field], field=field))

    if "description" in fields and fields["description"] is not None:
        account.description = str(fields["description"]).strip()

    if "is_active" in fields and fields["is_active"] is not None:
        account.is_active = bool(fields["is_active"])

    account.save()
    logger.info("Account updated", extra={"account_code": account.code})
    return account


@transaction.atomic
def delete_account(account_id) -> None:
    account = get_account(account_id)

    if is_referenced(account):
        raise ReferencedError(
            f"Cannot delete account {account.code} with existing journal entries"
        )

    code = account.code
    account.delete()
    logger.info("Account deleted", extra={"account_code": code})


@transaction.atomic
def initialize_default_accounts() -> int:
    if Account.objects.exists():
        raise AlreadyInitializedError("Chart of accounts already initialized")

    accounts = []
    for code, name, category, account_type, description in DEFAULT_ACCOUNTS:
        debit_rule, credit_rule = Account.default_rules(category)
        accounts.append(
            Account(
                code=code,
                name=name,
                category=category,
                account_type=account_type,
                debit_rule=debit_rule,
                credit_rule=credit_rule,
                description=description,
                is_active=True,
            )
        )

    Account.objects.bulk_create(accounts)
    logger.info("Default chart of accounts initialized", extra={"count": len(accounts)})
    return len(accounts)


def list_accounts(
    *,
    search: str | None = None,
    category: str | None = None,
    account_type: str | None = None,
    is_active: bool | None = None,
):
    qs = Account.objects.all()

    search = (search or "").strip()
    if search:
        qs = qs.filter(
            Q(code__icontains=search)
            | Q(name__icontains=search)
            | Q(description__icontains=search)
        )
    if category:
        qs = qs.filter(category=str(category).strip().upper())
    if account_type:
        qs = qs.filter(account_type=account_type)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)

    return qs.order_by("category", "code")
