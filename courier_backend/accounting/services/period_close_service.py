# PATH: accounting/services/period_close_service.py

"""
PERIOD CLOSE SERVICE

Transfers the period's net income into the Current Year Earnings equity
account with ONE posted journal entry.

Guarantees:
- Idempotent per (start_date, end_date): a second call returns the
  PeriodClose record's entry without reprocessing. Manual entries that
  happen to carry a CLOSE-<start>-<end> reference are never mistaken
  for the closing entry
- Atomic: journal entry + PeriodClose audit record created together
- Balanced: the entry goes through journal_entry_service like every other

Balance policy:
- Balances are cumulative over all POSTED lines dated on/before end_date
- Revenue accounts: credit - debit; Expense accounts: debit - credit
- Only positive per-account balances are added to the totals
- |net income| < 0.01 creates no entry
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.journal import JournalEntryLine
from accounting.models.period_close import PeriodClose
from accounting.services.exceptions import LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import create_journal_entry
from accounting.services.money import BALANCE_TOLERANCE, ZERO, money

logger = logging.getLogger("accounting")

EQUITY_NAME_PREFERENCE = ("current year earnings", "retained earnings")
CLOSING_PREFIX = "CLOSE-"


def closing_reference(start_date: date, end_date: date) -> str:
    return f"{CLOSING_PREFIX}{start_date.isoformat()}-{end_date.isoformat()}"


def _resolve_earnings_account() -> Account:
    equity = Account.objects.filter(category=Account.EQUITY, is_active=True).order_by("code")

    for needle in EQUITY_NAME_PREFERENCE:
        account = equity.filter(name__icontains=needle).first()
        if account:
            return account

    fallback = equity.first()
    if fallback:
        return fallback

    raise NotFoundError("No equity account found for closing entries")


def _first_account(category: str) -> Account | None:
    return (
        Account.objects.filter(category=category, is_active=True).order_by("code").first()
    )


def compute_income_totals(*, end_date: date) -> tuple[Decimal, Decimal]:
    """
    (total_revenue, total_expenses) from posted lines dated <= end_date,
    summing only positive per-account balances.
    """
    per_account = (
        JournalEntryLine.objects.filter(
            journal_entry__is_posted=True,
            journal_entry__date__lte=end_date,
            account__category__in=[Account.REVENUE, Account.EXPENSE],
        )
        .order_by()
        .values("account_id", "account__category")
        .annotate(
            debit_total=Coalesce(Sum("debit_amount"), ZERO),
            credit_total=Coalesce(Sum("credit_amount"), ZERO),
        )
    )

    total_revenue = ZERO
    total_expenses = ZERO

    for row in per_account:
        debit = money(row["debit_total"])
        credit = money(row["credit_total"])

        if row["account__category"] == Account.REVENUE:
            balance = credit - debit
            if balance > ZERO:
                total_revenue += balance
        else:
            balance = debit - credit
            if balance > ZERO:
                total_expenses += balance

    return total_revenue, total_expenses


def _existing_result(record: PeriodClose) -> dict:
    return {
        "journal_entry": record.journal_entry,
        "created": False,
        "total_revenue": record.total_revenue,
        "total_expenses": record.total_expenses,
        "net_income": record.net_income,
    }


@transaction.atomic
def close_period(*, start_date: date, end_date: date) -> dict:
    """
    CLOSE PERIOD (net income -> Current Year Earnings)

    Returns {"journal_entry", "created", "total_revenue", "total_expenses", "net_income"};
    journal_entry is None when there was no net income to close.
    """
    if not start_date or not end_date:
        raise LedgerValidationError("Start date and end date are required")
    if start_date > end_date:
        raise LedgerValidationError("start_date cannot be after end_date")

    reference = closing_reference(start_date, end_date)

    existing = (
        PeriodClose.objects.select_related("journal_entry")
        .filter(start_date=start_date, end_date=end_date)
        .first()
    )
    if existing:
        logger.info("Closing entry already exists", extra={"reference": reference})
        return _existing_result(existing)

    earnings = _resolve_earnings_account()

    total_revenue, total_expenses = compute_income_totals(end_date=end_date)
    net_income = total_revenue - total_expenses

    result = {
        "journal_entry": None,
        "created": False,
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net_income": net_income,
    }

    if abs(net_income) < BALANCE_TOLERANCE:
        logger.info("No net income to close", extra={"reference": reference})
        return result

    amount = abs(net_income)
    summary = f"Revenue: {total_revenue}, Expenses: {total_expenses}"

    if net_income > ZERO:
        offset = _first_account(Account.REVENUE)
        lines = [
            {
                "account": earnings,
                "credit": amount,
                "description": f"Close Net Income to Current Year Earnings ({summary})",
                "reference": reference,
            },
            {
                "account": offset,
                "debit": amount,
                "description": "Close Net Income Summary",
                "reference": reference,
            },
        ]
    else:
        offset = _first_account(Account.EXPENSE)
        lines = [
            {
                "account": earnings,
                "debit": amount,
                "description": f"Close Net Loss to Current Year Earnings ({summary})",
                "reference": reference,
            },
            {
                "account": offset,
                "credit": amount,
                "description": "Close Net Loss Summary",
                "reference": reference,
            },
        ]

    if offset is None:
        raise NotFoundError("No active revenue/expense account available for the closing summary line")

    entry = create_journal_entry(
        date=end_date,
        description=(
            "Closing Entry: Transfer Net Income to Equity for period "
            f"{start_date.isoformat()} to {end_date.isoformat()}"
        ),
        reference=reference,
        lines=lines,
        post=True,
    )

    try:
        with transaction.atomic():
            PeriodClose.objects.create(
                start_date=start_date,
                end_date=end_date,
                journal_entry=entry,
                total_revenue=total_revenue,
                total_expenses=total_expenses,
                net_income=net_income,
            )
    except (IntegrityError, ValidationError) as exc:
        raise LedgerValidationError(
            "Period was closed concurrently; retry to receive the existing closing entry"
        ) from exc

    logger.info(
        "Period closed",
        extra={
            "reference": reference,
            "entry_number": entry.entry_number,
            "net_income": str(net_income),
        },
    )

    result["journal_entry"] = entry
    result["created"] = True
    return result
