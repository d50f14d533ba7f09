# billing/services/ledger_accounts.py

"""
Default posting accounts for billing flows, resolved by chart code from
settings.LEDGER (overridable per environment).
"""

from __future__ import annotations

from django.conf import settings

from accounting.models.account import Account
from accounting.services.chart_service import get_account, get_account_by_code

DEFAULT_CODES = {
    "CASH_ACCOUNT_CODE": "1101",
    "RECEIVABLE_ACCOUNT_CODE": "1102",
    "PAYABLE_ACCOUNT_CODE": "2101",
    "REVENUE_ACCOUNT_CODE": "5102",
    "VENDOR_EXPENSE_ACCOUNT_CODE": "4305",
}


def ledger_setting(key: str) -> str:
    conf = getattr(settings, "LEDGER", {}) or {}
    return str(conf.get(key) or DEFAULT_CODES.get(key, "")).strip()


def default_currency() -> str:
    conf = getattr(settings, "LEDGER", {}) or {}
    return (conf.get("CURRENCY") or "USD").strip()


def resolve(key: str) -> Account:
    return get_account_by_code(ledger_setting(key))


def cash_account() -> Account:
    return resolve("CASH_ACCOUNT_CODE")


def receivable_account() -> Account:
    return resolve("RECEIVABLE_ACCOUNT_CODE")


def payable_account() -> Account:
    return resolve("PAYABLE_ACCOUNT_CODE")


def revenue_account() -> Account:
    return resolve("REVENUE_ACCOUNT_CODE")


def vendor_expense_account() -> Account:
    return resolve("VENDOR_EXPENSE_ACCOUNT_CODE")


def account_or_default(account_id, default) -> Account:
    """Explicit account id wins; otherwise call `default()`."""
    if account_id in (None, ""):
        return default()
    return get_account(account_id)
