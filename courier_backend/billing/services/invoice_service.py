# billing/services/invoice_service.py

"""
======================================================
PATH: billing/services/invoice_service.py
======================================================
INVOICE SERVICE

create_invoice() is one atomic unit:
1) Invoice row (status Unpaid)
2) Party ledger DEBIT for the total (customer owes us / we owe vendor)
3) Posted journal entry
   - Customer: Dr Accounts Receivable / Cr Logistics Services Revenue
   - Vendor:   Dr Vendor Expense      / Cr Accounts Payable

update_invoice() / delete_invoice() are blocked for the financial fields
once payments reference the invoice.
"""

from __future__ import annotations

import logging
from datetime import date as date_cls

from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import (
    DuplicateCodeError,
    InvoiceNotFoundError,
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)
from accounting.services.journal_entry_service import create_journal_entry, delete_journal_entry
from accounting.services.money import positive_money
from billing.models import Invoice
from billing.services import ledger_accounts
from parties.models import Customer, Vendor
from billing.services.invoice_status import refresh_invoice_status
from parties.services.balance_service import (
    CREDIT,
    DEBIT,
    post_customer_transaction,
    post_vendor_transaction,
)

logger = logging.getLogger("payments")

EDITABLE_FIELDS = (
    "invoice_date",
    "total_amount",
    "currency",
    "line_items",
    "tracking_number",
    "destination",
)


def normalize_profile(profile) -> str:
    value = str(profile or "").strip().lower()
    if value == "customer":
        return Invoice.CUSTOMER
    if value == "vendor":
        return Invoice.VENDOR
    raise LedgerValidationError("profile must be 'Customer' or 'Vendor'")


def get_invoice_by_number(invoice_number: str, *, lock: bool = False) -> Invoice:
    number = (invoice_number or "").strip()
    if not number:
        raise LedgerValidationError("invoice_number is required")

    qs = Invoice.objects.select_related("customer", "vendor")
    if lock:
        qs = qs.select_for_update(of=("self",))

    try:
        return qs.get(invoice_number=number)
    except Invoice.DoesNotExist as exc:
        raise InvoiceNotFoundError(f"Invoice {number} not found") from exc


def _invoice_accounts(invoice: Invoice):
    if invoice.is_customer_invoice:
        return ledger_accounts.receivable_account(), ledger_accounts.revenue_account()
    return ledger_accounts.vendor_expense_account(), ledger_accounts.payable_account()


def _post_invoice_entry(invoice: Invoice):
    number = invoice.invoice_number
    description = f"Invoice {number}"
    debit_account, credit_account = _invoice_accounts(invoice)
    amount = invoice.total_amount

    return create_journal_entry(
        date=invoice.invoice_date,
        description=f"{invoice.profile} invoice {number}",
        reference=number,
        lines=[
            {"account": debit_account, "debit": amount, "description": description},
            {"account": credit_account, "credit": amount, "description": description},
        ],
        post=True,
    )


def _post_invoice_party(invoice: Invoice, direction: str, amount, description: str):
    if invoice.is_customer_invoice:
        post = post_customer_transaction
        party_id = invoice.customer_id
    else:
        post = post_vendor_transaction
        party_id = invoice.vendor_id
    return post(
        party_id,
        direction,
        amount,
        description,
        reference=invoice.invoice_number,
        invoice_number=invoice.invoice_number,
    )


@transaction.atomic
def create_invoice(
    *,
    invoice_number: str,
    profile: str,
    total_amount,
    invoice_date: date_cls | None = None,
    customer_id=None,
    vendor_id=None,
    currency: str | None = None,
    line_items: list | None = None,
    tracking_number: str = "",
    destination: str = "",
) -> Invoice:
    number = (invoice_number or "").strip()
    if not number:
        raise LedgerValidationError("invoice_number is required")

    profile = normalize_profile(profile)
    amount = positive_money(total_amount, field="total_amount")
    invoice_date = invoice_date or timezone.localdate()

    if Invoice.objects.filter(invoice_number=number).exists():
        raise DuplicateCodeError(f"Invoice {number} already exists")

    customer = vendor = None
    try:
        if profile == Invoice.CUSTOMER:
            customer = Customer.objects.get(pk=customer_id)
        else:
            vendor = Vendor.objects.get(pk=vendor_id)
    except (Customer.DoesNotExist, Vendor.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"{profile} not found") from exc

    invoice = Invoice.objects.create(
        invoice_number=number,
        invoice_date=invoice_date,
        profile=profile,
        customer=customer,
        vendor=vendor,
        total_amount=amount,
        currency=(currency or ledger_accounts.default_currency()).strip(),
        status=Invoice.UNPAID,
        line_items=line_items or [],
        tracking_number=(tracking_number or "").strip(),
        destination=(destination or "").strip(),
    )

    _post_invoice_party(invoice, DEBIT, amount, f"Invoice {number}")
    invoice.journal_entry = _post_invoice_entry(invoice)
    invoice.save(update_fields=["journal_entry", "updated_at"])

    logger.info(
        "Invoice created",
        extra={"invoice_number": number, "profile": profile, "amount": str(amount)},
    )
    return invoice


def _lock_invoice(invoice_id) -> Invoice:
    try:
        return Invoice.objects.select_for_update().get(pk=invoice_id)
    except (Invoice.DoesNotExist, ValueError, TypeError) as exc:
        raise InvoiceNotFoundError("Invoice not found") from exc


def _has_payments(invoice: Invoice) -> bool:
    return invoice.payments.exists() or invoice.applied_payments.exists()


@transaction.atomic
def update_invoice(invoice_id, **changes) -> Invoice:
    """
    Edit an invoice.

    Descriptive fields (line_items, tracking_number, destination) can
    always change. The financial fields (total_amount, invoice_date,
    currency) are locked once any payment references the invoice. A new
    total posts the difference to the party ledger; a new total or date
    replaces the invoice's journal entry.
    """
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise LedgerValidationError(f"Cannot edit invoice fields: {', '.join(sorted(unknown))}")

    invoice = _lock_invoice(invoice_id)
    number = invoice.invoice_number

    new_total = invoice.total_amount
    if changes.get("total_amount") not in (None, ""):
        new_total = positive_money(changes["total_amount"], field="total_amount")
    new_date = changes.get("invoice_date") or invoice.invoice_date
    new_currency = invoice.currency
    if changes.get("currency"):
        new_currency = str(changes["currency"]).strip()

    financial_change = (
        new_total != invoice.total_amount
        or new_date != invoice.invoice_date
        or new_currency != invoice.currency
    )
    if financial_change and _has_payments(invoice):
        raise ReferencedError(
            f"Invoice {number} has payments; its amount, date and currency cannot change"
        )

    if "line_items" in changes:
        invoice.line_items = changes["line_items"] or []
    for field in ("tracking_number", "destination"):
        if field in changes:
            setattr(invoice, field, (changes[field] or "").strip())

    delta = new_total - invoice.total_amount
    reissue = delta != 0 or new_date != invoice.invoice_date

    invoice.total_amount = new_total
    invoice.invoice_date = new_date
    invoice.currency = new_currency

    if delta > 0:
        _post_invoice_party(invoice, DEBIT, delta, f"Invoice {number} increased")
    elif delta < 0:
        _post_invoice_party(invoice, CREDIT, -delta, f"Invoice {number} reduced")

    if reissue:
        delete_journal_entry(invoice.journal_entry_id)
        invoice.journal_entry = _post_invoice_entry(invoice)

    invoice.save()
    refresh_invoice_status(invoice)

    logger.info(
        "Invoice updated",
        extra={"invoice_number": number, "amount": str(new_total), "reissued": reissue},
    )
    return invoice


@transaction.atomic
def delete_invoice(invoice_id) -> dict:
    """
    Delete an invoice that no payment references: the party ledger gets a
    reversing CREDIT and the invoice's journal entry is removed.
    """
    invoice = _lock_invoice(invoice_id)
    number = invoice.invoice_number

    if _has_payments(invoice):
        raise ReferencedError(f"Invoice {number} has payments and cannot be deleted")

    _post_invoice_party(invoice, CREDIT, invoice.total_amount, f"Reversal of invoice {number}")
    deleted_entries = delete_journal_entry(invoice.journal_entry_id)
    invoice.delete()

    logger.info(
        "Invoice deleted",
        extra={"invoice_number": number, "journal_entries_deleted": deleted_entries},
    )
    return {"invoice_number": number, "journal_entries_deleted": deleted_entries}
