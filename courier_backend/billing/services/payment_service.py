# billing/services/payment_service.py

"""
======================================================
PATH: billing/services/payment_service.py
======================================================
PAYMENT ORCHESTRATOR

process_payment():
    invoice payment -> party ledger(s) + Payment row + posted journal entry
    + invoice status, all in ONE transaction (any failure rolls back
    every store).

allocate_excess_payment():
    greedy oldest-first consumption of a party's outstanding invoices
    with an unapplied overpayment credit.

update_payment() / delete_payment():
    reverse the postings of a payment (party ledger, company position,
    journal entry) and, for an edit, post it again.

Payment types:
- CUSTOMER_PAYMENT: money in (INCOME); customer CREDIT, company CREDIT
- VENDOR_PAYMENT:   money out (EXPENSE); vendor CREDIT, company DEBIT
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import date as date_cls
from decimal import Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.services.exceptions import (
    AccountingServiceError,
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)
from accounting.services.journal_entry_service import create_journal_entry, delete_journal_entry
from accounting.services.money import ZERO, money, positive_money
from billing.models import Invoice, Payment
from billing.services import ledger_accounts
from billing.services.invoice_service import get_invoice_by_number
from billing.services.invoice_status import (
    calculate_invoice_payment_status,
    refresh_invoice_status,
)
from parties.models import Customer, CustomerTransaction, Vendor, VendorTransaction
from parties.services.balance_service import (
    CREDIT,
    DEBIT,
    post_company_transaction,
    post_customer_transaction,
    post_vendor_transaction,
)

logger = logging.getLogger("payments")

CUSTOMER_PAYMENT = "CUSTOMER_PAYMENT"
VENDOR_PAYMENT = "VENDOR_PAYMENT"
PAYMENT_TYPES = (CUSTOMER_PAYMENT, VENDOR_PAYMENT)

CUSTOMER_PAYMENT_CATEGORY = "Customer Payment"
VENDOR_PAYMENT_CATEGORY = "Vendor Payment"
BALANCE_APPLIED = "Balance Applied"

VALID_MODES = {m for m, _ in Payment.MODES}


def overpayment_reference(invoice_number: str) -> str:
    return f"CREDIT-{invoice_number}"


def _normalize_payment_type(payment_type) -> str:
    value = str(payment_type or "").strip().upper()
    if value not in PAYMENT_TYPES:
        raise LedgerValidationError(
            "payment_type must be CUSTOMER_PAYMENT or VENDOR_PAYMENT"
        )
    return value


def _normalize_mode(mode) -> str:
    value = str(mode or Payment.CASH).strip().upper().replace(" ", "_")
    if value not in VALID_MODES:
        raise LedgerValidationError(
            f"Invalid payment_method. Use one of: {', '.join(sorted(VALID_MODES))}"
        )
    return value


def _post_party(payment_type: str, party_id, direction: str, amount, description, reference, invoice_number):
    post = post_customer_transaction if payment_type == CUSTOMER_PAYMENT else post_vendor_transaction
    return post(
        party_id,
        direction,
        amount,
        description,
        reference=reference,
        invoice_number=invoice_number,
    )


def _payment_parties(payment_type: str, invoice: Invoice) -> dict:
    if payment_type == CUSTOMER_PAYMENT:
        return {
            "transaction_type": Payment.INCOME,
            "from_party_type": Payment.CUSTOMER,
            "to_party_type": Payment.US,
            "from_customer": invoice.customer,
            "to_vendor": None,
        }
    return {
        "transaction_type": Payment.EXPENSE,
        "from_party_type": Payment.US,
        "to_party_type": Payment.VENDOR,
        "from_customer": None,
        "to_vendor": invoice.vendor,
    }


# ============================================================
# PROCESS PAYMENT
# ============================================================


def _payment_accounts(is_customer: bool, debit_account_id=None, credit_account_id=None):
    if is_customer:
        debit_account = ledger_accounts.account_or_default(
            debit_account_id, ledger_accounts.cash_account
        )
        credit_account = ledger_accounts.account_or_default(
            credit_account_id, ledger_accounts.receivable_account
        )
    else:
        debit_account = ledger_accounts.account_or_default(
            debit_account_id, ledger_accounts.payable_account
        )
        credit_account = ledger_accounts.account_or_default(
            credit_account_id, ledger_accounts.cash_account
        )

    if debit_account.pk == credit_account.pk:
        raise LedgerValidationError("Debit and credit accounts must be different")
    return debit_account, credit_account


def _post_payment(
    *,
    payment_type: str,
    invoice: Invoice,
    amount,
    remaining,
    reference: str,
    narrative: str,
    pay_date,
    debit_account,
    credit_account,
) -> dict:
    """Party ledger, company position and journal entry for one invoice payment."""
    number = invoice.invoice_number
    is_customer = payment_type == CUSTOMER_PAYMENT
    party_id = invoice.customer_id if is_customer else invoice.vendor_id

    amount_for_invoice = min(amount, remaining)
    overpayment = max(ZERO, amount - remaining)

    # 1) party ledger
    if amount_for_invoice > ZERO:
        _post_party(
            payment_type,
            party_id,
            CREDIT,
            amount_for_invoice,
            f"Payment for invoice {number}",
            reference or number,
            number,
        )
    if overpayment > ZERO:
        _post_party(
            payment_type,
            party_id,
            CREDIT,
            overpayment,
            f"Overpayment credit for invoice {number}",
            overpayment_reference(number),
            number,
        )

    # 2) company cash position
    post_company_transaction(
        CREDIT if is_customer else DEBIT,
        amount,
        f"{'Customer' if is_customer else 'Vendor'} payment for invoice {number}",
        reference=reference or number,
        invoice_number=number,
    )

    # 3) journal entry (full amount)
    entry = create_journal_entry(
        date=pay_date,
        description=narrative,
        reference=reference or number,
        lines=[
            {"account": debit_account, "debit": amount, "description": narrative},
            {"account": credit_account, "credit": amount, "description": narrative},
        ],
        post=True,
    )

    return {
        "journal_entry": entry,
        "amount_for_invoice": amount_for_invoice,
        "overpayment": overpayment,
    }


@transaction.atomic
def _process_payment(
    *,
    invoice_number: str,
    payment_amount,
    payment_type: str,
    payment_method: str,
    reference: str,
    description: str,
    debit_account_id,
    credit_account_id,
    payment_date: date_cls | None,
) -> dict:
    payment_type = _normalize_payment_type(payment_type)
    mode = _normalize_mode(payment_method)
    amount = positive_money(payment_amount, field="payment_amount")

    invoice = get_invoice_by_number(invoice_number, lock=True)
    number = invoice.invoice_number

    if payment_type == CUSTOMER_PAYMENT and not invoice.is_customer_invoice:
        raise LedgerValidationError(f"Invoice {number} is not a customer invoice")
    if payment_type == VENDOR_PAYMENT and invoice.is_customer_invoice:
        raise LedgerValidationError(f"Invoice {number} is not a vendor invoice")

    is_customer = payment_type == CUSTOMER_PAYMENT
    debit_account, credit_account = _payment_accounts(
        is_customer, debit_account_id, credit_account_id
    )

    status_before = calculate_invoice_payment_status(invoice)
    reference = (reference or "").strip()
    pay_date = payment_date or timezone.localdate()
    narrative = (description or "").strip() or f"Payment for invoice {number}"

    posted = _post_payment(
        payment_type=payment_type,
        invoice=invoice,
        amount=amount,
        remaining=status_before["remaining_amount"],
        reference=reference,
        narrative=narrative,
        pay_date=pay_date,
        debit_account=debit_account,
        credit_account=credit_account,
    )
    entry = posted["journal_entry"]

    # 4) payment row
    payment = Payment.objects.create(
        **_payment_parties(payment_type, invoice),
        category=CUSTOMER_PAYMENT_CATEGORY if is_customer else VENDOR_PAYMENT_CATEGORY,
        date=pay_date,
        currency=invoice.currency,
        amount=amount,
        mode=mode,
        invoice=invoice,
        reference=reference,
        description=narrative[:255],
        journal_entry=entry,
    )

    # 5) invoice status
    status_after = refresh_invoice_status(invoice)

    logger.info(
        "Payment processed",
        extra={
            "invoice_number": number,
            "payment_id": payment.id,
            "amount": str(amount),
            "overpayment": str(posted["overpayment"]),
            "entry_number": entry.entry_number,
            "status": status_after["status"],
        },
    )

    return {
        "invoice": invoice,
        "payment": payment,
        "journal_entry": entry,
        "amount_for_invoice": posted["amount_for_invoice"],
        "overpayment": posted["overpayment"],
        "total_paid": status_after["total_paid"],
        "remaining_amount": status_after["remaining_amount"],
        "status": status_after["status"],
    }


def process_payment(
    *,
    invoice_number: str,
    payment_amount,
    payment_type: str,
    payment_method: str = Payment.CASH,
    reference: str = "",
    description: str = "",
    debit_account_id=None,
    credit_account_id=None,
    payment_date: date_cls | None = None,
) -> dict:
    """
    PROCESS INVOICE PAYMENT (atomic saga)

    Raises InvoiceNotFoundError, LedgerValidationError, NotFoundError
    (missing posting account) or journal errors; nothing is persisted on failure.
    """
    logger.info(
        "Initiating invoice payment",
        extra={
            "invoice_number": invoice_number,
            "amount": str(payment_amount),
            "payment_type": payment_type,
        },
    )

    try:
        return _process_payment(
            invoice_number=invoice_number,
            payment_amount=payment_amount,
            payment_type=payment_type,
            payment_method=payment_method,
            reference=reference,
            description=description,
            debit_account_id=debit_account_id,
            credit_account_id=credit_account_id,
            payment_date=payment_date,
        )
    except AccountingServiceError as exc:
        logger.error(
            "Payment rejected",
            extra={"invoice_number": invoice_number, "error_code": exc.code.value},
        )
        raise
    except Exception:
        logger.exception(
            "Unexpected failure processing payment",
            extra={"invoice_number": invoice_number},
        )
        raise


# ============================================================
# OUTSTANDING INVOICES
# ============================================================


def _party_profile(party_type) -> str:
    value = str(party_type or "").strip().upper()
    if value in ("CUSTOMER", CUSTOMER_PAYMENT):
        return Invoice.CUSTOMER
    if value in ("VENDOR", VENDOR_PAYMENT):
        return Invoice.VENDOR
    raise LedgerValidationError("party_type must be CUSTOMER or VENDOR")


def outstanding_invoices(
    party_type,
    party_id,
    *,
    exclude_invoice_number: str | None = None,
    specific_invoices: list | None = None,
) -> list[dict]:
    """
    Unpaid/Partial invoices of one party, oldest first (invoice_date, id),
    each as {"invoice", "total_paid", "remaining_amount"} with remaining > 0.
    """
    profile = _party_profile(party_type)
    direction = Payment.INCOME if profile == Invoice.CUSTOMER else Payment.EXPENSE
    party_filter = {"customer_id": party_id} if profile == Invoice.CUSTOMER else {"vendor_id": party_id}

    qs = Invoice.objects.filter(
        profile=profile, status__in=Invoice.OUTSTANDING, **party_filter
    )
    if exclude_invoice_number:
        qs = qs.exclude(invoice_number=exclude_invoice_number)
    if specific_invoices:
        wanted = [str(n).strip() for n in specific_invoices if str(n).strip()]
        qs = qs.filter(invoice_number__in=wanted)

    qs = qs.annotate(
        paid=Coalesce(
            Sum("payments__amount", filter=Q(payments__transaction_type=direction)),
            ZERO,
        )
    ).order_by("invoice_date", "id")

    rows = []
    for invoice in qs:
        paid = money(invoice.paid)
        remaining = money(invoice.total_amount) - paid
        if remaining > ZERO:
            rows.append({"invoice": invoice, "total_paid": paid, "remaining_amount": remaining})
    return rows


# ============================================================
# EXCESS PAYMENT ALLOCATION
# ============================================================


def _lock_party(payment_type: str, party_id):
    model = Customer if payment_type == CUSTOMER_PAYMENT else Vendor
    try:
        return model.objects.select_for_update().get(pk=party_id)
    except (model.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"{model.__name__} not found") from exc


def unapplied_credit(payment_type: str, party_id, invoice_number: str) -> Decimal:
    """Overpayment credit from one invoice that has not been applied elsewhere yet."""
    model = CustomerTransaction if payment_type == CUSTOMER_PAYMENT else VendorTransaction
    party_filter = (
        {"customer_id": party_id} if payment_type == CUSTOMER_PAYMENT else {"vendor_id": party_id}
    )
    agg = model.objects.filter(
        reference=overpayment_reference(invoice_number), **party_filter
    ).aggregate(
        credits=Coalesce(Sum("amount", filter=Q(direction=CREDIT)), ZERO),
        debits=Coalesce(Sum("amount", filter=Q(direction=DEBIT)), ZERO),
    )
    return money(agg["credits"]) - money(agg["debits"])


@transaction.atomic
def allocate_excess_payment(
    *,
    payment_type: str,
    excess_amount,
    original_invoice_number: str,
    payment_reference: str,
    customer_id=None,
    vendor_id=None,
    specific_invoices: list | None = None,
    payment_date: date_cls | None = None,
) -> dict:
    """
    Apply an unapplied overpayment credit to the party's outstanding invoices.

    Each allocation creates a "Balance Applied" Payment on the target invoice
    plus a party-ledger pair that nets to zero: a DEBIT consuming the credit
    (reference CREDIT-<original>) and a CREDIT applying it to the target.
    No journal entry: the cash was journaled when it was received.

    Returns {"allocations", "total_allocated", "unapplied_credit"};
    total_allocated + unapplied_credit == excess_amount.

    Raises InvoiceNotFoundError for an unknown original invoice and
    LedgerValidationError when it belongs to another party or the excess
    is more than its unapplied credit.
    """
    payment_type = _normalize_payment_type(payment_type)
    excess = positive_money(excess_amount, field="excess_amount")

    original = (original_invoice_number or "").strip()
    if not original:
        raise LedgerValidationError("original_invoice_number is required")

    payment_reference = (payment_reference or "").strip()
    if not payment_reference:
        raise LedgerValidationError("payment_reference is required")

    party_id = customer_id if payment_type == CUSTOMER_PAYMENT else vendor_id
    if party_id in (None, ""):
        raise LedgerValidationError(
            "customer_id is required" if payment_type == CUSTOMER_PAYMENT else "vendor_id is required"
        )

    party = _lock_party(payment_type, party_id)

    source = get_invoice_by_number(original)
    owner_id = source.customer_id if payment_type == CUSTOMER_PAYMENT else source.vendor_id
    if owner_id != party.pk:
        raise LedgerValidationError(f"Invoice {original} does not belong to this party")

    available = unapplied_credit(payment_type, party.pk, original)
    if excess > available:
        raise LedgerValidationError(
            f"Excess amount {excess} exceeds the unapplied credit {available} "
            f"from invoice {original}"
        )

    pay_date = payment_date or timezone.localdate()

    queue = deque(
        outstanding_invoices(
            payment_type,
            party.pk,
            exclude_invoice_number=original,
            specific_invoices=specific_invoices,
        )
    )

    remaining_credit = excess
    allocations = []

    while remaining_credit > ZERO and queue:
        row = queue.popleft()
        invoice = row["invoice"]
        applied = min(remaining_credit, row["remaining_amount"])
        number = invoice.invoice_number

        payment = Payment.objects.create(
            **_payment_parties(payment_type, invoice),
            category=BALANCE_APPLIED,
            date=pay_date,
            currency=invoice.currency,
            amount=applied,
            mode=Payment.CASH,
            invoice=invoice,
            source_invoice=source,
            reference=payment_reference,
            description=f"Balance applied from invoice {original} to {number}",
        )

        _post_party(
            payment_type,
            party.pk,
            DEBIT,
            applied,
            f"Credit from invoice {original} applied to invoice {number}",
            overpayment_reference(original),
            original,
        )
        _post_party(
            payment_type,
            party.pk,
            CREDIT,
            applied,
            f"Balance applied from invoice {original}",
            payment_reference,
            number,
        )

        status = refresh_invoice_status(invoice)
        remaining_credit -= applied

        allocations.append(
            {
                "invoice_id": invoice.id,
                "invoice_number": number,
                "allocated_amount": applied,
                "remaining_amount": status["remaining_amount"],
                "status": status["status"],
                "payment_id": payment.id,
            }
        )

    total_allocated = excess - remaining_credit

    logger.info(
        "Excess payment allocated",
        extra={
            "original_invoice_number": original,
            "excess_amount": str(excess),
            "total_allocated": str(total_allocated),
            "allocations": len(allocations),
        },
    )

    return {
        "allocations": allocations,
        "total_allocated": total_allocated,
        "unapplied_credit": remaining_credit,
    }


def outstanding_total(rows: list[dict]) -> Decimal:
    return sum((r["remaining_amount"] for r in rows), ZERO)


# ============================================================
# EDIT / DELETE
# ============================================================


def _lock_payment(payment_id) -> Payment:
    try:
        return Payment.objects.select_for_update().get(pk=payment_id)
    except (Payment.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Payment not found") from exc


def _ensure_not_note_backed(payment: Payment) -> None:
    for attr, label in (("credit_note", "credit note"), ("debit_note", "debit note")):
        note = getattr(payment, attr, None)
        if note is not None:
            number = getattr(note, f"{attr}_number")
            raise ReferencedError(
                f"Payment belongs to {label} {number}; delete the {label} instead"
            )


def _invoice_payment_type(invoice: Invoice) -> str:
    return CUSTOMER_PAYMENT if invoice.is_customer_invoice else VENDOR_PAYMENT


def _reverse_invoice_payment(payment: Payment, invoice: Invoice) -> None:
    """
    Undo the party and company postings of an invoice payment.

    The party reversal is split against what the payment contributes now:
    the part that is overpayment credit is taken back from CREDIT-<invoice>
    and the rest from the payment reference. Credit that was already
    applied elsewhere cannot be taken back.
    """
    payment_type = _invoice_payment_type(invoice)
    is_customer = payment_type == CUSTOMER_PAYMENT
    party_id = invoice.customer_id if is_customer else invoice.vendor_id
    number = invoice.invoice_number
    amount = money(payment.amount)

    status = calculate_invoice_payment_status(invoice)
    total = status["total_amount"]
    over_now = max(ZERO, status["total_paid"] - total)
    over_after = max(ZERO, status["total_paid"] - amount - total)
    over_part = over_now - over_after
    invoice_part = amount - over_part

    if over_part > ZERO:
        available = unapplied_credit(payment_type, party_id, number)
        if over_part > available:
            raise LedgerValidationError(
                f"Overpayment credit from invoice {number} has already been applied; "
                "delete the balance-applied payments first"
            )

    reference = payment.reference or number
    if invoice_part > ZERO:
        _post_party(
            payment_type,
            party_id,
            DEBIT,
            invoice_part,
            f"Reversal of payment for invoice {number}",
            reference,
            number,
        )
    if over_part > ZERO:
        _post_party(
            payment_type,
            party_id,
            DEBIT,
            over_part,
            f"Reversal of overpayment credit for invoice {number}",
            overpayment_reference(number),
            number,
        )

    post_company_transaction(
        DEBIT if is_customer else CREDIT,
        amount,
        f"Reversal of {'customer' if is_customer else 'vendor'} payment for invoice {number}",
        reference=reference,
        invoice_number=number,
    )


def _reverse_balance_applied(payment: Payment, invoice: Invoice) -> None:
    source = payment.source_invoice
    if source is None:
        raise LedgerValidationError("Source invoice of this applied balance is unknown")

    payment_type = _invoice_payment_type(invoice)
    party_id = invoice.customer_id if invoice.is_customer_invoice else invoice.vendor_id

    _post_party(
        payment_type,
        party_id,
        DEBIT,
        payment.amount,
        f"Reversal of balance applied to invoice {invoice.invoice_number}",
        payment.reference,
        invoice.invoice_number,
    )
    _post_party(
        payment_type,
        party_id,
        CREDIT,
        payment.amount,
        f"Credit from invoice {source.invoice_number} restored",
        overpayment_reference(source.invoice_number),
        source.invoice_number,
    )


def _entry_account_ids(entry) -> tuple:
    if entry is None:
        return None, None
    debit_id = credit_id = None
    for line in entry.lines.all():
        if line.debit_amount > ZERO and debit_id is None:
            debit_id = line.account_id
        elif line.credit_amount > ZERO and credit_id is None:
            credit_id = line.account_id
    return debit_id, credit_id


@transaction.atomic
def update_payment(
    payment_id,
    *,
    amount=None,
    date: date_cls | None = None,
    mode=None,
    reference=None,
    description=None,
) -> dict:
    """
    Edit a payment.

    Mode and description are updated in place. A new amount, date or
    reference on an invoice payment reverses its party and company
    postings, deletes its journal entry and posts the payment again with
    the same accounts. Balance-applied payments only take mode and
    description changes; note-backed payments are edited through the note.
    """
    payment = _lock_payment(payment_id)
    _ensure_not_note_backed(payment)

    new_amount = (
        positive_money(amount, field="amount") if amount not in (None, "") else payment.amount
    )
    new_date = date or payment.date
    new_reference = payment.reference if reference is None else str(reference).strip()

    if mode not in (None, ""):
        payment.mode = _normalize_mode(mode)
    if description is not None:
        payment.description = str(description).strip()[:255]

    reissue = (
        new_amount != payment.amount
        or new_date != payment.date
        or new_reference != payment.reference
    )

    invoice = None
    if reissue:
        if payment.category == BALANCE_APPLIED or payment.invoice_id is None:
            raise LedgerValidationError(
                "Amount, date and reference of an applied balance cannot be changed; "
                "delete it and allocate again"
            )

        invoice = Invoice.objects.select_for_update().get(pk=payment.invoice_id)
        payment_type = _invoice_payment_type(invoice)

        old_entry = payment.journal_entry
        debit_id, credit_id = _entry_account_ids(old_entry)
        debit_account, credit_account = _payment_accounts(
            invoice.is_customer_invoice, debit_id, credit_id
        )

        _reverse_invoice_payment(payment, invoice)
        delete_journal_entry(payment.journal_entry_id)

        status = calculate_invoice_payment_status(invoice)
        paid_by_others = status["total_paid"] - money(payment.amount)
        remaining = max(ZERO, status["total_amount"] - paid_by_others)

        posted = _post_payment(
            payment_type=payment_type,
            invoice=invoice,
            amount=new_amount,
            remaining=remaining,
            reference=new_reference,
            narrative=payment.description or f"Payment for invoice {invoice.invoice_number}",
            pay_date=new_date,
            debit_account=debit_account,
            credit_account=credit_account,
        )

        payment.amount = new_amount
        payment.date = new_date
        payment.reference = new_reference
        payment.journal_entry = posted["journal_entry"]

    payment.save()

    status = None
    if invoice is not None:
        status = refresh_invoice_status(invoice)

    logger.info(
        "Payment updated",
        extra={
            "payment_id": payment.id,
            "amount": str(payment.amount),
            "reissued": reissue,
        },
    )
    return {"payment": payment, "status": status["status"] if status else None}


@transaction.atomic
def delete_payment(payment_id) -> dict:
    """
    Delete a payment with its postings.

    Invoice payments reverse their party and company postings and delete
    their journal entry. Balance-applied payments hand the consumed credit
    back to the source invoice. The invoice status is recomputed.
    """
    payment = _lock_payment(payment_id)
    _ensure_not_note_backed(payment)

    if payment.invoice_id is None:
        raise LedgerValidationError("Payment is not linked to an invoice")
    invoice = Invoice.objects.select_for_update().get(pk=payment.invoice_id)

    if payment.category == BALANCE_APPLIED:
        _reverse_balance_applied(payment, invoice)
    else:
        _reverse_invoice_payment(payment, invoice)

    deleted_entries = delete_journal_entry(payment.journal_entry_id)
    pk = payment.pk
    payment.delete()

    status = refresh_invoice_status(invoice)

    logger.info(
        "Payment deleted",
        extra={
            "payment_id": pk,
            "invoice_number": invoice.invoice_number,
            "journal_entries_deleted": deleted_entries,
        },
    )
    return {
        "payment_id": pk,
        "invoice_number": invoice.invoice_number,
        "journal_entries_deleted": deleted_entries,
        "status": status["status"],
    }
