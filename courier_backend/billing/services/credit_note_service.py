# billing/services/credit_note_service.py

"""
CREDIT NOTE SERVICE

create_credit_note() (atomic):
- CreditNote "#CREDIT00001"
- INCOME Payment, category "Customer Credit"
- Posted journal entry: Dr Cash / Cr Logistics Services Revenue
- Customer ledger CREDIT

delete_credit_note() (atomic) removes the note, its payment and the
journal entry the note points at, and posts a reversing customer DEBIT.
Numbers come from a counter and are not reused after a delete.
"""

from __future__ import annotations

import logging
from datetime import date as date_cls

from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import create_journal_entry, delete_journal_entry
from accounting.services.money import positive_money
from billing.models import CreditNote, Invoice, Payment
from billing.services import ledger_accounts
from billing.services.invoice_status import refresh_invoice_status
from billing.services.numbering import next_document_number
from parties.models import Customer
from parties.services.balance_service import CREDIT, DEBIT, post_customer_transaction

logger = logging.getLogger("payments")

CUSTOMER_CREDIT = "Customer Credit"
SEQUENCE_NAME = "credit_note"


def next_credit_note_number() -> str:
    return next_document_number(
        CreditNote.NUMBER_PREFIX, SEQUENCE_NAME, CreditNote, "credit_note_number"
    )


@transaction.atomic
def create_credit_note(
    *,
    customer_id,
    amount,
    date: date_cls | None = None,
    description: str = "",
    invoice_id=None,
    currency: str | None = None,
) -> CreditNote:
    amt = positive_money(amount)
    note_date = date or timezone.localdate()

    try:
        customer = Customer.objects.get(pk=customer_id)
    except (Customer.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Customer not found") from exc

    invoice = None
    if invoice_id not in (None, ""):
        try:
            invoice = Invoice.objects.get(pk=invoice_id)
        except (Invoice.DoesNotExist, ValueError, TypeError) as exc:
            raise NotFoundError("Invoice not found") from exc
        if invoice.customer_id != customer.id:
            raise LedgerValidationError("Invoice does not belong to this customer")

    number = next_credit_note_number()
    narrative = f"Credit Note: {(description or '').strip() or number}"[:255]
    currency = (currency or ledger_accounts.default_currency()).strip()

    payment = Payment.objects.create(
        transaction_type=Payment.INCOME,
        category=CUSTOMER_CREDIT,
        date=note_date,
        currency=currency,
        amount=amt,
        from_party_type=Payment.CUSTOMER,
        to_party_type=Payment.US,
        from_customer=customer,
        mode=Payment.CASH,
        invoice=invoice,
        reference=number,
        description=narrative,
    )

    entry = create_journal_entry(
        date=note_date,
        description=narrative,
        reference=number,
        lines=[
            {
                "account": ledger_accounts.cash_account(),
                "debit": amt,
                "description": narrative,
                "reference": number,
            },
            {
                "account": ledger_accounts.revenue_account(),
                "credit": amt,
                "description": narrative,
                "reference": number,
            },
        ],
        post=True,
    )
    payment.journal_entry = entry
    payment.save(update_fields=["journal_entry"])

    post_customer_transaction(
        customer.id,
        CREDIT,
        amt,
        narrative,
        reference=number,
        invoice_number=invoice.invoice_number if invoice else None,
    )

    note = CreditNote.objects.create(
        credit_note_number=number,
        customer=customer,
        invoice=invoice,
        amount=amt,
        date=note_date,
        description=(description or "").strip()[:255],
        currency=currency,
        payment=payment,
        journal_entry=entry,
    )

    if invoice is not None:
        refresh_invoice_status(invoice)

    logger.info(
        "Credit note created",
        extra={"credit_note_number": number, "customer_id": customer.id, "amount": str(amt)},
    )
    return note


@transaction.atomic
def delete_credit_note(credit_note_id) -> dict:
    try:
        note = CreditNote.objects.select_for_update().get(pk=credit_note_id)
    except (CreditNote.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Credit note not found") from exc

    number = note.credit_note_number
    entry_id = note.journal_entry_id
    payment = note.payment
    invoice = note.invoice
    customer_id = note.customer_id
    amount = note.amount

    note.delete()
    if payment is not None:
        payment.delete()

    deleted_entries = delete_journal_entry(entry_id)

    post_customer_transaction(
        customer_id,
        DEBIT,
        amount,
        f"Reversal of credit note {number}",
        reference=number,
        invoice_number=invoice.invoice_number if invoice else None,
    )

    if invoice is not None:
        refresh_invoice_status(invoice)

    logger.info(
        "Credit note deleted",
        extra={"credit_note_number": number, "journal_entries_deleted": deleted_entries},
    )
    return {"credit_note_number": number, "journal_entries_deleted": deleted_entries}
