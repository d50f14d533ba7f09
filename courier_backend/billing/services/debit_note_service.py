# billing/services/debit_note_service.py

"""
DEBIT NOTE SERVICE

The vendor-side counterpart of credit notes.

create_debit_note() (atomic):
- DebitNote "#DEBIT00001"
- EXPENSE Payment, category "Vendor Debit Note", from us to the vendor
- Posted journal entry: Dr Vendor Expense / Cr Cash
- Vendor ledger CREDIT (reduces what we owe, like a vendor payment)

delete_debit_note() (atomic) removes the note, its payment and the
journal entry the note points at, and posts a reversing vendor DEBIT.
"""

from __future__ import annotations

import logging
from datetime import date as date_cls

from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import create_journal_entry, delete_journal_entry
from accounting.services.money import positive_money
from billing.models import DebitNote, Invoice, Payment
from billing.services import ledger_accounts
from billing.services.invoice_status import refresh_invoice_status
from billing.services.numbering import next_document_number
from parties.models import Vendor
from parties.services.balance_service import CREDIT, DEBIT, post_vendor_transaction

logger = logging.getLogger("payments")

VENDOR_DEBIT_NOTE = "Vendor Debit Note"
SEQUENCE_NAME = "debit_note"


def next_debit_note_number() -> str:
    return next_document_number(
        DebitNote.NUMBER_PREFIX, SEQUENCE_NAME, DebitNote, "debit_note_number"
    )


@transaction.atomic
def create_debit_note(
    *,
    vendor_id,
    amount,
    date: date_cls | None = None,
    description: str = "",
    invoice_id=None,
    currency: str | None = None,
) -> DebitNote:
    amt = positive_money(amount)
    note_date = date or timezone.localdate()

    try:
        vendor = Vendor.objects.get(pk=vendor_id)
    except (Vendor.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Vendor not found") from exc

    invoice = None
    if invoice_id not in (None, ""):
        try:
            invoice = Invoice.objects.get(pk=invoice_id)
        except (Invoice.DoesNotExist, ValueError, TypeError) as exc:
            raise NotFoundError("Invoice not found") from exc
        if invoice.is_customer_invoice or invoice.vendor_id != vendor.id:
            raise LedgerValidationError("Invoice is not a bill from this vendor")

    number = next_debit_note_number()
    narrative = f"Debit Note: {(description or '').strip() or number}"[:255]
    currency = (currency or ledger_accounts.default_currency()).strip()

    payment = Payment.objects.create(
        transaction_type=Payment.EXPENSE,
        category=VENDOR_DEBIT_NOTE,
        date=note_date,
        currency=currency,
        amount=amt,
        from_party_type=Payment.US,
        to_party_type=Payment.VENDOR,
        to_vendor=vendor,
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
                "account": ledger_accounts.vendor_expense_account(),
                "debit": amt,
                "description": narrative,
                "reference": number,
            },
            {
                "account": ledger_accounts.cash_account(),
                "credit": amt,
                "description": narrative,
                "reference": number,
            },
        ],
        post=True,
    )
    payment.journal_entry = entry
    payment.save(update_fields=["journal_entry"])

    post_vendor_transaction(
        vendor.id,
        CREDIT,
        amt,
        narrative,
        reference=number,
        invoice_number=invoice.invoice_number if invoice else None,
    )

    note = DebitNote.objects.create(
        debit_note_number=number,
        vendor=vendor,
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
        "Debit note created",
        extra={"debit_note_number": number, "vendor_id": vendor.id, "amount": str(amt)},
    )
    return note


@transaction.atomic
def delete_debit_note(debit_note_id) -> dict:
    try:
        note = DebitNote.objects.select_for_update().get(pk=debit_note_id)
    except (DebitNote.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Debit note not found") from exc

    number = note.debit_note_number
    entry_id = note.journal_entry_id
    payment = note.payment
    invoice = note.invoice

    note.delete()
    if payment is not None:
        payment.delete()

    deleted_entries = delete_journal_entry(entry_id)

    post_vendor_transaction(
        note.vendor_id,
        DEBIT,
        note.amount,
        f"Reversal of debit note {number}",
        reference=number,
        invoice_number=invoice.invoice_number if invoice else None,
    )

    if invoice is not None:
        refresh_invoice_status(invoice)

    logger.info(
        "Debit note deleted",
        extra={"debit_note_number": number, "journal_entries_deleted": deleted_entries},
    )
    return {"debit_note_number": number, "journal_entries_deleted": deleted_entries}
