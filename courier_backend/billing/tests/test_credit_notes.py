# billing/tests/test_credit_notes.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.chart_service import initialize_default_accounts
from accounting.services.exceptions import LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import create_journal_entry
from billing.models import CreditNote, Invoice, Payment
from billing.services.credit_note_service import create_credit_note, delete_credit_note
from billing.services.invoice_service import create_invoice
from parties.models import Customer, CustomerTransaction


class CreditNoteTests(TestCase):
    def setUp(self):
        initialize_default_accounts()
        self.customer = Customer.objects.create(company_name="Acme Freight")
        self.invoice = create_invoice(
            invoice_number="INV-1",
            profile=Invoice.CUSTOMER,
            customer_id=self.customer.id,
            total_amount="1000.00",
            invoice_date=date(2026, 1, 1),
        )

    def _balance(self):
        self.customer.refresh_from_db()
        return self.customer.current_balance

    def test_create_credit_note_posts_everywhere(self):
        note = create_credit_note(
            customer_id=self.customer.id,
            amount="150",
            date=date(2026, 1, 20),
            description="Damaged parcel",
            invoice_id=self.invoice.id,
        )

        self.assertEqual(note.credit_note_number, "#CREDIT00001")
        self.assertEqual(note.amount, Decimal("150.00"))

        payment = note.payment
        self.assertEqual(payment.transaction_type, Payment.INCOME)
        self.assertEqual(payment.category, "Customer Credit")
        self.assertEqual(payment.invoice, self.invoice)
        self.assertEqual(payment.journal_entry, note.journal_entry)

        entry = note.journal_entry
        self.assertTrue(entry.is_posted)
        self.assertEqual(entry.reference, "#CREDIT00001")
        lines = {ln.account.code: ln for ln in entry.lines.select_related("account")}
        self.assertEqual(lines["1101"].debit_amount, Decimal("150.00"))
        self.assertEqual(lines["5102"].credit_amount, Decimal("150.00"))

        self.assertEqual(self._balance(), Decimal("850.00"))
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.PARTIAL)

    def test_numbers_increment(self):
        first = create_credit_note(customer_id=self.customer.id, amount="10")
        second = create_credit_note(customer_id=self.customer.id, amount="20")
        self.assertEqual(first.credit_note_number, "#CREDIT00001")
        self.assertEqual(second.credit_note_number, "#CREDIT00002")

    def test_invoice_must_belong_to_customer(self):
        other = Customer.objects.create(company_name="Beta Logistics")
        with self.assertRaises(LedgerValidationError):
            create_credit_note(customer_id=other.id, amount="10", invoice_id=self.invoice.id)
        with self.assertRaises(NotFoundError):
            create_credit_note(customer_id=999999, amount="10")
        with self.assertRaises(LedgerValidationError):
            create_credit_note(customer_id=self.customer.id, amount="-5")

        self.assertFalse(CreditNote.objects.exists())
        self.assertFalse(Payment.objects.exists())

    def test_delete_credit_note_reverses_everything(self):
        note = create_credit_note(
            customer_id=self.customer.id,
            amount="150",
            date=date(2026, 1, 20),
            invoice_id=self.invoice.id,
        )
        entries_with_note = JournalEntry.objects.count()

        result = delete_credit_note(note.id)

        self.assertEqual(result["credit_note_number"], "#CREDIT00001")
        self.assertEqual(result["journal_entries_deleted"], 1)
        self.assertFalse(CreditNote.objects.exists())
        self.assertFalse(Payment.objects.exists())
        self.assertEqual(JournalEntry.objects.count(), entries_with_note - 1)
        self.assertFalse(JournalEntry.objects.filter(reference="#CREDIT00001").exists())

        self.assertEqual(self._balance(), Decimal("1000.00"))
        reversal = CustomerTransaction.objects.filter(customer=self.customer).first()
        self.assertEqual(reversal.direction, "DEBIT")
        self.assertEqual(reversal.description, "Reversal of credit note #CREDIT00001")

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.UNPAID)

        with self.assertRaises(NotFoundError):
            delete_credit_note(note.id)

    def test_deleted_numbers_are_not_reused(self):
        create_credit_note(customer_id=self.customer.id, amount="10")
        second = create_credit_note(customer_id=self.customer.id, amount="20")

        delete_credit_note(second.id)
        third = create_credit_note(customer_id=self.customer.id, amount="30")

        self.assertEqual(third.credit_note_number, "#CREDIT00003")
        self.assertEqual(
            sorted(CreditNote.objects.values_list("credit_note_number", flat=True)),
            ["#CREDIT00001", "#CREDIT00003"],
        )

    def test_delete_leaves_other_entries_with_the_same_reference(self):
        note = create_credit_note(customer_id=self.customer.id, amount="40")
        manual = create_journal_entry(
            date=date(2026, 1, 21),
            description="Courier refund adjustment",
            reference=note.credit_note_number,
            lines=[
                {"account": Account.objects.get(code="1101"), "debit": "5"},
                {"account": Account.objects.get(code="5102"), "credit": "5"},
            ],
        )

        result = delete_credit_note(note.id)

        self.assertEqual(result["journal_entries_deleted"], 1)
        self.assertFalse(JournalEntry.objects.filter(pk=note.journal_entry_id).exists())
        self.assertTrue(JournalEntry.objects.filter(pk=manual.pk).exists())
        self.assertEqual(
            list(
                JournalEntry.objects.filter(reference=note.credit_note_number).values_list(
                    "pk", flat=True
                )
            ),
            [manual.pk],
        )

    def test_numbering_continues_from_highest_existing_note(self):
        CreditNote.objects.create(
            credit_note_number="#CREDIT00041",
            customer=self.customer,
            amount=Decimal("5.00"),
            date=date(2025, 12, 31),
        )

        note = create_credit_note(customer_id=self.customer.id, amount="10")

        self.assertEqual(note.credit_note_number, "#CREDIT00042")
