# billing/tests/test_payment_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.chart_service import initialize_default_accounts
from accounting.services.exceptions import (
    InvoiceNotFoundError,
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)
from billing.models import Invoice, Payment
from billing.services.credit_note_service import create_credit_note
from billing.services.invoice_service import create_invoice
from billing.services.payment_service import (
    BALANCE_APPLIED,
    CUSTOMER_PAYMENT,
    VENDOR_PAYMENT,
    allocate_excess_payment,
    delete_payment,
    outstanding_invoices,
    process_payment,
    unapplied_credit,
    update_payment,
)
from parties.models import (
    CompanyTransaction,
    Customer,
    CustomerTransaction,
    Vendor,
    VendorTransaction,
)
from parties.services.balance_service import get_company_account


class PaymentTestMixin:
    def setUp(self):
        initialize_default_accounts()
        self.accounts = {a.code: a for a in Account.objects.all()}
        self.customer = Customer.objects.create(company_name="Acme Freight")
        self.vendor = Vendor.objects.create(company_name="Fuel Depot")

    def customer_invoice(self, number, amount, on=date(2026, 1, 1)):
        return create_invoice(
            invoice_number=number,
            profile=Invoice.CUSTOMER,
            customer_id=self.customer.id,
            total_amount=amount,
            invoice_date=on,
        )

    def vendor_invoice(self, number, amount, on=date(2026, 1, 1)):
        return create_invoice(
            invoice_number=number,
            profile=Invoice.VENDOR,
            vendor_id=self.vendor.id,
            total_amount=amount,
            invoice_date=on,
        )

    def balance(self, party):
        party.refresh_from_db()
        return party.current_balance


class ProcessPaymentTests(PaymentTestMixin, TestCase):
    def test_partial_then_overpayment(self):
        self.customer_invoice("INV-1", "1000.00")

        first = process_payment(
            invoice_number="INV-1", payment_amount="600", payment_type=CUSTOMER_PAYMENT
        )

        self.assertEqual(first["status"], Invoice.PARTIAL)
        self.assertEqual(first["amount_for_invoice"], Decimal("600.00"))
        self.assertEqual(first["overpayment"], Decimal("0.00"))
        self.assertEqual(first["remaining_amount"], Decimal("400.00"))
        self.assertEqual(self.balance(self.customer), Decimal("400.00"))

        second = process_payment(
            invoice_number="INV-1",
            payment_amount="500",
            payment_type=CUSTOMER_PAYMENT,
            payment_method="bank transfer",
            reference="TRX-99",
        )

        self.assertEqual(second["status"], Invoice.PAID)
        self.assertEqual(second["amount_for_invoice"], Decimal("400.00"))
        self.assertEqual(second["overpayment"], Decimal("100.00"))
        self.assertEqual(second["total_paid"], Decimal("1100.00"))
        self.assertEqual(second["remaining_amount"], Decimal("0.00"))

        # customer now holds a 100 prepaid credit
        self.assertEqual(self.balance(self.customer), Decimal("-100.00"))
        overpay = CustomerTransaction.objects.get(reference="CREDIT-INV-1")
        self.assertEqual(overpay.direction, "CREDIT")
        self.assertEqual(overpay.amount, Decimal("100.00"))
        self.assertEqual(overpay.new_balance, Decimal("-100.00"))

        self.assertEqual(get_company_account().current_balance, Decimal("1100.00"))

        invoice = Invoice.objects.get(invoice_number="INV-1")
        self.assertEqual(invoice.status, Invoice.PAID)

        payment = second["payment"]
        self.assertEqual(payment.amount, Decimal("500.00"))
        self.assertEqual(payment.transaction_type, Payment.INCOME)
        self.assertEqual(payment.mode, Payment.BANK_TRANSFER)
        self.assertEqual(payment.invoice, invoice)
        self.assertEqual(payment.from_customer, self.customer)

        entry = second["journal_entry"]
        self.assertEqual(payment.journal_entry, entry)
        self.assertTrue(entry.is_posted)
        self.assertEqual(entry.reference, "TRX-99")
        self.assertEqual(entry.total_debit, entry.total_credit)
        lines = {ln.account.code: ln for ln in entry.lines.select_related("account")}
        self.assertEqual(lines["1101"].debit_amount, Decimal("500.00"))
        self.assertEqual(lines["1102"].credit_amount, Decimal("500.00"))

    def test_vendor_payment_reduces_cash_and_payable(self):
        self.vendor_invoice("BILL-1", "800.00")

        result = process_payment(
            invoice_number="BILL-1", payment_amount="800", payment_type=VENDOR_PAYMENT
        )

        self.assertEqual(result["status"], Invoice.PAID)
        self.assertEqual(self.balance(self.vendor), Decimal("0.00"))
        self.assertEqual(get_company_account().current_balance, Decimal("-800.00"))

        company_txn = CompanyTransaction.objects.get()
        self.assertEqual(company_txn.direction, "DEBIT")

        payment = result["payment"]
        self.assertEqual(payment.transaction_type, Payment.EXPENSE)
        self.assertEqual(payment.to_vendor, self.vendor)
        self.assertEqual(payment.to_party_type, Payment.VENDOR)

        lines = {
            ln.account.code: ln for ln in result["journal_entry"].lines.select_related("account")
        }
        self.assertEqual(lines["2101"].debit_amount, Decimal("800.00"))
        self.assertEqual(lines["1101"].credit_amount, Decimal("800.00"))

    def test_explicit_posting_accounts(self):
        self.customer_invoice("INV-2", "120.00")

        result = process_payment(
            invoice_number="INV-2",
            payment_amount="120",
            payment_type=CUSTOMER_PAYMENT,
            debit_account_id=self.accounts["1101"].id,
            credit_account_id=self.accounts["5101"].id,
            description="Paid at depot",
        )

        entry = result["journal_entry"]
        self.assertEqual(entry.description, "Paid at depot")
        codes = set(entry.lines.values_list("account__code", flat=True))
        self.assertEqual(codes, {"1101", "5101"})

    def test_same_debit_and_credit_account_is_rejected(self):
        self.customer_invoice("INV-3", "50.00")
        cash = self.accounts["1101"].id

        with self.assertRaises(LedgerValidationError):
            process_payment(
                invoice_number="INV-3",
                payment_amount="50",
                payment_type=CUSTOMER_PAYMENT,
                debit_account_id=cash,
                credit_account_id=cash,
            )

    def test_invoice_and_payment_type_must_match(self):
        self.vendor_invoice("BILL-2", "80.00")
        self.customer_invoice("INV-4", "80.00")

        with self.assertRaises(LedgerValidationError):
            process_payment(
                invoice_number="BILL-2", payment_amount="80", payment_type=CUSTOMER_PAYMENT
            )
        with self.assertRaises(LedgerValidationError):
            process_payment(
                invoice_number="INV-4", payment_amount="80", payment_type=VENDOR_PAYMENT
            )
        with self.assertRaises(LedgerValidationError):
            process_payment(invoice_number="INV-4", payment_amount="80", payment_type="REFUND")

    def test_invalid_amount_and_unknown_invoice(self):
        self.customer_invoice("INV-5", "80.00")

        with self.assertRaises(LedgerValidationError):
            process_payment(
                invoice_number="INV-5", payment_amount="0", payment_type=CUSTOMER_PAYMENT
            )
        with self.assertRaises(InvoiceNotFoundError):
            process_payment(
                invoice_number="INV-404", payment_amount="10", payment_type=CUSTOMER_PAYMENT
            )

    def test_failure_rolls_back_every_store(self):
        self.customer_invoice("INV-6", "300.00")
        entries = JournalEntry.objects.count()
        customer_txns = CustomerTransaction.objects.count()

        # an inactive cash account fails the saga
        Account.objects.filter(code="1101").update(is_active=False)

        with self.assertRaises(NotFoundError):
            process_payment(
                invoice_number="INV-6", payment_amount="100", payment_type=CUSTOMER_PAYMENT
            )

        self.assertEqual(self.balance(self.customer), Decimal("300.00"))
        self.assertEqual(CustomerTransaction.objects.count(), customer_txns)
        self.assertFalse(CompanyTransaction.objects.exists())
        self.assertFalse(Payment.objects.exists())
        self.assertEqual(JournalEntry.objects.count(), entries)
        self.assertEqual(Invoice.objects.get(invoice_number="INV-6").status, Invoice.UNPAID)


class AllocateExcessPaymentTests(PaymentTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.customer_invoice("INV-1", "1000.00", on=date(2026, 1, 1))
        self.customer_invoice("INV-2", "300.00", on=date(2026, 1, 9))
        self.customer_invoice("INV-3", "400.00", on=date(2026, 1, 5))
        process_payment(
            invoice_number="INV-1",
            payment_amount="2000",
            payment_type=CUSTOMER_PAYMENT,
            reference="TRX-1",
        )

    def _allocate(self, excess, **kwargs):
        return allocate_excess_payment(
            payment_type=CUSTOMER_PAYMENT,
            excess_amount=excess,
            original_invoice_number="INV-1",
            payment_reference="TRX-1",
            customer_id=self.customer.id,
            **kwargs,
        )

    def test_outstanding_invoices_oldest_first(self):
        rows = outstanding_invoices("CUSTOMER", self.customer.id)
        self.assertEqual([r["invoice"].invoice_number for r in rows], ["INV-3", "INV-2"])
        self.assertEqual(rows[0]["remaining_amount"], Decimal("400.00"))

        rows = outstanding_invoices(
            CUSTOMER_PAYMENT, self.customer.id, exclude_invoice_number="INV-3"
        )
        self.assertEqual([r["invoice"].invoice_number for r in rows], ["INV-2"])

    def test_greedy_allocation_oldest_first(self):
        balance_before = self.balance(self.customer)

        result = self._allocate("500")

        self.assertEqual(
            [(a["invoice_number"], a["allocated_amount"]) for a in result["allocations"]],
            [("INV-3", Decimal("400.00")), ("INV-2", Decimal("100.00"))],
        )
        self.assertEqual(result["total_allocated"], Decimal("500.00"))
        self.assertEqual(result["unapplied_credit"], Decimal("0.00"))

        self.assertEqual(Invoice.objects.get(invoice_number="INV-3").status, Invoice.PAID)
        inv2 = Invoice.objects.get(invoice_number="INV-2")
        self.assertEqual(inv2.status, Invoice.PARTIAL)
        self.assertEqual(result["allocations"][1]["remaining_amount"], Decimal("200.00"))

        applied = Payment.objects.filter(category=BALANCE_APPLIED)
        self.assertEqual(applied.count(), 2)
        self.assertTrue(all(p.reference == "TRX-1" for p in applied))

        # each allocation is a DEBIT/CREDIT pair: the party balance is unchanged
        self.assertEqual(self.balance(self.customer), balance_before)
        self.assertEqual(self.balance(self.customer), Decimal("-300.00"))
        consumed = CustomerTransaction.objects.filter(reference="CREDIT-INV-1", direction="DEBIT")
        self.assertEqual(consumed.count(), 2)

    def test_excess_beyond_outstanding_stays_unapplied(self):
        entries = JournalEntry.objects.count()

        result = self._allocate("1000")

        self.assertEqual(result["total_allocated"], Decimal("700.00"))
        self.assertEqual(result["unapplied_credit"], Decimal("300.00"))
        self.assertEqual(
            result["total_allocated"] + result["unapplied_credit"], Decimal("1000.00")
        )
        self.assertFalse(outstanding_invoices("CUSTOMER", self.customer.id))
        # allocations move no cash, so no journal entries
        self.assertEqual(JournalEntry.objects.count(), entries)

    def test_specific_invoices_restrict_targets(self):
        result = self._allocate("500", specific_invoices=["INV-2"])

        self.assertEqual(len(result["allocations"]), 1)
        self.assertEqual(result["allocations"][0]["invoice_number"], "INV-2")
        self.assertEqual(result["total_allocated"], Decimal("300.00"))
        self.assertEqual(result["unapplied_credit"], Decimal("200.00"))
        self.assertEqual(Invoice.objects.get(invoice_number="INV-3").status, Invoice.UNPAID)

    def test_original_invoice_is_never_a_target(self):
        self.customer_invoice("INV-9", "50.00", on=date(2025, 12, 1))
        process_payment(
            invoice_number="INV-9", payment_amount="70", payment_type=CUSTOMER_PAYMENT
        )
        result = allocate_excess_payment(
            payment_type=CUSTOMER_PAYMENT,
            excess_amount="20",
            original_invoice_number="INV-9",
            payment_reference="TRX-2",
            customer_id=self.customer.id,
        )
        self.assertEqual(result["allocations"][0]["invoice_number"], "INV-3")

    def test_unknown_original_invoice_is_rejected(self):
        with self.assertRaises(InvoiceNotFoundError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="10",
                original_invoice_number="INV-404",
                payment_reference="TRX-1",
                customer_id=self.customer.id,
            )
        self.assertFalse(Payment.objects.filter(category=BALANCE_APPLIED).exists())

    def test_original_invoice_of_another_customer_is_rejected(self):
        other = Customer.objects.create(company_name="Other Cargo")
        create_invoice(
            invoice_number="OTH-1",
            profile=Invoice.CUSTOMER,
            customer_id=other.id,
            total_amount="100.00",
            invoice_date=date(2026, 1, 1),
        )
        process_payment(
            invoice_number="OTH-1", payment_amount="150", payment_type=CUSTOMER_PAYMENT
        )

        with self.assertRaises(LedgerValidationError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="50",
                original_invoice_number="OTH-1",
                payment_reference="TRX-1",
                customer_id=self.customer.id,
            )
        self.assertEqual(Invoice.objects.get(invoice_number="INV-3").status, Invoice.UNPAID)

    def test_excess_above_unapplied_credit_is_rejected(self):
        balance_before = self.balance(self.customer)

        with self.assertRaises(LedgerValidationError):
            self._allocate("1000.01")

        self.assertFalse(Payment.objects.filter(category=BALANCE_APPLIED).exists())
        self.assertEqual(self.balance(self.customer), balance_before)

    def test_applied_credit_cannot_be_spent_twice(self):
        self._allocate("600")
        self.assertEqual(
            unapplied_credit(CUSTOMER_PAYMENT, self.customer.id, "INV-1"), Decimal("400.00")
        )

        with self.assertRaises(LedgerValidationError):
            self._allocate("500")

    def test_invoice_without_overpayment_has_no_credit_to_allocate(self):
        self.customer_invoice("INV-7", "80.00", on=date(2026, 1, 20))
        process_payment(
            invoice_number="INV-7", payment_amount="80", payment_type=CUSTOMER_PAYMENT
        )

        with self.assertRaises(LedgerValidationError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="10",
                original_invoice_number="INV-7",
                payment_reference="TRX-7",
                customer_id=self.customer.id,
            )

    def test_requires_party_and_references(self):
        with self.assertRaises(LedgerValidationError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="10",
                original_invoice_number="INV-1",
                payment_reference="TRX-1",
            )
        with self.assertRaises(LedgerValidationError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="10",
                original_invoice_number="INV-1",
                payment_reference="  ",
                customer_id=self.customer.id,
            )
        with self.assertRaises(NotFoundError):
            allocate_excess_payment(
                payment_type=CUSTOMER_PAYMENT,
                excess_amount="10",
                original_invoice_number="INV-1",
                payment_reference="TRX-1",
                customer_id=999999,
            )

    def test_vendor_allocation(self):
        self.vendor_invoice("BILL-1", "100.00", on=date(2026, 1, 1))
        self.vendor_invoice("BILL-2", "60.00", on=date(2026, 1, 2))
        process_payment(
            invoice_number="BILL-1", payment_amount="130", payment_type=VENDOR_PAYMENT
        )

        result = allocate_excess_payment(
            payment_type=VENDOR_PAYMENT,
            excess_amount="30",
            original_invoice_number="BILL-1",
            payment_reference="WIRE-1",
            vendor_id=self.vendor.id,
        )

        self.assertEqual(result["total_allocated"], Decimal("30.00"))
        payment = Payment.objects.get(category=BALANCE_APPLIED, to_vendor=self.vendor)
        self.assertEqual(payment.transaction_type, Payment.EXPENSE)
        self.assertEqual(Invoice.objects.get(invoice_number="BILL-2").status, Invoice.PARTIAL)
        self.assertEqual(VendorTransaction.objects.filter(reference="CREDIT-BILL-1").count(), 2)


class UpdateDeletePaymentTests(PaymentTestMixin, TestCase):
    def pay(self, number, amount, payment_type=CUSTOMER_PAYMENT, **kwargs):
        return process_payment(
            invoice_number=number, payment_amount=amount, payment_type=payment_type, **kwargs
        )["payment"]

    def test_delete_reverses_every_posting(self):
        self.customer_invoice("INV-1", "1000.00")
        payment = self.pay("INV-1", "600", reference="TRX-1")
        entry_id = payment.journal_entry_id
        entries = JournalEntry.objects.count()

        result = delete_payment(payment.id)

        self.assertEqual(result["journal_entries_deleted"], 1)
        self.assertEqual(result["status"], Invoice.UNPAID)
        self.assertFalse(Payment.objects.filter(pk=payment.id).exists())
        self.assertFalse(JournalEntry.objects.filter(pk=entry_id).exists())
        self.assertEqual(JournalEntry.objects.count(), entries - 1)
        self.assertEqual(self.balance(self.customer), Decimal("1000.00"))
        self.assertEqual(get_company_account().current_balance, Decimal("0.00"))
        self.assertEqual(Invoice.objects.get(invoice_number="INV-1").status, Invoice.UNPAID)

        reversal = CustomerTransaction.objects.filter(reference="TRX-1", direction="DEBIT").get()
        self.assertEqual(reversal.amount, Decimal("600.00"))

    def test_delete_vendor_payment(self):
        self.vendor_invoice("BILL-1", "800.00")
        payment = self.pay("BILL-1", "800", payment_type=VENDOR_PAYMENT)

        delete_payment(payment.id)

        self.assertEqual(self.balance(self.vendor), Decimal("800.00"))
        self.assertEqual(get_company_account().current_balance, Decimal("0.00"))
        self.assertEqual(Invoice.objects.get(invoice_number="BILL-1").status, Invoice.UNPAID)

    def test_delete_overpayment_takes_back_the_credit(self):
        self.customer_invoice("INV-1", "100.00")
        payment = self.pay("INV-1", "150")
        self.assertEqual(
            unapplied_credit(CUSTOMER_PAYMENT, self.customer.id, "INV-1"), Decimal("50.00")
        )

        delete_payment(payment.id)

        self.assertEqual(
            unapplied_credit(CUSTOMER_PAYMENT, self.customer.id, "INV-1"), Decimal("0.00")
        )
        self.assertEqual(self.balance(self.customer), Decimal("100.00"))

    def test_applied_credit_must_be_released_before_delete(self):
        self.customer_invoice("INV-1", "100.00", on=date(2026, 1, 1))
        self.customer_invoice("INV-2", "40.00", on=date(2026, 1, 2))
        payment = self.pay("INV-1", "150", reference="TRX-1")
        allocate_excess_payment(
            payment_type=CUSTOMER_PAYMENT,
            excess_amount="40",
            original_invoice_number="INV-1",
            payment_reference="TRX-1",
            customer_id=self.customer.id,
        )
        self.assertEqual(Invoice.objects.get(invoice_number="INV-2").status, Invoice.PAID)

        with self.assertRaises(LedgerValidationError):
            delete_payment(payment.id)
        self.assertTrue(Payment.objects.filter(pk=payment.id).exists())

        applied = Payment.objects.get(category=BALANCE_APPLIED)
        self.assertEqual(applied.source_invoice.invoice_number, "INV-1")
        balance_before = self.balance(self.customer)

        result = delete_payment(applied.id)

        self.assertEqual(result["journal_entries_deleted"], 0)
        self.assertEqual(Invoice.objects.get(invoice_number="INV-2").status, Invoice.UNPAID)
        self.assertEqual(
            unapplied_credit(CUSTOMER_PAYMENT, self.customer.id, "INV-1"), Decimal("50.00")
        )
        self.assertEqual(self.balance(self.customer), balance_before)

        delete_payment(payment.id)
        self.assertEqual(self.balance(self.customer), Decimal("140.00"))

    def test_update_amount_reposts_the_payment(self):
        self.customer_invoice("INV-1", "1000.00")
        payment = self.pay("INV-1", "600", reference="TRX-1")
        old_entry_id = payment.journal_entry_id

        result = update_payment(payment.id, amount="1100")

        payment.refresh_from_db()
        self.assertEqual(result["status"], Invoice.PAID)
        self.assertEqual(payment.amount, Decimal("1100.00"))
        self.assertFalse(JournalEntry.objects.filter(pk=old_entry_id).exists())

        entry = payment.journal_entry
        self.assertTrue(entry.is_posted)
        self.assertEqual(entry.total_debit, Decimal("1100.00"))
        self.assertEqual(entry.reference, "TRX-1")
        codes = set(entry.lines.values_list("account__code", flat=True))
        self.assertEqual(codes, {"1101", "1102"})

        self.assertEqual(self.balance(self.customer), Decimal("-100.00"))
        self.assertEqual(
            unapplied_credit(CUSTOMER_PAYMENT, self.customer.id, "INV-1"), Decimal("100.00")
        )
        self.assertEqual(get_company_account().current_balance, Decimal("1100.00"))

    def test_update_keeps_the_posting_accounts(self):
        self.customer_invoice("INV-2", "120.00")
        payment = self.pay(
            "INV-2",
            "100",
            debit_account_id=self.accounts["1101"].id,
            credit_account_id=self.accounts["5101"].id,
        )

        update_payment(payment.id, amount="120", date=date(2026, 2, 1))

        payment.refresh_from_db()
        self.assertEqual(payment.date, date(2026, 2, 1))
        self.assertEqual(payment.journal_entry.date, date(2026, 2, 1))
        codes = set(payment.journal_entry.lines.values_list("account__code", flat=True))
        self.assertEqual(codes, {"1101", "5101"})
        self.assertEqual(Invoice.objects.get(invoice_number="INV-2").status, Invoice.PAID)

    def test_update_mode_and_description_keeps_the_entry(self):
        self.customer_invoice("INV-3", "50.00")
        payment = self.pay("INV-3", "50")
        entry_id = payment.journal_entry_id
        txns = CustomerTransaction.objects.count()

        result = update_payment(payment.id, mode="card", description="Paid by card")

        payment.refresh_from_db()
        self.assertIsNone(result["status"])
        self.assertEqual(payment.mode, Payment.CARD)
        self.assertEqual(payment.description, "Paid by card")
        self.assertEqual(payment.journal_entry_id, entry_id)
        self.assertEqual(CustomerTransaction.objects.count(), txns)

    def test_applied_balance_amount_cannot_change(self):
        self.customer_invoice("INV-1", "100.00", on=date(2026, 1, 1))
        self.customer_invoice("INV-2", "40.00", on=date(2026, 1, 2))
        self.pay("INV-1", "150")
        allocate_excess_payment(
            payment_type=CUSTOMER_PAYMENT,
            excess_amount="40",
            original_invoice_number="INV-1",
            payment_reference="TRX-1",
            customer_id=self.customer.id,
        )
        applied = Payment.objects.get(category=BALANCE_APPLIED)

        with self.assertRaises(LedgerValidationError):
            update_payment(applied.id, amount="20")

    def test_note_backed_payment_is_edited_through_the_note(self):
        note = create_credit_note(customer_id=self.customer.id, amount="25", date=date(2026, 1, 3))

        with self.assertRaises(ReferencedError):
            delete_payment(note.payment_id)
        with self.assertRaises(ReferencedError):
            update_payment(note.payment_id, amount="30")

    def test_unknown_payment(self):
        with self.assertRaises(NotFoundError):
            delete_payment(999999)
        with self.assertRaises(NotFoundError):
            update_payment(999999, mode="CASH")
