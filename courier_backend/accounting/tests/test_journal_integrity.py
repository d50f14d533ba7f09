# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import EntryNumberSequence, JournalEntry, JournalEntryLine
from accounting.services.chart_service import create_account
from accounting.services.exceptions import (
    AlreadyPostedError,
    InvalidLineError,
    LedgerValidationError,
    NotFoundError,
    UnbalancedEntryError,
)
from accounting.services.journal_entry_service import (
    create_journal_entry,
    delete_journal_entry,
    list_journal_entries,
    next_entry_number,
    post_journal_entry,
)

TODAY = date(2026, 3, 15)


def _account(code: str, name: str, category: str, account_type: str = "General"):
    return create_account(
        code=code, name=name, category=category, account_type=account_type
    )


class JournalEntryServiceTests(TestCase):
    def setUp(self):
        self.cash = _account("1101", "Cash", Account.ASSET, "Current Asset")
        self.revenue = _account("5102", "Logistics Services Revenue", Account.REVENUE)

    def _lines(self, debit="100.00", credit="100.00"):
        return [
            {"account": self.cash, "debit": debit},
            {"account_id": self.revenue.id, "credit": credit},
        ]

    def test_create_journal_entry_balanced_creates_lines(self):
        je = create_journal_entry(
            date=TODAY, description="Delivery fee", lines=self._lines(), reference="INV-1"
        )

        self.assertIsInstance(je, JournalEntry)
        self.assertEqual(je.entry_number, "JE-0001")
        self.assertFalse(je.is_posted)
        self.assertIsNone(je.posted_at)
        self.assertEqual(je.total_debit, Decimal("100.00"))
        self.assertEqual(je.total_credit, Decimal("100.00"))

        lines = JournalEntryLine.objects.filter(journal_entry=je)
        self.assertEqual(lines.count(), 2)
        self.assertEqual(
            sum((ln.debit_amount for ln in lines), Decimal("0.00")),
            sum((ln.credit_amount for ln in lines), Decimal("0.00")),
        )

    def test_entry_numbers_are_sequential(self):
        first = create_journal_entry(date=TODAY, description="One", lines=self._lines())
        second = create_journal_entry(date=TODAY, description="Two", lines=self._lines())
        self.assertEqual(first.entry_number, "JE-0001")
        self.assertEqual(second.entry_number, "JE-0002")

    def test_numbering_continues_from_highest_existing_entry(self):
        JournalEntry.objects.create(
            entry_number="JE-0041",
            date=TODAY,
            description="Imported",
            total_debit=Decimal("5.00"),
            total_credit=Decimal("5.00"),
        )
        self.assertFalse(EntryNumberSequence.objects.exists())
        self.assertEqual(next_entry_number(), "JE-0042")
        self.assertEqual(next_entry_number(), "JE-0043")

    def test_create_with_post_flag_is_posted(self):
        je = create_journal_entry(
            date=TODAY, description="System entry", lines=self._lines(), post=True
        )
        self.assertTrue(je.is_posted)
        self.assertIsNotNone(je.posted_at)

    def test_unbalanced_raises_and_persists_nothing(self):
        with self.assertRaises(UnbalancedEntryError):
            create_journal_entry(
                date=TODAY, description="Bad entry", lines=self._lines(credit="90.00")
            )
        self.assertFalse(JournalEntry.objects.exists())
        self.assertFalse(JournalEntryLine.objects.exists())

    def test_one_cent_difference_is_rejected(self):
        with self.assertRaises(UnbalancedEntryError):
            create_journal_entry(
                date=TODAY, description="Off by a cent", lines=self._lines(credit="99.99")
            )

    def test_line_with_both_sides_is_rejected(self):
        lines = [
            {"account": self.cash, "debit": "10.00", "credit": "10.00"},
            {"account": self.revenue, "credit": "0.00", "debit": "0.00"},
        ]
        with self.assertRaises(InvalidLineError):
            create_journal_entry(date=TODAY, description="Both sides", lines=lines)

    def test_zero_line_is_rejected(self):
        lines = self._lines() + [{"account": self.cash, "debit": "0", "credit": "0"}]
        with self.assertRaises(InvalidLineError):
            create_journal_entry(date=TODAY, description="Zero line", lines=lines)

    def test_negative_amount_is_rejected(self):
        lines = [
            {"account": self.cash, "debit": "-10.00"},
            {"account": self.revenue, "credit": "-10.00"},
        ]
        with self.assertRaises(InvalidLineError):
            create_journal_entry(date=TODAY, description="Negative", lines=lines)

    def test_line_without_account_is_rejected(self):
        lines = [{"debit": "10.00"}, {"account": self.revenue, "credit": "10.00"}]
        with self.assertRaises(InvalidLineError):
            create_journal_entry(date=TODAY, description="No account", lines=lines)

    def test_unknown_account_is_not_found(self):
        lines = [
            {"account_id": 999999, "debit": "10.00"},
            {"account": self.revenue, "credit": "10.00"},
        ]
        with self.assertRaises(NotFoundError):
            create_journal_entry(date=TODAY, description="Ghost account", lines=lines)

    def test_inactive_account_is_rejected(self):
        self.cash.is_active = False
        self.cash.save()
        with self.assertRaises(InvalidLineError):
            create_journal_entry(date=TODAY, description="Inactive", lines=self._lines())

    def test_requires_two_lines_and_description(self):
        with self.assertRaises(LedgerValidationError):
            create_journal_entry(
                date=TODAY,
                description="Single line",
                lines=[{"account": self.cash, "debit": "10.00"}],
            )
        with self.assertRaises(LedgerValidationError):
            create_journal_entry(date=TODAY, description="  ", lines=self._lines())
        with self.assertRaises(LedgerValidationError):
            create_journal_entry(date=None, description="No date", lines=self._lines())

    def test_post_journal_entry_is_one_way(self):
        je = create_journal_entry(date=TODAY, description="To post", lines=self._lines())

        posted = post_journal_entry(je.id)
        self.assertTrue(posted.is_posted)
        self.assertIsNotNone(posted.posted_at)

        with self.assertRaises(AlreadyPostedError):
            post_journal_entry(je.id)

        with self.assertRaises(NotFoundError):
            post_journal_entry(999999)

    def test_entries_and_lines_are_immutable(self):
        je = create_journal_entry(date=TODAY, description="Locked", lines=self._lines())

        je.description = "Edited"
        with self.assertRaises(ValidationError):
            je.save()
        with self.assertRaises(ValidationError):
            je.delete()

        line = je.lines.first()
        line.description = "Edited"
        with self.assertRaises(ValidationError):
            line.save()

    def test_list_journal_entries_filters(self):
        posted = create_journal_entry(
            date=TODAY, description="Fuel reimbursement", lines=self._lines(), post=True
        )
        create_journal_entry(
            date=date(2026, 1, 2), description="Freight charge", lines=self._lines()
        )

        self.assertEqual(list(list_journal_entries(search="fuel")), [posted])
        self.assertEqual(list(list_journal_entries(is_posted=True)), [posted])
        self.assertEqual(list_journal_entries(date_from=date(2026, 2, 1)).count(), 1)
        self.assertEqual(list_journal_entries(date_to=date(2026, 2, 1)).count(), 1)

        # newest first
        self.assertEqual(list_journal_entries().first(), posted)

    def test_delete_journal_entry_removes_only_that_entry(self):
        doomed = create_journal_entry(
            date=TODAY, description="Credit note", lines=self._lines(), reference="#CREDIT00001"
        )
        same_reference = create_journal_entry(
            date=TODAY, description="Manual", lines=self._lines(), reference="#CREDIT00001"
        )

        self.assertEqual(delete_journal_entry(doomed.pk), 1)

        self.assertEqual(list(JournalEntry.objects.all()), [same_reference])
        self.assertEqual(JournalEntryLine.objects.count(), 2)

        self.assertEqual(delete_journal_entry(doomed.pk), 0)
        self.assertEqual(delete_journal_entry(None), 0)
