# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalEntryLine
- Enforce debit == credit
- Assign entry numbers (JE-0001, JE-0002, ...)
- Post (finalize) an entry

Manual entries (API) and system entries (payments, invoices, credit notes,
period closing) all pass through create_journal_entry().
"""

from __future__ import annotations

import logging
from datetime import date as date_cls

from django.db import transaction
from django.db.models import Prefetch, Q
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import EntryNumberSequence, JournalEntry, JournalEntryLine
from accounting.services.exceptions import (
    AlreadyPostedError,
    InvalidLineError,
    LedgerValidationError,
    NotFoundError,
    UnbalancedEntryError,
)
from accounting.services.money import BALANCE_TOLERANCE, ZERO, money

logger = logging.getLogger("accounting")

ENTRY_PREFIX = "JE-"
SEQUENCE_NAME = "journal_entry"
MIN_LINES = 2


def format_entry_number(value: int) -> str:
    return f"{ENTRY_PREFIX}{value:04d}"


def parse_entry_number(entry_number: str) -> int | None:
    raw = (entry_number or "").strip()
    if not raw.startswith(ENTRY_PREFIX):
        return None
    try:
        return int(raw[len(ENTRY_PREFIX):])
    except ValueError:
        return None


def _highest_existing_number() -> int:
    # Parsed numerically: "JE-10000" sorts before "JE-9999" as a string
    numbers = (
        parse_entry_number(n)
        for n in JournalEntry.objects.values_list("entry_number", flat=True)
    )
    return max((n for n in numbers if n is not None), default=0)


@transaction.atomic
def reserve_sequence_value(name: str, seed) -> int:
    """
    Reserve the next value of the named counter.

    The counter row is locked for the rest of the enclosing transaction,
    so concurrent callers are serialized. The `seed` callable supplies the starting
    value the first time a counter is used. Values are never handed out
    twice; a rolled-back caller leaves a gap.
    """
    seq, created = EntryNumberSequence.objects.select_for_update().get_or_create(
        name=name,
        defaults={"last_value": seed},
    )
    seq.last_value += 1
    seq.save(update_fields=["last_value"])
    return seq.last_value


def next_entry_number() -> str:
    """Reserve and return the next entry number."""
    return format_entry_number(
        reserve_sequence_value(SEQUENCE_NAME, _highest_existing_number)
    )


def _resolve_accounts(lines: list) -> dict[int, Account]:
    wanted: set[int] = set()
    for line in lines:
        account = line.get("account")
        if isinstance(account, Account):
            continue
        account_id = line.get("account_id", account)
        if account_id in (None, ""):
            continue
        try:
            wanted.add(int(account_id))
        except (TypeError, ValueError) as exc:
            raise InvalidLineError(f"Invalid account id: {account_id!r}") from exc

    found = {a.id: a for a in Account.objects.filter(id__in=wanted)}
    missing = wanted - set(found)
    if missing:
        raise NotFoundError(f"Account(s) not found: {sorted(missing)}")
    return found


def _normalize_lines(lines: list) -> list[dict]:
    if not isinstance(lines, (list, tuple)) or len(lines) < MIN_LINES:
        raise LedgerValidationError(
            f"Journal entry must contain at least {MIN_LINES} lines"
        )

    for idx, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise InvalidLineError(f"Line {idx}: each line must be an object/dict")

    accounts = _resolve_accounts(list(lines))
    normalized: list[dict] = []

    for idx, line in enumerate(lines, start=1):
        account = line.get("account")
        if not isinstance(account, Account):
            account_id = line.get("account_id", account)
            if account_id in (None, ""):
                raise InvalidLineError(f"Line {idx}: each line must have an account")
            account = accounts[int(account_id)]

        if not account.is_active:
            raise InvalidLineError(f"Line {idx}: account {account.code} is inactive")

        debit = money(line.get("debit", line.get("debit_amount")))
        credit = money(line.get("credit", line.get("credit_amount")))

        if debit < ZERO or credit < ZERO:
            raise InvalidLineError(f"Line {idx}: debit or credit cannot be negative")
        if debit > ZERO and credit > ZERO:
            raise InvalidLineError(f"Line {idx}: a line cannot have both debit and credit")
        if debit == ZERO and credit == ZERO:
            raise InvalidLineError(f"Line {idx}: a line must have either debit or credit")

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "description": str(line.get("description") or "").strip()[:255],
                "reference": str(line.get("reference") or "").strip()[:100],
            }
        )

    return normalized


@transaction.atomic
def create_journal_entry(
    *,
    date: date_cls | None,
    description: str,
    lines: list,
    reference: str | None = None,
    post: bool = False,
) -> JournalEntry:
    """
    Validate and persist one balanced journal entry with its lines.

    Lines are dicts with an `account` (Account instance) or `account_id`,
    plus `debit` / `credit` (or `debit_amount` / `credit_amount`) and
    optional `description` / `reference`.

    post=True creates the entry already posted (system-derived entries).
    """
    description = (description or "").strip()
    if not description:
        raise LedgerValidationError("Journal entry description is required")
    if date is None:
        raise LedgerValidationError("Journal entry date is required")

    normalized = _normalize_lines(lines)

    total_debit = sum((ln["debit"] for ln in normalized), ZERO)
    total_credit = sum((ln["credit"] for ln in normalized), ZERO)

    if abs(total_debit - total_credit) >= BALANCE_TOLERANCE:
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={total_debit} credits={total_credit}"
        )

    entry = JournalEntry.objects.create(
        entry_number=next_entry_number(),
        date=date,
        description=description,
        reference=(reference or "").strip(),
        total_debit=total_debit,
        total_credit=total_credit,
        is_posted=post,
        posted_at=timezone.now() if post else None,
    )

    JournalEntryLine.objects.bulk_create(
        [
            JournalEntryLine(
                journal_entry=entry,
                account=ln["account"],
                debit_amount=ln["debit"],
                credit_amount=ln["credit"],
                description=ln["description"],
                reference=ln["reference"],
            )
            for ln in normalized
        ]
    )

    logger.info(
        "Journal entry created",
        extra={
            "entry_number": entry.entry_number,
            "reference": entry.reference,
            "total": str(total_debit),
            "is_posted": post,
        },
    )
    return entry


@transaction.atomic
def post_journal_entry(entry_id) -> JournalEntry:
    try:
        entry = JournalEntry.objects.select_for_update().get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError("Journal entry not found") from exc

    if entry.is_posted:
        raise AlreadyPostedError(f"Journal entry {entry.entry_number} is already posted")

    entry.is_posted = True
    entry.posted_at = timezone.now()
    entry.save(update_fields=["is_posted", "posted_at"])

    logger.info("Journal entry posted", extra={"entry_number": entry.entry_number})
    return entry


def list_journal_entries(
    *,
    search: str | None = None,
    date_from: date_cls | None = None,
    date_to: date_cls | None = None,
    is_posted: bool | None = None,
):
    qs = JournalEntry.objects.prefetch_related(
        Prefetch("lines", queryset=JournalEntryLine.objects.select_related("account"))
    )

    search = (search or "").strip()
    if search:
        qs = qs.filter(
            Q(description__icontains=search)
            | Q(entry_number__icontains=search)
            | Q(reference__icontains=search)
        )
    if date_from:
        qs = qs.filter(date__gte=date_from)
    if date_to:
        qs = qs.filter(date__lte=date_to)
    if is_posted is not None:
        qs = qs.filter(is_posted=is_posted)

    return qs.order_by("-date", "-entry_number")


def delete_journal_entry(entry_id) -> int:
    """
    Cascading delete used only when a parent document (payment, invoice,
    credit or debit note) is removed or reissued. Deletes exactly the
    entry the parent points at, never entries that merely share its
    reference. Returns the number of journal entries deleted (0 or 1).
    """
    if entry_id in (None, ""):
        return 0

    qs = JournalEntry.objects.filter(pk=entry_id)
    entry_number = qs.values_list("entry_number", flat=True).first()
    if entry_number is None:
        return 0

    # QuerySet.delete bypasses JournalEntry.delete(); lines cascade
    qs.delete()

    logger.info(
        "Journal entry deleted with parent document",
        extra={"entry_id": entry_id, "entry_number": entry_number},
    )
    return 1
