# parties/services/balance_service.py

"""
======================================================
PATH: parties/services/balance_service.py
======================================================
PARTY BALANCE LEDGERS

Three structurally identical running-balance ledgers:
- CUSTOMER: balance = what the customer owes us   (DEBIT +, CREDIT -)
- VENDOR:   balance = what we owe the vendor       (DEBIT +, CREDIT -)
- COMPANY:  balance = our cash position            (CREDIT +, DEBIT -)

Guarantees:
- Owner balance update + transaction row append happen in ONE atomic block
- The owner row is locked (select_for_update) for read-compute-write
- Negative balances are allowed (prepaid customer credit, overdrafts)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from accounting.services.exceptions import LedgerValidationError, NotFoundError
from accounting.services.money import positive_money
from parties.models import (
    CompanyAccount,
    CompanyTransaction,
    Customer,
    CustomerTransaction,
    PartyTransaction,
    Vendor,
    VendorTransaction,
)

logger = logging.getLogger("parties")

CREDIT = PartyTransaction.CREDIT
DEBIT = PartyTransaction.DEBIT

CUSTOMER = "CUSTOMER"
VENDOR = "VENDOR"
COMPANY = "COMPANY"


@dataclass(frozen=True)
class LedgerDefinition:
    owner_model: type
    transaction_model: type
    owner_field: str
    # sign applied to the amount for a DEBIT; CREDIT uses the opposite
    debit_sign: int


LEDGERS = {
    CUSTOMER: LedgerDefinition(Customer, CustomerTransaction, "customer", +1),
    VENDOR: LedgerDefinition(Vendor, VendorTransaction, "vendor", +1),
    COMPANY: LedgerDefinition(CompanyAccount, CompanyTransaction, "company_account", -1),
}


def signed_amount(ledger: str, direction: str, amount):
    ledger_def = LEDGERS[ledger]
    sign = ledger_def.debit_sign if direction == DEBIT else -ledger_def.debit_sign
    return amount * sign


def get_company_account() -> CompanyAccount:
    account = CompanyAccount.objects.order_by("id").first()
    if account is None:
        account = CompanyAccount.objects.create(name=CompanyAccount.DEFAULT_NAME)
        logger.info("Company account created on first use")
    return account


def _lock_owner(ledger_def: LedgerDefinition, ledger: str, owner_id):
    if ledger == COMPANY:
        owner = owner_id and CompanyAccount.objects.filter(pk=owner_id).first()
        owner = owner or get_company_account()
        return CompanyAccount.objects.select_for_update().get(pk=owner.pk)

    try:
        return ledger_def.owner_model.objects.select_for_update().get(pk=owner_id)
    except (ledger_def.owner_model.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"{ledger_def.owner_model.__name__} not found") from exc


@transaction.atomic
def post_transaction(
    *,
    ledger: str,
    owner_id,
    direction: str,
    amount,
    description: str,
    reference: str = "",
    invoice_number: str | None = None,
) -> dict:
    """
    Apply one posting to a party ledger.

    Returns {"previous_balance", "new_balance", "transaction"}.
    """
    ledger_def = LEDGERS.get(ledger)
    if ledger_def is None:
        raise LedgerValidationError(f"Unknown ledger {ledger!r}")

    direction = (direction or "").strip().upper()
    if direction not in (CREDIT, DEBIT):
        raise LedgerValidationError("Type must be CREDIT or DEBIT")

    amt = positive_money(amount)

    description = (description or "").strip()
    if not description:
        raise LedgerValidationError("description is required")

    owner = _lock_owner(ledger_def, ledger, owner_id)

    previous_balance = owner.current_balance
    new_balance = previous_balance + signed_amount(ledger, direction, amt)

    owner.current_balance = new_balance
    owner.save(update_fields=["current_balance", "updated_at"])

    txn = ledger_def.transaction_model.objects.create(
        **{ledger_def.owner_field: owner},
        direction=direction,
        amount=amt,
        description=description[:255],
        reference=(reference or "")[:100],
        invoice_number=invoice_number or "",
        previous_balance=previous_balance,
        new_balance=new_balance,
    )

    logger.info(
        "Party ledger posting",
        extra={
            "ledger": ledger,
            "owner_id": owner.pk,
            "direction": direction,
            "amount": str(amt),
            "new_balance": str(new_balance),
        },
    )

    return {
        "previous_balance": previous_balance,
        "new_balance": new_balance,
        "transaction": txn,
    }


def post_customer_transaction(customer_id, direction, amount, description, reference="", invoice_number=None):
    return post_transaction(
        ledger=CUSTOMER,
        owner_id=customer_id,
        direction=direction,
        amount=amount,
        description=description,
        reference=reference,
        invoice_number=invoice_number,
    )


def post_vendor_transaction(vendor_id, direction, amount, description, reference="", invoice_number=None):
    return post_transaction(
        ledger=VENDOR,
        owner_id=vendor_id,
        direction=direction,
        amount=amount,
        description=description,
        reference=reference,
        invoice_number=invoice_number,
    )


def post_company_transaction(direction, amount, description, reference="", invoice_number=None):
    return post_transaction(
        ledger=COMPANY,
        owner_id=None,
        direction=direction,
        amount=amount,
        description=description,
        reference=reference,
        invoice_number=invoice_number,
    )


def recent_transactions(ledger: str, owner, limit: int = 50):
    ledger_def = LEDGERS[ledger]
    return ledger_def.transaction_model.objects.filter(**{ledger_def.owner_field: owner}).order_by(
        "-created_at", "-id"
    )[:limit]
