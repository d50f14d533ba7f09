# billing/models/__init__.py

from billing.models.credit_note import CreditNote
from billing.models.debit_note import DebitNote
from billing.models.invoice import Invoice
from billing.models.payment import Payment

__all__ = [
    "Invoice",
    "Payment",
    "CreditNote",
    "DebitNote",
]
