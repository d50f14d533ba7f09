# billing/api/serializers/__init__.py

from billing.api.serializers.credit_notes import (
    CreditNoteCreateSerializer,
    CreditNoteSerializer,
)
from billing.api.serializers.debit_notes import (
    DebitNoteCreateSerializer,
    DebitNoteSerializer,
)
from billing.api.serializers.invoices import (
    InvoiceCreateSerializer,
    InvoiceSerializer,
    InvoiceUpdateSerializer,
)
from billing.api.serializers.payments import (
    AllocateExcessSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
    ProcessPaymentSerializer,
)

__all__ = [
    "InvoiceSerializer",
    "InvoiceCreateSerializer",
    "InvoiceUpdateSerializer",
    "PaymentSerializer",
    "PaymentUpdateSerializer",
    "ProcessPaymentSerializer",
    "AllocateExcessSerializer",
    "CreditNoteSerializer",
    "CreditNoteCreateSerializer",
    "DebitNoteSerializer",
    "DebitNoteCreateSerializer",
]
