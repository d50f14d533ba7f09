# billing/api/urls.py

from django.urls import path

from billing.api.views.credit_notes import CreditNoteDetailView, CreditNoteListCreateView
from billing.api.views.debit_notes import DebitNoteDetailView, DebitNoteListCreateView
from billing.api.views.invoices import InvoiceDetailView, InvoiceListCreateView
from billing.api.views.payments import (
    AllocateExcessPaymentView,
    PaymentDetailView,
    PaymentListView,
    ProcessPaymentView,
)

urlpatterns = [
    # Invoices
    path("invoices/", InvoiceListCreateView.as_view(), name="invoice-list"),
    path("invoices/<int:pk>/", InvoiceDetailView.as_view(), name="invoice-detail"),
    # Payments
    path("payments/", PaymentListView.as_view(), name="payment-list"),
    path("payments/process/", ProcessPaymentView.as_view(), name="payment-process"),
    path("payments/allocate/", AllocateExcessPaymentView.as_view(), name="payment-allocate"),
    path("payments/<int:pk>/", PaymentDetailView.as_view(), name="payment-detail"),
    # Credit notes
    path("credit-notes/", CreditNoteListCreateView.as_view(), name="credit-note-list"),
    path("credit-notes/<int:pk>/", CreditNoteDetailView.as_view(), name="credit-note-detail"),
    # Debit notes
    path("debit-notes/", DebitNoteListCreateView.as_view(), name="debit-note-list"),
    path("debit-notes/<int:pk>/", DebitNoteDetailView.as_view(), name="debit-note-detail"),
]
