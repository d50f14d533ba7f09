# billing/services/invoice_status.py

"""
INVOICE STATUS

Status is a pure function of the accumulated payment sum:
- Unpaid:  total_paid == 0
- Partial: 0 < total_paid < total_amount
- Paid:    total_paid >= total_amount
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.services.money import ZERO, money
from billing.models import Invoice, Payment


def derive_invoice_status(total_paid, total_amount) -> str:
    paid = money(total_paid)
    total = money(total_amount)

    if paid <= ZERO:
        return Invoice.UNPAID
    if paid < total:
        return Invoice.PARTIAL
    return Invoice.PAID


def payment_direction(invoice: Invoice) -> str:
    """Payments counting toward an invoice: INCOME for customers, EXPENSE for vendors."""
    return Payment.INCOME if invoice.is_customer_invoice else Payment.EXPENSE


def total_paid(invoice: Invoice) -> Decimal:
    agg = Payment.objects.filter(
        invoice=invoice,
        transaction_type=payment_direction(invoice),
    ).aggregate(total=Coalesce(Sum("amount"), ZERO))
    return money(agg["total"])


def calculate_invoice_payment_status(invoice: Invoice) -> dict:
    paid = total_paid(invoice)
    total = money(invoice.total_amount)
    return {
        "status": derive_invoice_status(paid, total),
        "total_paid": paid,
        "remaining_amount": max(ZERO, total - paid),
        "total_amount": total,
    }


def refresh_invoice_status(invoice: Invoice) -> dict:
    """Recompute and persist invoice.status; returns the computed payment status."""
    result = calculate_invoice_payment_status(invoice)
    if invoice.status != result["status"]:
        invoice.status = result["status"]
        invoice.save(update_fields=["status", "updated_at"])
    return result
