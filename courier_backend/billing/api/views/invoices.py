# billing/api/views/invoices.py

"""
PATH: billing/api/views/invoices.py

INVOICES API

GET  /api/billing/invoices/        ?status=&profile=&customer=&vendor=&search=
POST /api/billing/invoices/        create + party DEBIT + posted journal entry
GET    /api/billing/invoices/<id>/ invoice + payment status + payments
PATCH  /api/billing/invoices/<id>/ edit; amount, date and currency locked once paid
DELETE /api/billing/invoices/<id>/ only while no payment references it

Security:
- Authenticated
- billing.view_invoice / add_invoice / change_invoice / delete_invoice
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from billing.api.serializers import (
    InvoiceCreateSerializer,
    InvoiceSerializer,
    InvoiceUpdateSerializer,
    PaymentSerializer,
)
from billing.models import Invoice
from billing.services.invoice_service import create_invoice, delete_invoice, update_invoice
from billing.services.invoice_status import calculate_invoice_payment_status

INVOICE_VIEW_PERMISSION = "billing.view_invoice"
INVOICE_ADD_PERMISSION = "billing.add_invoice"
INVOICE_CHANGE_PERMISSION = "billing.change_invoice"
INVOICE_DELETE_PERMISSION = "billing.delete_invoice"


class InvoiceListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceCreateSerializer
    filterset_fields = ["status", "profile", "customer", "vendor", "currency"]

    def get_queryset(self):
        qs = Invoice.objects.select_related("customer", "vendor").order_by(
            "-invoice_date", "-id"
        )

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(invoice_number__icontains=search)
                | Q(tracking_number__icontains=search)
                | Q(customer__company_name__icontains=search)
                | Q(vendor__company_name__icontains=search)
            )
        return qs

    @extend_schema(tags=["billing"], responses=InvoiceSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(INVOICE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view invoices.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(InvoiceSerializer(page, many=True).data)
        return Response(InvoiceSerializer(qs, many=True).data)

    @extend_schema(
        tags=["billing"],
        request=InvoiceCreateSerializer,
        responses={201: InvoiceSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(INVOICE_ADD_PERMISSION):
            return forbidden("You do not have permission to create invoices.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            invoice = create_invoice(
                invoice_number=data["invoice_number"],
                invoice_date=data.get("invoice_date"),
                profile=data["profile"],
                customer_id=data.get("customer_id"),
                vendor_id=data.get("vendor_id"),
                total_amount=data["total_amount"],
                currency=data.get("currency") or None,
                line_items=data.get("line_items"),
                tracking_number=data.get("tracking_number", ""),
                destination=data.get("destination", ""),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class InvoiceDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceSerializer

    def get_queryset(self):
        return Invoice.objects.select_related("customer", "vendor")

    @extend_schema(tags=["billing"], responses={200: dict, 403: dict, 404: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(INVOICE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view invoices.")

        invoice = self.get_object()
        payment_status = calculate_invoice_payment_status(invoice)
        payments = invoice.payments.select_related("journal_entry").order_by("date", "id")

        return Response(
            {
                "invoice": InvoiceSerializer(invoice).data,
                "payment_status": {k: str(v) for k, v in payment_status.items()},
                "payments": PaymentSerializer(payments, many=True).data,
            }
        )

    @extend_schema(
        tags=["billing"],
        request=InvoiceUpdateSerializer,
        responses={200: InvoiceSerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_CHANGE_PERMISSION):
            return forbidden("You do not have permission to edit invoices.")

        s = InvoiceUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = update_invoice(pk, **s.validated_data)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(tags=["billing"], responses={200: dict, 403: dict, 404: dict, 409: dict})
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_DELETE_PERMISSION):
            return forbidden("You do not have permission to delete invoices.")

        try:
            result = delete_invoice(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"detail": f"Invoice {result['invoice_number']} deleted", **result},
            status=status.HTTP_200_OK,
        )
