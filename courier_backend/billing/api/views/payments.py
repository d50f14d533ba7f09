# billing/api/views/payments.py

"""
PATH: billing/api/views/payments.py

PAYMENTS API (ORCHESTRATOR)

GET  /api/billing/payments/           ?invoice=&transaction_type=&category=
POST /api/billing/payments/process/   pay an invoice (atomic saga)
GET  /api/billing/payments/allocate/  ?party_type=CUSTOMER&party_id=1[&exclude=INV]
POST /api/billing/payments/allocate/  apply an overpayment credit oldest-first
GET    /api/billing/payments/<id>/
PATCH  /api/billing/payments/<id>/     edit; amount, date or reference re-posts the payment
DELETE /api/billing/payments/<id>/     reverse postings, delete journal entry, refresh status

Security:
- Authenticated
- billing.view_payment / add_payment / change_payment / delete_payment
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from billing.api.serializers import (
    AllocateExcessSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
    ProcessPaymentSerializer,
)
from billing.models import Payment
from billing.services.payment_service import (
    allocate_excess_payment,
    delete_payment,
    outstanding_invoices,
    outstanding_total,
    process_payment,
    update_payment,
)

PAYMENT_VIEW_PERMISSION = "billing.view_payment"
PAYMENT_ADD_PERMISSION = "billing.add_payment"
PAYMENT_CHANGE_PERMISSION = "billing.change_payment"
PAYMENT_DELETE_PERMISSION = "billing.delete_payment"


class PaymentListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer
    filterset_fields = ["invoice", "transaction_type", "category", "mode"]

    def get_queryset(self):
        return Payment.objects.select_related("invoice", "journal_entry").order_by(
            "-date", "-id"
        )

    @extend_schema(tags=["billing"], responses=PaymentSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_VIEW_PERMISSION):
            return forbidden("You do not have permission to view payments.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)


class ProcessPaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ProcessPaymentSerializer

    @extend_schema(
        tags=["billing"],
        request=ProcessPaymentSerializer,
        responses={201: dict, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_ADD_PERMISSION):
            return forbidden("You do not have permission to record payments.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = process_payment(
                invoice_number=data["invoice_number"],
                payment_amount=data["payment_amount"],
                payment_type=data["payment_type"],
                payment_method=data.get("payment_method"),
                reference=data.get("reference", ""),
                description=data.get("description", ""),
                debit_account_id=data.get("debit_account_id"),
                credit_account_id=data.get("credit_account_id"),
                payment_date=data.get("payment_date"),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {
                "payment": PaymentSerializer(result["payment"]).data,
                "journal_entry": {
                    "id": result["journal_entry"].id,
                    "entry_number": result["journal_entry"].entry_number,
                },
                "invoice_number": result["invoice"].invoice_number,
                "status": result["status"],
                "amount_for_invoice": str(result["amount_for_invoice"]),
                "overpayment": str(result["overpayment"]),
                "total_paid": str(result["total_paid"]),
                "remaining_amount": str(result["remaining_amount"]),
            },
            status=status.HTTP_201_CREATED,
        )


class AllocateExcessPaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AllocateExcessSerializer

    @extend_schema(
        tags=["billing"],
        parameters=[
            OpenApiParameter(name="party_type", type=str, required=True),
            OpenApiParameter(name="party_id", type=int, required=True),
            OpenApiParameter(name="exclude", type=str, required=False),
        ],
        responses={200: dict, 400: dict, 403: dict},
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_VIEW_PERMISSION):
            return forbidden("You do not have permission to view payments.")

        qp = request.query_params
        party_id = qp.get("party_id")
        if not party_id:
            return Response({"detail": "party_id is required"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            rows = outstanding_invoices(
                qp.get("party_type"),
                party_id,
                exclude_invoice_number=(qp.get("exclude") or "").strip() or None,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {
                "invoices": [
                    {
                        "id": r["invoice"].id,
                        "invoice_number": r["invoice"].invoice_number,
                        "invoice_date": r["invoice"].invoice_date.isoformat(),
                        "total_amount": str(r["invoice"].total_amount),
                        "total_paid": str(r["total_paid"]),
                        "remaining_amount": str(r["remaining_amount"]),
                        "status": r["invoice"].status,
                    }
                    for r in rows
                ],
                "total_outstanding": str(outstanding_total(rows)),
            }
        )

    @extend_schema(
        tags=["billing"],
        request=AllocateExcessSerializer,
        responses={200: dict, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_ADD_PERMISSION):
            return forbidden("You do not have permission to record payments.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = allocate_excess_payment(
                payment_type=data["payment_type"],
                excess_amount=data["excess_amount"],
                original_invoice_number=data["original_invoice_number"],
                payment_reference=data["payment_reference"],
                customer_id=data.get("customer_id"),
                vendor_id=data.get("vendor_id"),
                specific_invoices=data.get("specific_invoices"),
                payment_date=data.get("payment_date"),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {
                "allocations": [
                    {
                        **a,
                        "allocated_amount": str(a["allocated_amount"]),
                        "remaining_amount": str(a["remaining_amount"]),
                    }
                    for a in result["allocations"]
                ],
                "total_allocated": str(result["total_allocated"]),
                "unapplied_credit": str(result["unapplied_credit"]),
            },
            status=status.HTTP_200_OK,
        )


class PaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentSerializer

    def get_queryset(self):
        return Payment.objects.select_related("invoice", "journal_entry")

    @extend_schema(tags=["billing"], responses={200: PaymentSerializer, 403: dict, 404: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_VIEW_PERMISSION):
            return forbidden("You do not have permission to view payments.")
        return Response(self.get_serializer(self.get_object()).data)

    @extend_schema(
        tags=["billing"],
        request=PaymentUpdateSerializer,
        responses={200: dict, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_CHANGE_PERMISSION):
            return forbidden("You do not have permission to edit payments.")

        s = PaymentUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = update_payment(pk, **s.validated_data)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"payment": PaymentSerializer(result["payment"]).data, "status": result["status"]}
        )

    @extend_schema(tags=["billing"], responses={200: dict, 400: dict, 403: dict, 404: dict, 409: dict})
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(PAYMENT_DELETE_PERMISSION):
            return forbidden("You do not have permission to delete payments.")

        try:
            result = delete_payment(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"detail": f"Payment {result['payment_id']} deleted", **result},
            status=status.HTTP_200_OK,
        )
