# billing/api/views/credit_notes.py

"""
PATH: billing/api/views/credit_notes.py

CREDIT NOTES API

GET    /api/billing/credit-notes/        ?customer=&search=
POST   /api/billing/credit-notes/
GET    /api/billing/credit-notes/<id>/
DELETE /api/billing/credit-notes/<id>/   removes payment + journal entry, reverses ledger
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from billing.api.serializers import CreditNoteCreateSerializer, CreditNoteSerializer
from billing.models import CreditNote
from billing.services.credit_note_service import create_credit_note, delete_credit_note


class CreditNoteListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CreditNoteCreateSerializer
    filterset_fields = ["customer", "invoice", "currency"]

    def get_queryset(self):
        qs = CreditNote.objects.select_related("customer", "invoice").order_by(
            "-created_at", "-id"
        )
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(credit_note_number__icontains=search)
                | Q(description__icontains=search)
                | Q(customer__company_name__icontains=search)
                | Q(customer__person_name__icontains=search)
            )
        return qs

    @extend_schema(tags=["billing"], responses=CreditNoteSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.view_creditnote"):
            return forbidden("You do not have permission to view credit notes.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CreditNoteSerializer(page, many=True).data)
        return Response(CreditNoteSerializer(qs, many=True).data)

    @extend_schema(
        tags=["billing"],
        request=CreditNoteCreateSerializer,
        responses={201: CreditNoteSerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.add_creditnote"):
            return forbidden("You do not have permission to create credit notes.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            note = create_credit_note(
                customer_id=data["customer_id"],
                amount=data["amount"],
                date=data["date"],
                description=data.get("description", ""),
                invoice_id=data.get("invoice_id"),
                currency=data.get("currency") or None,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(CreditNoteSerializer(note).data, status=status.HTTP_201_CREATED)


class CreditNoteDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CreditNoteSerializer

    def get_queryset(self):
        return CreditNote.objects.select_related("customer", "invoice")

    @extend_schema(tags=["billing"])
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.view_creditnote"):
            return forbidden("You do not have permission to view credit notes.")
        return Response(self.get_serializer(self.get_object()).data)

    @extend_schema(tags=["billing"], responses={200: dict, 403: dict, 404: dict})
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("billing.delete_creditnote"):
            return forbidden("You do not have permission to delete credit notes.")

        try:
            result = delete_credit_note(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"detail": f"Credit note {result['credit_note_number']} deleted", **result},
            status=status.HTTP_200_OK,
        )
