# billing/api/views/debit_notes.py

"""
PATH: billing/api/views/debit_notes.py

DEBIT NOTES API

GET    /api/billing/debit-notes/        ?vendor=&search=
POST   /api/billing/debit-notes/
GET    /api/billing/debit-notes/<id>/
DELETE /api/billing/debit-notes/<id>/   removes payment + journal entry, reverses ledger
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from billing.api.serializers import DebitNoteCreateSerializer, DebitNoteSerializer
from billing.models import DebitNote
from billing.services.debit_note_service import create_debit_note, delete_debit_note


class DebitNoteListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DebitNoteCreateSerializer
    filterset_fields = ["vendor", "invoice", "currency"]

    def get_queryset(self):
        qs = DebitNote.objects.select_related("vendor", "invoice").order_by(
            "-created_at", "-id"
        )
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(debit_note_number__icontains=search)
                | Q(description__icontains=search)
                | Q(vendor__company_name__icontains=search)
            )
        return qs

    @extend_schema(tags=["billing"], responses=DebitNoteSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.view_debitnote"):
            return forbidden("You do not have permission to view debit notes.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(DebitNoteSerializer(page, many=True).data)
        return Response(DebitNoteSerializer(qs, many=True).data)

    @extend_schema(
        tags=["billing"],
        request=DebitNoteCreateSerializer,
        responses={201: DebitNoteSerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.add_debitnote"):
            return forbidden("You do not have permission to create debit notes.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            note = create_debit_note(
                vendor_id=data["vendor_id"],
                amount=data["amount"],
                date=data["date"],
                description=data.get("description", ""),
                invoice_id=data.get("invoice_id"),
                currency=data.get("currency") or None,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(DebitNoteSerializer(note).data, status=status.HTTP_201_CREATED)


class DebitNoteDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DebitNoteSerializer

    def get_queryset(self):
        return DebitNote.objects.select_related("vendor", "invoice")

    @extend_schema(tags=["billing"])
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("billing.view_debitnote"):
            return forbidden("You do not have permission to view debit notes.")
        return Response(self.get_serializer(self.get_object()).data)

    @extend_schema(tags=["billing"], responses={200: dict, 403: dict, 404: dict})
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("billing.delete_debitnote"):
            return forbidden("You do not have permission to delete debit notes.")

        try:
            result = delete_debit_note(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"detail": f"Debit note {result['debit_note_number']} deleted", **result},
            status=status.HTTP_200_OK,
        )
