# accounting/api/views/journal_entries.py

"""
PATH: accounting/api/views/journal_entries.py

JOURNAL ENTRIES API

GET  /api/accounting/journal-entries/            ?search=&date_from=&date_to=&is_posted=&page=
POST /api/accounting/journal-entries/            manual entry (validated + balanced)
GET  /api/accounting/journal-entries/<id>/
POST /api/accounting/journal-entries/<id>/post/  one-way posting

There is no update or delete endpoint: entries are immutable apart from
the posted flag.

Security:
- Authenticated
- accounting.view_journalentry / add_journalentry / change_journalentry (posting)
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.api.params import parse_bool, parse_date_param
from accounting.api.serializers import JournalEntryCreateSerializer, JournalEntrySerializer
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import (
    create_journal_entry,
    list_journal_entries,
    post_journal_entry,
)

VIEW_PERMISSION = "accounting.view_journalentry"


class JournalEntryListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer

    def get_queryset(self):
        params = self.request.query_params
        return list_journal_entries(
            search=params.get("search"),
            date_from=parse_date_param(params.get("date_from"), name="date_from"),
            date_to=parse_date_param(params.get("date_to"), name="date_to"),
            is_posted=parse_bool(params.get("is_posted")),
        )

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="search", type=str, required=False),
            OpenApiParameter(name="date_from", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="date_to", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="is_posted", type=bool, required=False),
        ],
        responses=JournalEntrySerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view journal entries.")

        qs = self.get_queryset()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(JournalEntrySerializer(page, many=True).data)
        return Response(JournalEntrySerializer(qs, many=True).data)

    @extend_schema(
        tags=["accounting"],
        request=JournalEntryCreateSerializer,
        responses={201: JournalEntrySerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_journalentry"):
            return forbidden("You do not have permission to create journal entries.")

        serializer = JournalEntryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            entry = create_journal_entry(
                date=data["date"],
                description=data["description"],
                reference=data.get("reference"),
                lines=[dict(line) for line in data["lines"]],
                post=data.get("post", False),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        entry = list_journal_entries().get(pk=entry.pk)
        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class JournalEntryDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer

    @extend_schema(tags=["accounting"], responses=JournalEntrySerializer)
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view journal entries.")

        entry = get_object_or_404(list_journal_entries(), pk=pk)
        return Response(JournalEntrySerializer(entry).data)


class PostJournalEntryView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer

    @extend_schema(
        tags=["accounting"],
        request=None,
        responses={200: JournalEntrySerializer, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to post journal entries.")

        try:
            entry = post_journal_entry(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        entry = JournalEntry.objects.prefetch_related("lines__account").get(pk=entry.pk)
        return Response(JournalEntrySerializer(entry).data)
