# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API

GET    /api/accounting/accounts/             ?search=&category=&account_type=&is_active=&page=
POST   /api/accounting/accounts/
GET    /api/accounting/accounts/<id>/
PATCH  /api/accounting/accounts/<id>/
DELETE /api/accounting/accounts/<id>/        409 when journal lines reference it
POST   /api/accounting/accounts/initialize/  seed the default courier chart

Security:
- Authenticated
- Django model permissions: accounting.{view,add,change,delete}_account
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.api.params import parse_bool
from accounting.api.serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.services.chart_service import (
    create_account,
    delete_account,
    get_account,
    initialize_default_accounts,
    list_accounts,
    update_account,
)
from accounting.services.exceptions import AccountingServiceError


class AccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    def get_queryset(self):
        params = self.request.query_params
        return list_accounts(
            search=params.get("search"),
            category=params.get("category"),
            account_type=params.get("account_type"),
            is_active=parse_bool(params.get("is_active")),
        )

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="search", type=str, required=False),
            OpenApiParameter(name="category", type=str, required=False),
            OpenApiParameter(name="account_type", type=str, required=False),
            OpenApiParameter(name="is_active", type=bool, required=False),
        ],
        responses=AccountSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return forbidden("You do not have permission to view accounts.")

        qs = self.get_queryset()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(AccountSerializer(page, many=True).data)
        return Response(AccountSerializer(qs, many=True).data)

    @extend_schema(
        tags=["accounting"],
        request=AccountCreateSerializer,
        responses={201: AccountSerializer, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_account"):
            return forbidden("You do not have permission to create accounts.")

        serializer = AccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            account = create_account(**serializer.validated_data)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer

    @extend_schema(tags=["accounting"], responses=AccountSerializer)
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return forbidden("You do not have permission to view accounts.")

        try:
            account = get_account(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(AccountSerializer(account).data)

    @extend_schema(
        tags=["accounting"],
        request=AccountUpdateSerializer,
        responses={200: AccountSerializer, 400: dict, 404: dict, 409: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.change_account"):
            return forbidden("You do not have permission to change accounts.")

        serializer = AccountUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            account = update_account(pk, **serializer.validated_data)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(AccountSerializer(account).data)

    @extend_schema(tags=["accounting"], responses={204: None, 404: dict, 409: dict})
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.delete_account"):
            return forbidden("You do not have permission to delete accounts.")

        try:
            delete_account(pk)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)


class InitializeAccountsView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], request=None, responses={201: dict, 409: dict})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_account"):
            return forbidden("You do not have permission to create accounts.")

        try:
            count = initialize_default_accounts()
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {"detail": "Chart of accounts initialized", "count": count},
            status=status.HTTP_201_CREATED,
        )
