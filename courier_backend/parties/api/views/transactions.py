# parties/api/views/transactions.py

"""
PATH: parties/api/views/transactions.py

PARTY LEDGER API

GET  /api/parties/customers/<id>/transactions/   latest 50 + balance
POST /api/parties/customers/<id>/transactions/   manual CREDIT/DEBIT
(same for /vendors/<id>/transactions/)

GET  /api/parties/company-account/               balance + latest 50
POST /api/parties/company-account/transactions/  manual CREDIT/DEBIT

All postings go through parties.services.balance_service (atomic).
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from parties.api.serializers import (
    CompanyAccountSerializer,
    CompanyTransactionSerializer,
    CustomerTransactionSerializer,
    ManualPostingSerializer,
    VendorTransactionSerializer,
)
from parties.api.views.parties import model_perm
from parties.models import (
    CompanyTransaction,
    Customer,
    CustomerTransaction,
    Vendor,
    VendorTransaction,
)
from parties.services import balance_service

HISTORY_LIMIT = 50


def _posting_payload(result, serializer_class):
    return {
        "previous_balance": str(result["previous_balance"]),
        "new_balance": str(result["new_balance"]),
        "transaction": serializer_class(result["transaction"]).data,
    }


class PartyTransactionsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ManualPostingSerializer

    ledger = None
    owner_model = None
    transaction_model = None
    transaction_serializer = None

    @extend_schema(tags=["parties"])
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(model_perm("view", self.transaction_model)):
            return forbidden("You do not have permission to view ledger transactions.")

        owner = get_object_or_404(self.owner_model, pk=pk)
        rows = balance_service.recent_transactions(self.ledger, owner, HISTORY_LIMIT)

        return Response(
            {
                "id": owner.pk,
                "company_name": owner.company_name,
                "current_balance": str(owner.current_balance),
                "transactions": self.transaction_serializer(rows, many=True).data,
            }
        )

    @extend_schema(
        tags=["parties"],
        request=ManualPostingSerializer,
        responses={201: dict, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(model_perm("add", self.transaction_model)):
            return forbidden("You do not have permission to post ledger transactions.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = balance_service.post_transaction(
                ledger=self.ledger,
                owner_id=pk,
                direction=data["direction"],
                amount=data["amount"],
                description=data["description"],
                reference=data.get("reference", ""),
                invoice_number=data.get("invoice_number"),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            _posting_payload(result, self.transaction_serializer),
            status=status.HTTP_201_CREATED,
        )


class CustomerTransactionsView(PartyTransactionsView):
    ledger = balance_service.CUSTOMER
    owner_model = Customer
    transaction_model = CustomerTransaction
    transaction_serializer = CustomerTransactionSerializer


class VendorTransactionsView(PartyTransactionsView):
    ledger = balance_service.VENDOR
    owner_model = Vendor
    transaction_model = VendorTransaction
    transaction_serializer = VendorTransactionSerializer


class CompanyAccountView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CompanyAccountSerializer

    @extend_schema(tags=["parties"], responses={200: dict, 403: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(model_perm("view", CompanyTransaction)):
            return forbidden("You do not have permission to view the company account.")

        account = balance_service.get_company_account()
        rows = balance_service.recent_transactions(
            balance_service.COMPANY, account, HISTORY_LIMIT
        )

        return Response(
            {
                "account": CompanyAccountSerializer(account).data,
                "transactions": CompanyTransactionSerializer(rows, many=True).data,
            }
        )


class CompanyTransactionsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ManualPostingSerializer

    @extend_schema(
        tags=["parties"],
        request=ManualPostingSerializer,
        responses={201: dict, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(model_perm("add", CompanyTransaction)):
            return forbidden("You do not have permission to post company transactions.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = balance_service.post_company_transaction(
                data["direction"],
                data["amount"],
                data["description"],
                reference=data.get("reference", ""),
                invoice_number=data.get("invoice_number"),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            _posting_payload(result, CompanyTransactionSerializer),
            status=status.HTTP_201_CREATED,
        )
