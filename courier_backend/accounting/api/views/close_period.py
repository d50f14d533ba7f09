# PATH: accounting/api/views/close_period.py

"""
PATH: accounting/api/views/close_period.py

PERIOD CLOSE API

POST /api/accounting/close-period/  {"start_date": "...", "end_date": "..."}

- 201 when a closing entry was created
- 200 when the period was already closed (existing entry returned) or
  there was no net income to close (journal_entry is null)

Security:
- Authenticated
- Requires explicit permission: accounting.add_periodclose
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response, forbidden
from accounting.api.serializers import ClosePeriodSerializer, JournalEntrySerializer
from accounting.services.exceptions import AccountingServiceError
from accounting.services.period_close_service import close_period

# Django auto permission on PeriodClose model
PERIOD_CLOSE_PERMISSION = "accounting.add_periodclose"


def _as_str(value):
    return None if value is None else str(value)


class ClosePeriodView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ClosePeriodSerializer

    @extend_schema(
        tags=["accounting"],
        request=ClosePeriodSerializer,
        responses={200: dict, 201: dict, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(PERIOD_CLOSE_PERMISSION):
            return forbidden("You do not have permission to close accounting periods.")

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = close_period(start_date=data["start_date"], end_date=data["end_date"])
        except AccountingServiceError as exc:
            return error_response(exc)

        je = result["journal_entry"]

        return Response(
            {
                "created": result["created"],
                "journal_entry": JournalEntrySerializer(je).data if je else None,
                "summary": {
                    "total_revenue": _as_str(result["total_revenue"]),
                    "total_expenses": _as_str(result["total_expenses"]),
                    "net_income": _as_str(result["net_income"]),
                },
            },
            status=status.HTTP_201_CREATED if result["created"] else status.HTTP_200_OK,
        )
