# parties/api/views/parties.py

"""
PATH: parties/api/views/parties.py

CUSTOMER / VENDOR MASTER DATA API

GET   /api/parties/customers/            ?search=&is_active=
POST  /api/parties/customers/
GET   /api/parties/customers/<id>/
PATCH /api/parties/customers/<id>/
(same for /vendors/)

Security:
- Authenticated
- Django model permissions via has_perm (view/add/change)

current_balance is never writable here; it moves only through postings.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from django.db.models import Q
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden
from accounting.api.params import parse_bool
from parties.api.serializers import CustomerSerializer, VendorSerializer
from parties.models import Customer, Vendor


def model_perm(action: str, model) -> str:
    return f"{model._meta.app_label}.{action}_{model._meta.model_name}"


class PartyListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    model = None

    def get_queryset(self):
        qs = self.model.objects.all().order_by("company_name", "id")

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(company_name__icontains=search)
                | Q(person_name__icontains=search)
                | Q(email__icontains=search)
                | Q(phone__icontains=search)
            )

        is_active = parse_bool(self.request.query_params.get("is_active"))
        if is_active is not None:
            qs = qs.filter(is_active=is_active)

        return qs

    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(model_perm("view", self.model)):
            return forbidden(
                f"You do not have permission to view {self.model._meta.verbose_name_plural.lower()}."
            )

        page = self.paginate_queryset(self.get_queryset())
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(self.get_queryset(), many=True).data)

    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(model_perm("add", self.model)):
            return forbidden(
                f"You do not have permission to create {self.model._meta.verbose_name_plural.lower()}."
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        party = serializer.save()

        return Response(self.get_serializer(party).data, status=status.HTTP_201_CREATED)


class PartyDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    model = None

    def get_queryset(self):
        return self.model.objects.all()

    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(model_perm("view", self.model)):
            return forbidden(
                f"You do not have permission to view {self.model._meta.verbose_name_plural.lower()}."
            )
        return Response(self.get_serializer(self.get_object()).data)

    def patch(self, request, *args, **kwargs):
        return self._update(request, partial=True)

    def put(self, request, *args, **kwargs):
        return self._update(request, partial=False)

    def _update(self, request, *, partial):
        if not request.user.has_perm(model_perm("change", self.model)):
            return forbidden(
                f"You do not have permission to change {self.model._meta.verbose_name_plural.lower()}."
            )

        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        party = serializer.save()
        return Response(self.get_serializer(party).data)


_search_params = [
    OpenApiParameter(name="search", type=str, required=False),
    OpenApiParameter(name="is_active", type=bool, required=False),
]


@extend_schema(tags=["parties"], parameters=_search_params)
class CustomerListCreateView(PartyListCreateView):
    model = Customer
    serializer_class = CustomerSerializer


@extend_schema(tags=["parties"])
class CustomerDetailView(PartyDetailView):
    model = Customer
    serializer_class = CustomerSerializer


@extend_schema(tags=["parties"], parameters=_search_params)
class VendorListCreateView(PartyListCreateView):
    model = Vendor
    serializer_class = VendorSerializer


@extend_schema(tags=["parties"])
class VendorDetailView(PartyDetailView):
    model = Vendor
    serializer_class = VendorSerializer
