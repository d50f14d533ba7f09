# parties/api/urls.py

from django.urls import path

from parties.api.views.parties import (
    CustomerDetailView,
    CustomerListCreateView,
    VendorDetailView,
    VendorListCreateView,
)
from parties.api.views.transactions import (
    CompanyAccountView,
    CompanyTransactionsView,
    CustomerTransactionsView,
    VendorTransactionsView,
)

urlpatterns = [
    # Customers
    path("customers/", CustomerListCreateView.as_view(), name="customer-list"),
    path("customers/<int:pk>/", CustomerDetailView.as_view(), name="customer-detail"),
    path(
        "customers/<int:pk>/transactions/",
        CustomerTransactionsView.as_view(),
        name="customer-transactions",
    ),
    # Vendors
    path("vendors/", VendorListCreateView.as_view(), name="vendor-list"),
    path("vendors/<int:pk>/", VendorDetailView.as_view(), name="vendor-detail"),
    path(
        "vendors/<int:pk>/transactions/",
        VendorTransactionsView.as_view(),
        name="vendor-transactions",
    ),
    # Company cash position
    path("company-account/", CompanyAccountView.as_view(), name="company-account"),
    path(
        "company-account/transactions/",
        CompanyTransactionsView.as_view(),
        name="company-transactions",
    ),
]
