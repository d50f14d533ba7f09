# parties/api/serializers/__init__.py

from parties.api.serializers.parties import (
    CompanyAccountSerializer,
    CustomerSerializer,
    VendorSerializer,
)
from parties.api.serializers.transactions import (
    CompanyTransactionSerializer,
    CustomerTransactionSerializer,
    ManualPostingSerializer,
    VendorTransactionSerializer,
)

__all__ = [
    "CustomerSerializer",
    "VendorSerializer",
    "CompanyAccountSerializer",
    "CustomerTransactionSerializer",
    "VendorTransactionSerializer",
    "CompanyTransactionSerializer",
    "ManualPostingSerializer",
]
