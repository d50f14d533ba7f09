# parties/models/__init__.py

from parties.models.party import CompanyAccount, Customer, Vendor
from parties.models.transaction import (
    CompanyTransaction,
    CustomerTransaction,
    PartyTransaction,
    VendorTransaction,
)

__all__ = [
    "Customer",
    "Vendor",
    "CompanyAccount",
    "PartyTransaction",
    "CustomerTransaction",
    "VendorTransaction",
    "CompanyTransaction",
]
