# companies/models/__init__.py

"""
COMPANIES MODELS PACKAGE EXPORTS

Keep this file imports-only (no business logic).
"""

from companies.models.company import Company, CompanyMembership
from companies.models.sequence import DocumentSequence
from companies.models.third_party import Client, Supplier

__all__ = [
    "Company",
    "CompanyMembership",
    "Client",
    "Supplier",
    "DocumentSequence",
]
