# companies/apps.py

"""
COMPANIES APP CONFIG

Tenant master data:
- Companies (tenants) and user memberships
- Clients / suppliers (document counterparties)
- Document numbering sequences
"""

from django.apps import AppConfig


class CompaniesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "companies"
    verbose_name = "Companies"
