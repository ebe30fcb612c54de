# documents/apps.py

"""
DOCUMENTS APP CONFIG

Commercial documents (quotes, orders, delivery notes, invoices, credit notes):
- Document kind registry
- FODEC + VAT totals calculator
- Direct entry, edit, status lifecycle and kind-to-kind conversion
"""

from django.apps import AppConfig


class DocumentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "documents"
    verbose_name = "Documents"
