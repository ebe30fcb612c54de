# payments/apps.py

"""
PAYMENTS APP CONFIG

Encaissements / décaissements:
- Payment records, optionally linked to an invoice
- Journal posting against treasury and receivable / payable accounts
- Invoice paid / remaining / status reconciliation
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
