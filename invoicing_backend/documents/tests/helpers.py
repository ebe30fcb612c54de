# documents/tests/helpers.py

from __future__ import annotations

from datetime import timedelta

from django.utils import timezone

from documents.services.document_service import create_document


def fodec_line(**overrides) -> dict:
    line = {
        "description": "Article FODEC",
        "quantity": "2",
        "unit_price": "100",
        "vat_rate": "19",
        "fodec_applicable": True,
        "fodec_rate": "0.01",
    }
    line.update(overrides)
    return line


def plain_line(**overrides) -> dict:
    line = {
        "description": "Service",
        "quantity": "3",
        "unit_price": "50",
        "vat_rate": "13",
        "fodec_applicable": False,
        "fodec_rate": "0.01",
    }
    line.update(overrides)
    return line


def make_invoice(tenant, client, *, lines=None, **kwargs):
    kwargs.setdefault("due_date", timezone.localdate() + timedelta(days=30))
    return create_document(
        tenant=tenant,
        kind="facture",
        client_id=client.pk,
        lines=[fodec_line(), plain_line()] if lines is None else lines,
        **kwargs,
    )


def make_simple_invoice(tenant, client, amount, **kwargs):
    """Invoice whose total equals amount (no tax, no stamp)."""
    return make_invoice(
        tenant,
        client,
        lines=[{"description": "Prestation", "quantity": "1", "unit_price": str(amount), "vat_rate": "0"}],
        **kwargs,
    )
