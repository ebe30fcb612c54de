# companies/services/third_parties.py

"""
Tenant-scoped counterparty lookups.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError

from accounting.services.exceptions import NotFoundError
from companies.context import TenantContext
from companies.models import Client, Supplier


def _get_scoped(model, *, tenant: TenantContext, obj_id, label: str):
    if not obj_id:
        raise NotFoundError(f"{label} id is required")
    try:
        return model.objects.get(id=obj_id, company_id=tenant.company_id, is_active=True)
    except (model.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError(f"{label} {obj_id} not found") from exc


def get_client(*, tenant: TenantContext, client_id) -> Client:
    return _get_scoped(Client, tenant=tenant, obj_id=client_id, label="Client")


def get_supplier(*, tenant: TenantContext, supplier_id) -> Supplier:
    return _get_scoped(Supplier, tenant=tenant, obj_id=supplier_id, label="Supplier")
