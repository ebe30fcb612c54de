# companies/context.py

"""
TENANT CONTEXT

Every core service call receives an explicit TenantContext instead of reading
company / user / role from ambient session state. All lookups made on behalf
of a call are scoped to tenant.company_id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from accounting.services.exceptions import InvalidInputError, NotFoundError


@dataclass(frozen=True)
class TenantContext:
    company_id: uuid.UUID
    user_id: int | None = None
    role: str | None = None

    def __post_init__(self):
        if self.company_id in (None, ""):
            raise InvalidInputError("TenantContext requires a company_id")

        if not isinstance(self.company_id, uuid.UUID):
            try:
                object.__setattr__(self, "company_id", uuid.UUID(str(self.company_id)))
            except (ValueError, TypeError, AttributeError) as exc:
                raise InvalidInputError(f"Invalid company_id: {self.company_id!r}") from exc

    @classmethod
    def for_company(cls, company, *, user=None, role: str | None = None) -> "TenantContext":
        return cls(
            company_id=company.id,
            user_id=getattr(user, "id", None),
            role=role,
        )

    @classmethod
    def from_membership(cls, membership) -> "TenantContext":
        return cls(
            company_id=membership.company_id,
            user_id=membership.user_id,
            role=membership.role,
        )


def get_tenant_company(tenant: TenantContext):
    """
    Resolve the active company of a tenant context.

    Raises:
        NotFoundError if the company does not exist or is inactive.
    """
    from companies.models import Company

    company = Company.objects.filter(id=tenant.company_id, is_active=True).first()
    if company is None:
        raise NotFoundError(f"Company {tenant.company_id} not found")
    return company
