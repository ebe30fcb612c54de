# companies/api/tenant.py

"""
Builds the TenantContext of an API request from the user's memberships.

- One membership: used implicitly
- Several memberships: the X-Company-ID header selects one
- A header naming a company the user is not a member of is refused
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import PermissionDenied, ValidationError

from companies.context import TenantContext
from companies.models import CompanyMembership

COMPANY_HEADER = "X-Company-ID"


def tenant_from_request(request) -> TenantContext:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        raise PermissionDenied("Authentication required.")

    memberships = CompanyMembership.objects.filter(
        user=user,
        company__is_active=True,
    ).order_by("created_at")

    requested = (request.headers.get(COMPANY_HEADER) or "").strip()
    if requested:
        try:
            membership = memberships.filter(company_id=requested).first()
        except (DjangoValidationError, ValueError):
            membership = None
        if membership is None:
            raise PermissionDenied("You are not a member of this company.")
        return TenantContext.from_membership(membership)

    found = list(memberships[:2])
    if not found:
        raise PermissionDenied("You are not a member of any company.")
    if len(found) > 1:
        raise ValidationError({"detail": f"{COMPANY_HEADER} header is required."})

    return TenantContext.from_membership(found[0])
