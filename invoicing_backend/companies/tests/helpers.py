# companies/tests/helpers.py

from __future__ import annotations

import uuid

from django.contrib.auth import get_user_model

from companies.context import TenantContext
from companies.models import Client, Company, CompanyMembership, Supplier

User = get_user_model()


def make_company(name: str = "Atlas SARL", **kwargs) -> Company:
    return Company.objects.create(name=name, **kwargs)


def make_tenant(company: Company | None = None) -> TenantContext:
    company = company or make_company()
    return TenantContext.for_company(company)


def make_user(username: str | None = None, *, company: Company | None = None, role: str = "owner"):
    user = User.objects.create_user(
        username=username or f"user-{uuid.uuid4().hex[:8]}",
        password="pass",
    )
    if company is not None:
        CompanyMembership.objects.create(user=user, company=company, role=role)
    return user


def make_client(company: Company, name: str = "Client Test") -> Client:
    return Client.objects.create(company=company, name=name)


def make_supplier(company: Company, name: str = "Fournisseur Test") -> Supplier:
    return Supplier.objects.create(company=company, name=name)
