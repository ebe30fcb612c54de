# PATH: accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account of this company should be used for this purpose?"

Every lookup is scoped to tenant.company_id; an account id that belongs to
another company is reported exactly like a missing one (NotFoundError).

System accounts are created on demand, once per company:
- ADJUSTMENT  -> settings.ACCOUNTING_ADJUSTMENT_ACCOUNT_CODE "Ajustements" (passif)
- RECEIVABLE  -> 411 "Clients" (actif)
- PAYABLE     -> 401 "Fournisseurs" (passif)
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from accounting.models.account import Account
from accounting.services.exceptions import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

ADJUSTMENT = "ADJUSTMENT"
RECEIVABLE = "RECEIVABLE"
PAYABLE = "PAYABLE"


def _system_accounts() -> dict:
    return {
        ADJUSTMENT: (settings.ACCOUNTING_ADJUSTMENT_ACCOUNT_CODE, "Ajustements", Account.PASSIF),
        RECEIVABLE: ("411", "Clients", Account.ACTIF),
        PAYABLE: ("401", "Fournisseurs", Account.PASSIF),
    }


def get_account(*, tenant, account_id, active_only: bool = True) -> Account:
    if account_id in (None, ""):
        raise InvalidInputError("account_id is required")

    qs = Account.objects.filter(company_id=tenant.company_id)
    try:
        account = qs.get(pk=account_id)
    except (Account.DoesNotExist, ValidationError, ValueError, TypeError) as exc:
        raise NotFoundError(f"Account {account_id} not found") from exc

    if active_only and not account.is_active:
        raise InvalidInputError(f"Account {account.code} is inactive")

    return account


def get_accounts_by_id(*, tenant, account_ids) -> dict:
    """
    Bulk, tenant-scoped resolution. Every requested id must resolve.
    """
    wanted = {str(a) for a in account_ids if a not in (None, "")}
    if not wanted:
        return {}

    try:
        found = {
            str(a.pk): a
            for a in Account.objects.filter(company_id=tenant.company_id, pk__in=list(wanted))
        }
    except (ValidationError, ValueError, TypeError) as exc:
        raise NotFoundError(f"Invalid account id in {sorted(wanted)}") from exc

    missing = sorted(wanted - set(found))
    if missing:
        raise NotFoundError(f"Account(s) not found for this company: {', '.join(missing)}")

    return found


def ensure_system_account(*, tenant, key: str) -> Account:
    definition = _system_accounts().get(key)
    if definition is None:
        raise InvalidInputError(f"Unknown system account key: {key}")

    code, name, account_type = definition
    existing = Account.objects.filter(company_id=tenant.company_id, code=code).first()
    if existing is not None:
        return existing

    try:
        with transaction.atomic():
            account = Account.objects.create(
                company_id=tenant.company_id,
                code=code,
                name=name,
                account_type=account_type,
                is_system=True,
            )
    except IntegrityError:
        # Lost a creation race; the winner's row is now visible.
        return Account.objects.get(company_id=tenant.company_id, code=code)

    logger.info(
        "System account created",
        extra={"company_id": str(tenant.company_id), "code": code, "key": key},
    )
    return account


def ensure_adjustment_account(*, tenant) -> Account:
    return ensure_system_account(tenant=tenant, key=ADJUSTMENT)


def create_account(*, tenant, code: str, name: str, account_type: str) -> Account:
    account = Account(
        company_id=tenant.company_id,
        code=code,
        name=name,
        account_type=account_type,
    )
    try:
        account.save()
    except ValidationError as exc:
        raise InvalidInputError("; ".join(exc.messages)) from exc

    logger.info(
        "Account created",
        extra={"company_id": str(tenant.company_id), "code": account.code},
    )
    return account
