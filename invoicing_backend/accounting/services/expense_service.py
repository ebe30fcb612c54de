# PATH: accounting/services/expense_service.py

"""
EXPENSE & ACCOUNT LOAD POSTING SERVICE

Responsibilities:
- Validate the payload
- Resolve accounts inside the tenant's company
- Create the business record (Expense / AccountLoad)
- Post its balanced JournalEntry in the same transaction

Accounting effect:
- Expense:      Dr expense account  / Cr payment (treasury) account
- Account load: Dr loaded account   / Cr source account (default: Ajustements)
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.expense import AccountLoad, Expense
from accounting.services.account_resolver import ensure_adjustment_account, get_account
from accounting.services.exceptions import InvalidInputError
from accounting.services.journal_entry_service import create_entry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    try:
        return Decimal(str(v if v not in (None, "") else "0.00")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid amount: {v!r}") from exc


def _positive_amount(v) -> Decimal:
    amt = _money(v)
    if amt <= Decimal("0.00"):
        raise InvalidInputError("Amount must be > 0")
    return amt


def _normalize_date(d) -> date_type:
    if d is None:
        return timezone.localdate()
    if isinstance(d, date_type):
        return d
    raise InvalidInputError("date must be a date")


@transaction.atomic
def record_expense(
    *,
    tenant,
    amount,
    expense_account_id,
    payment_account_id,
    expense_date=None,
    vendor: str = "",
    narration: str = "",
    attachment_reference: str = "",
    created_by=None,
) -> Expense:
    amt = _positive_amount(amount)
    expense_date = _normalize_date(expense_date)

    expense_account = get_account(tenant=tenant, account_id=expense_account_id)
    payment_account = get_account(tenant=tenant, account_id=payment_account_id)

    if expense_account.account_type != Account.CHARGE:
        raise InvalidInputError(f"Account {expense_account.code} is not a charge account")

    expense = Expense(
        company_id=tenant.company_id,
        expense_date=expense_date,
        amount=amt,
        expense_account=expense_account,
        payment_account=payment_account,
        vendor=(vendor or "").strip(),
        narration=(narration or "").strip(),
        attachment_reference=(attachment_reference or "").strip(),
    )
    try:
        expense.full_clean()
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc
    expense.save()

    expense.journal_entry = create_entry(
        tenant=tenant,
        entry_date=expense_date,
        reference=f"EXP-{expense.id}",
        description=expense.narration or expense.vendor or "Dépense",
        lines=[
            {"account_id": expense_account.pk, "debit": amt, "credit": 0},
            {"account_id": payment_account.pk, "debit": 0, "credit": amt},
        ],
        created_by=created_by,
    )
    expense.save(update_fields=["journal_entry"])

    logger.info(
        "Expense recorded",
        extra={
            "company_id": str(tenant.company_id),
            "expense_id": expense.id,
            "amount": str(amt),
            "entry_id": expense.journal_entry_id,
        },
    )
    return expense


@transaction.atomic
def record_account_load(
    *,
    tenant,
    amount,
    account_id,
    source_account_id=None,
    load_date=None,
    description: str = "",
    attachment_reference: str = "",
    created_by=None,
) -> AccountLoad:
    amt = _positive_amount(amount)
    load_date = _normalize_date(load_date)

    account = get_account(tenant=tenant, account_id=account_id)
    if source_account_id in (None, ""):
        source = ensure_adjustment_account(tenant=tenant)
    else:
        source = get_account(tenant=tenant, account_id=source_account_id)

    if source.pk == account.pk:
        raise InvalidInputError("Source account must differ from the loaded account")

    load = AccountLoad.objects.create(
        company_id=tenant.company_id,
        load_date=load_date,
        amount=amt,
        account=account,
        source_account=source,
        description=(description or "").strip(),
        attachment_reference=(attachment_reference or "").strip(),
    )

    load.journal_entry = create_entry(
        tenant=tenant,
        entry_date=load_date,
        reference=f"LOAD-{load.id}",
        description=load.description or f"Chargement {account.code}",
        lines=[
            {"account_id": account.pk, "debit": amt, "credit": 0},
            {"account_id": source.pk, "debit": 0, "credit": amt},
        ],
        created_by=created_by,
    )
    load.save(update_fields=["journal_entry"])

    logger.info(
        "Account load recorded",
        extra={
            "company_id": str(tenant.company_id),
            "load_id": load.id,
            "amount": str(amt),
            "entry_id": load.journal_entry_id,
        },
    )
    return load
