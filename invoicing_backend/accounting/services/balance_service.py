# accounting/services/balance_service.py

"""
BALANCE SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- JournalLine is the single source of truth; no balance is stored anywhere
- balance(account) = sum(debit) - sum(credit), whatever the account type
- Optional date range filters on JournalEntry.entry_date, bounds inclusive
- Tenant-scoped: never mix companies
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.journal_line import JournalLine
from accounting.services.account_resolver import get_account
from accounting.services.exceptions import InvalidInputError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _zero():
    return Value(ZERO, output_field=DecimalField(max_digits=14, decimal_places=2))


def _lines_qs(*, tenant, start: date | None, end: date | None):
    if start is not None and end is not None and start > end:
        raise InvalidInputError("start date must be on or before end date")

    qs = JournalLine.objects.filter(entry__company_id=tenant.company_id)
    if start is not None:
        qs = qs.filter(entry__entry_date__gte=start)
    if end is not None:
        qs = qs.filter(entry__entry_date__lte=end)
    return qs


def get_account_balance(
    *,
    tenant,
    account_id,
    start: date | None = None,
    end: date | None = None,
) -> Decimal:
    account = get_account(tenant=tenant, account_id=account_id, active_only=False)

    aggregates = _lines_qs(tenant=tenant, start=start, end=end).filter(
        account=account
    ).aggregate(
        debit_total=Coalesce(Sum("debit"), _zero()),
        credit_total=Coalesce(Sum("credit"), _zero()),
    )

    return _q2(_q2(aggregates["debit_total"]) - _q2(aggregates["credit_total"]))


def get_account_balances(
    *,
    tenant,
    start: date | None = None,
    end: date | None = None,
    include_inactive: bool = False,
) -> list[dict]:
    """
    Bulk balances for every account of the company (no N+1).
    """
    accounts_qs = Account.objects.filter(company_id=tenant.company_id)
    if not include_inactive:
        accounts_qs = accounts_qs.filter(is_active=True)

    accounts = list(accounts_qs.order_by("code"))
    if not accounts:
        return []

    rows = (
        _lines_qs(tenant=tenant, start=start, end=end)
        .filter(account_id__in=[a.id for a in accounts])
        .values("account_id")
        .annotate(
            debit_total=Coalesce(Sum("debit"), _zero()),
            credit_total=Coalesce(Sum("credit"), _zero()),
        )
    )
    totals = {r["account_id"]: (_q2(r["debit_total"]), _q2(r["credit_total"])) for r in rows}

    results = []
    for acc in accounts:
        debit, credit = totals.get(acc.id, (ZERO, ZERO))
        results.append(
            {
                "account_id": acc.id,
                "code": acc.code,
                "name": acc.name,
                "account_type": acc.account_type,
                "is_active": acc.is_active,
                "debit_total": debit,
                "credit_total": credit,
                "balance": _q2(debit - credit),
            }
        )

    return results
