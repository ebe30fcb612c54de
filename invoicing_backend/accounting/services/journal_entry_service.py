# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create / update / delete JournalEntry and JournalLine rows
- Enforce debit == credit
- Guarantee atomicity

Everything else (payments, expenses, balance adjustments) must pass through here.

Validation happens before anything is written:
- at least two lines
- no negative amounts, no empty line
- every account resolves inside the tenant's company
- sum(debit) == sum(credit), compared as 2dp Decimals (no float tolerance)
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Count, DecimalField, ProtectedError, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.account_resolver import get_accounts_by_id
from accounting.services.exceptions import (
    InvalidInputError,
    NotFoundError,
    UnbalancedEntryError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINES = 2


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidInputError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise InvalidInputError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_lines(*, tenant, lines) -> list[dict]:
    if not lines or len(lines) < MIN_LINES:
        raise InvalidInputError("A journal entry needs at least two lines")

    normalized: list[dict] = []
    for line in lines:
        if not isinstance(line, dict):
            raise InvalidInputError("Each journal line must be an object/dict")

        account_id = line.get("account_id")
        if account_id in (None, ""):
            raise InvalidInputError("Journal line missing account_id")

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise InvalidInputError("Debit or credit cannot be negative")
        if debit == 0 and credit == 0:
            raise InvalidInputError("A journal line must carry a debit or a credit")

        normalized.append({"account_id": account_id, "debit": debit, "credit": credit})

    total_debit = sum((n["debit"] for n in normalized), Decimal("0.00"))
    total_credit = sum((n["credit"] for n in normalized), Decimal("0.00"))
    if total_debit != total_credit:
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={total_debit} credits={total_credit}"
        )

    accounts = get_accounts_by_id(
        tenant=tenant,
        account_ids=[n["account_id"] for n in normalized],
    )
    for n in normalized:
        account = accounts[str(n["account_id"])]
        if not account.is_active:
            raise InvalidInputError(f"Account {account.code} is inactive")
        n["account"] = account

    return normalized


def _write_lines(entry: JournalEntry, normalized: list[dict]) -> None:
    JournalLine.objects.bulk_create(
        [
            JournalLine(
                entry=entry,
                account=n["account"],
                debit=n["debit"],
                credit=n["credit"],
                position=index,
            )
            for index, n in enumerate(normalized)
        ]
    )


def _get_entry(*, tenant, entry_id, for_update: bool = False) -> JournalEntry:
    qs = JournalEntry.objects.filter(company_id=tenant.company_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Journal entry {entry_id} not found") from exc


def get_entry(*, tenant, entry_id) -> JournalEntry:
    return _get_entry(tenant=tenant, entry_id=entry_id)


@transaction.atomic
def create_entry(
    *,
    tenant,
    lines: list,
    entry_date: date | None = None,
    reference: str = "",
    description: str = "",
    created_by=None,
) -> JournalEntry:
    normalized = _normalize_lines(tenant=tenant, lines=lines)

    reference = (reference or "").strip()
    description = (description or "").strip() or reference
    if not description:
        raise InvalidInputError("Journal entry description or reference is required")

    entry = JournalEntry.objects.create(
        company_id=tenant.company_id,
        entry_date=entry_date or timezone.localdate(),
        reference=reference,
        description=description,
        created_by=created_by,
    )
    _write_lines(entry, normalized)

    logger.info(
        "Journal entry created",
        extra={
            "company_id": str(tenant.company_id),
            "entry_id": entry.id,
            "reference": reference,
            "lines": len(normalized),
        },
    )
    return entry


@transaction.atomic
def update_entry(
    *,
    tenant,
    entry_id,
    lines: list,
    entry_date: date | None = None,
    reference: str | None = None,
    description: str | None = None,
) -> JournalEntry:
    """
    Replace the lines (and optionally the header fields) of an entry.
    The same balance rules as create_entry apply before anything is written.
    """
    entry = _get_entry(tenant=tenant, entry_id=entry_id, for_update=True)
    normalized = _normalize_lines(tenant=tenant, lines=lines)

    if entry_date is not None:
        entry.entry_date = entry_date
    if reference is not None:
        entry.reference = reference.strip()
    if description is not None:
        entry.description = description.strip()

    entry.save()

    entry.lines.all().delete()
    _write_lines(entry, normalized)

    logger.info(
        "Journal entry updated",
        extra={"company_id": str(tenant.company_id), "entry_id": entry.id},
    )
    return entry


@transaction.atomic
def delete_entry(*, tenant, entry_id) -> None:
    entry = _get_entry(tenant=tenant, entry_id=entry_id, for_update=True)
    try:
        entry.delete()
    except ProtectedError as exc:
        raise InvalidInputError(
            "Journal entry is linked to a payment or expense; delete that record instead"
        ) from exc

    logger.info(
        "Journal entry deleted",
        extra={"company_id": str(tenant.company_id), "entry_id": entry_id},
    )


def find_unbalanced_entries(*, company_id=None) -> list[dict]:
    """
    Database-level scan: every entry whose lines do not balance, or that has
    fewer than two lines.
    """
    zero = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))

    qs = JournalEntry.objects.all()
    if company_id is not None:
        qs = qs.filter(company_id=company_id)

    rows = qs.annotate(
        total_debit=Coalesce(Sum("lines__debit"), zero),
        total_credit=Coalesce(Sum("lines__credit"), zero),
        line_count=Count("lines"),
    ).values("id", "company_id", "reference", "total_debit", "total_credit", "line_count")

    problems = []
    for row in rows:
        debit = _money(row["total_debit"])
        credit = _money(row["total_credit"])
        n_lines = int(row["line_count"] or 0)

        if debit != credit or n_lines < MIN_LINES:
            problems.append(
                {
                    "entry_id": row["id"],
                    "company_id": row["company_id"],
                    "reference": row["reference"],
                    "total_debit": debit,
                    "total_credit": credit,
                    "line_count": n_lines,
                }
            )

    return problems
