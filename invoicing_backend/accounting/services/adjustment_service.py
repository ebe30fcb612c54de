# accounting/services/adjustment_service.py

"""
BALANCE ADJUSTMENT PROTOCOL

The only sanctioned way to "set" an account balance: the difference between
the desired and the current derived balance is posted as one balanced
two-line journal entry against a counterpart account (the company's
"Ajustements" suspense account unless another one is given).

    delta = round(desired - current, 2)
    |delta| < 0.01  -> no-op, nothing written
    delta > 0       -> Dr target / Cr counterpart
    delta < 0       -> Cr target / Dr counterpart
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.services.account_resolver import ensure_adjustment_account, get_account
from accounting.services.balance_service import get_account_balance
from accounting.services.exceptions import InvalidInputError
from accounting.services.journal_entry_service import create_entry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class AdjustmentResult:
    account_id: int
    previous_balance: Decimal
    desired_balance: Decimal
    delta: Decimal
    entry: JournalEntry | None

    @property
    def is_noop(self) -> bool:
        return self.entry is None


def _money(value) -> Decimal:
    try:
        amt = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid desired balance: {value!r}") from exc
    if not amt.is_finite():
        raise InvalidInputError(f"Invalid desired balance: {value!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@transaction.atomic
def adjust_account_balance(
    *,
    tenant,
    account_id,
    desired_balance,
    counterpart_account_id=None,
    entry_date: date | None = None,
    description: str = "",
    created_by=None,
) -> AdjustmentResult:
    if desired_balance is None or desired_balance == "":
        raise InvalidInputError("desired_balance is required")

    desired = _money(desired_balance)
    account = get_account(tenant=tenant, account_id=account_id)

    if counterpart_account_id in (None, ""):
        counterpart = ensure_adjustment_account(tenant=tenant)
    else:
        counterpart = get_account(tenant=tenant, account_id=counterpart_account_id)

    if counterpart.pk == account.pk:
        raise InvalidInputError("Counterpart account must differ from the adjusted account")

    current = get_account_balance(tenant=tenant, account_id=account.pk)
    delta = (desired - current).quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    if abs(delta) < TWOPLACES:
        return AdjustmentResult(
            account_id=account.pk,
            previous_balance=current,
            desired_balance=desired,
            delta=Decimal("0.00"),
            entry=None,
        )

    amount = abs(delta)
    if delta > 0:
        lines = [
            {"account_id": account.pk, "debit": amount, "credit": 0},
            {"account_id": counterpart.pk, "debit": 0, "credit": amount},
        ]
    else:
        lines = [
            {"account_id": account.pk, "debit": 0, "credit": amount},
            {"account_id": counterpart.pk, "debit": amount, "credit": 0},
        ]

    entry_date = entry_date or timezone.localdate()
    entry = create_entry(
        tenant=tenant,
        lines=lines,
        entry_date=entry_date,
        reference=f"ADJ-{account.code}",
        description=(description or "").strip()
        or f"Ajustement solde {account.code} - {account.name}",
        created_by=created_by,
    )

    logger.info(
        "Account balance adjusted",
        extra={
            "company_id": str(tenant.company_id),
            "account_id": account.pk,
            "counterpart_id": counterpart.pk,
            "previous": str(current),
            "desired": str(desired),
            "delta": str(delta),
            "entry_id": entry.id,
        },
    )

    return AdjustmentResult(
        account_id=account.pk,
        previous_balance=current,
        desired_balance=desired,
        delta=delta,
        entry=entry,
    )
