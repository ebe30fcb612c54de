# companies/services/numbering.py

"""
DOCUMENT NUMBERING SERVICE

nextDocumentNumber(company_id, kind, prefix, format, padding, issue_date)

Guarantees:
- Monotonic and gapless per (company, kind, calendar year) when the format
  carries {year}; per (company, kind) otherwise, so numbers never repeat
- Serialized by a row lock on DocumentSequence (SELECT ... FOR UPDATE)
- Runs inside the caller's transaction: if the caller rolls back, the
  increment rolls back with it, so no number is burned

The (company, kind, document_number) unique constraint on Document remains
the final guard; a collision there surfaces as ConcurrencyConflictError.
"""

from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import InvalidInputError
from companies.models import DocumentSequence

logger = logging.getLogger(__name__)

CONTINUOUS_PERIOD = 0


def format_document_number(
    *,
    number_format: str,
    prefix: str,
    number: int,
    padding: int,
    issue_date: date,
) -> str:
    fmt = (number_format or "").strip() or settings.INVOICING_NUMBER_FORMAT
    if "{number}" not in fmt:
        raise InvalidInputError("Number format must contain the {number} placeholder")

    if padding is None or int(padding) < 1:
        raise InvalidInputError("Number padding must be >= 1")

    return (
        fmt.replace("{prefix}", prefix or "")
        .replace("{year}", f"{issue_date.year:04d}")
        .replace("{month}", f"{issue_date.month:02d}")
        .replace("{number}", str(int(number)).zfill(int(padding)))
    )


def sequence_period(number_format: str, issue_date: date) -> int:
    """
    Yearly counters only when the number carries the year; otherwise one
    counter for the whole life of (company, kind), stored as period 0.
    """
    if "{year}" in number_format:
        return issue_date.year
    return CONTINUOUS_PERIOD


@transaction.atomic
def next_document_number(
    *,
    company_id,
    kind: str,
    prefix: str,
    number_format: str | None = None,
    padding: int | None = None,
    issue_date: date | None = None,
) -> str:
    issue_date = issue_date or timezone.localdate()
    padding = int(padding or settings.INVOICING_NUMBER_PADDING)
    number_format = (number_format or "").strip() or settings.INVOICING_NUMBER_FORMAT

    sequence, _created = DocumentSequence.objects.select_for_update().get_or_create(
        company_id=company_id,
        kind=str(kind),
        period_year=sequence_period(number_format, issue_date),
    )

    value = sequence.next_value
    number = format_document_number(
        number_format=number_format,
        prefix=prefix,
        number=value,
        padding=padding,
        issue_date=issue_date,
    )

    sequence.next_value = value + 1
    sequence.save(update_fields=["next_value", "updated_at"])

    logger.debug(
        "Allocated document number",
        extra={"company_id": str(company_id), "kind": kind, "number": number},
    )
    return number
