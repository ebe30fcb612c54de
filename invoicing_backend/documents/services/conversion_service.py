# documents/services/conversion_service.py

"""
DOCUMENT CONVERSION ENGINE

convert_document(source -> target_kind) spawns a NEW document; the source is
never mutated.

RULES:
- target_kind must be in the source kind's can_convert_to, otherwise
  ConversionNotAllowedError
- New number from the target kind's sequence, issue_date = today,
  status = target default; due_date / currency / template / notes copied
- Credit-note targets: every line gets quantity = |q| and unit_price = -|p|,
  so every line amount and every total is <= 0; no discount, no stamp;
  source_document is set (audit link)
- Forward targets: lines copied as-is and totals recomputed with the
  source's discount and stamp settings (stored totals are never copied)
- reference always carries the source's human-readable number

Everything after number allocation runs in one transaction: no orphaned
header, no burned number.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.services.exceptions import (
    ConcurrencyConflictError,
    ConversionNotAllowedError,
)
from companies.context import get_tenant_company
from documents.document_types import (
    can_convert,
    get_document_type_config,
    is_credit_note_kind,
    map_legacy_kind,
)
from documents.models import Document
from documents.services.document_service import (
    get_document,
    line_snapshot,
    normalize_line,
    persist_new_document,
)

logger = logging.getLogger(__name__)


def _negated_lines(lines) -> list:
    out = []
    for ln in lines:
        values = line_snapshot(ln)
        values["quantity"] = abs(values["quantity"])
        values["unit_price"] = -abs(values["unit_price"])
        out.append(values)
    return out


def convert_document(*, tenant, source_document_id, target_kind: str, created_by=None) -> Document:
    source = get_document(tenant=tenant, document_id=source_document_id)
    target_kind = map_legacy_kind(target_kind)

    # Unknown target kinds fail with InvalidInputError here.
    target_config = get_document_type_config(target_kind)

    if not can_convert(source.kind, target_kind):
        raise ConversionNotAllowedError(
            f"{source.kind} cannot be converted to {target_kind}"
        )

    company = get_tenant_company(tenant)
    source_lines = list(source.lines.order_by("position", "id"))
    credit_note = is_credit_note_kind(target_kind)

    if credit_note:
        raw_lines = _negated_lines(source_lines)
    else:
        raw_lines = [line_snapshot(ln) for ln in source_lines]

    normalized = [normalize_line(raw, i) for i, raw in enumerate(raw_lines)]

    document = Document(
        company=company,
        kind=target_config.kind,
        status=target_config.default_status,
        client_id=source.client_id,
        supplier_id=source.supplier_id,
        issue_date=timezone.localdate(),
        due_date=source.due_date,
        currency=source.currency,
        template=source.template,
        notes=source.notes,
        reference=source.document_number,
        created_by=created_by,
    )

    if credit_note:
        document.source_document = source
        document.discount_type = ""
        document.stamp_included = False
        document.stamp_amount = source.stamp_amount
    else:
        document.discount_type = source.discount_type
        document.discount_value = source.discount_value
        document.stamp_included = source.stamp_included
        document.stamp_amount = source.stamp_amount

    try:
        with transaction.atomic():
            persist_new_document(company=company, document=document, normalized=normalized)
    except IntegrityError as exc:
        raise ConcurrencyConflictError(
            f"Document number collision for {target_kind}; retry"
        ) from exc

    logger.info(
        "Document converted",
        extra={
            "company_id": str(tenant.company_id),
            "source_id": str(source.id),
            "source_number": source.document_number,
            "target_id": str(document.id),
            "target_kind": document.kind,
            "target_number": document.document_number,
            "total": str(document.total),
        },
    )
    return document
