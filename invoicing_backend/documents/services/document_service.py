# documents/services/document_service.py

"""
CORE DOCUMENT DOMAIN SERVICE

SINGLE SOURCE OF TRUTH for:
- Document creation (direct entry) and draft edits
- Line persistence
- Totals snapshot (always derived through documents.services.tax)
- Manual status changes (rules in document_lifecycle)

GUARANTEES:
- Header, lines and number allocation commit together or not at all
- Every lookup is scoped to tenant.company_id
- Stored totals can always be re-derived from the stored lines
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.services.exceptions import (
    ConcurrencyConflictError,
    InvalidInputError,
    NotFoundError,
)
from companies.context import get_tenant_company
from companies.services.numbering import next_document_number
from companies.services.third_parties import get_client, get_supplier
from documents.document_types import get_document_type_config
from documents.models import Document, DocumentLine
from documents.services.document_lifecycle import (
    PAYMENT_MANAGED_STATES,
    is_editable,
    validate_transition,
)
from documents.services.tax import DiscountConfig, LineInput, compute_snapshot

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

_UNSET = object()


def _quantize(value, places: str, field: str) -> Decimal:
    if value is None or value == "":
        return Decimal("0").quantize(Decimal(places))
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
        return d.quantize(Decimal(places), rounding=ROUND_HALF_UP)
    except ArithmeticError as exc:
        raise InvalidInputError(f"{field}: invalid number {value!r}") from exc


# ============================================================
# LINE HELPERS
# ============================================================


def normalize_line(raw: dict, position: int) -> dict:
    """
    Caller line dict -> clean values at storage precision.

    Accepted keys: description, product_reference, quantity, unit_price,
    vat_rate, fodec_applicable, fodec_rate.
    """
    if not isinstance(raw, dict):
        raise InvalidInputError(f"Line {position}: must be an object")
    if raw.get("quantity") in (None, "") or raw.get("unit_price") in (None, ""):
        raise InvalidInputError(f"Line {position}: quantity and unit_price are required")

    return {
        "position": position,
        "description": str(raw.get("description") or "")[:255],
        "product_reference": str(raw.get("product_reference") or "")[:64],
        "quantity": _quantize(raw.get("quantity"), "0.001", "quantity"),
        "unit_price": _quantize(raw.get("unit_price"), "0.001", "unit_price"),
        "vat_rate": _quantize(raw.get("vat_rate"), "0.01", "vat_rate"),
        "fodec_applicable": bool(raw.get("fodec_applicable", False)),
        "fodec_rate": _quantize(raw.get("fodec_rate"), "0.0001", "fodec_rate"),
    }


def to_line_input(line) -> LineInput:
    """Works for normalized dicts and DocumentLine rows alike."""
    get = line.get if isinstance(line, dict) else lambda key: getattr(line, key)
    return LineInput(
        quantity=get("quantity"),
        unit_price=get("unit_price"),
        vat_rate_percent=get("vat_rate"),
        fodec_applicable=get("fodec_applicable"),
        fodec_rate_decimal=get("fodec_rate"),
    )


def line_snapshot(line: DocumentLine) -> dict:
    return {
        "description": line.description,
        "product_reference": line.product_reference,
        "quantity": line.quantity,
        "unit_price": line.unit_price,
        "vat_rate": line.vat_rate,
        "fodec_applicable": line.fodec_applicable,
        "fodec_rate": line.fodec_rate,
    }


def _discount_from_document(document: Document) -> DiscountConfig | None:
    return DiscountConfig.from_value(document.discount_config)


def _apply_totals(document: Document, totals) -> None:
    document.subtotal = totals.subtotal
    document.total_fodec = totals.total_fodec
    document.base_tva = totals.base_tva
    document.tax_amount = totals.tax_amount
    document.discount_amount = totals.discount_amount
    document.stamp = totals.stamp
    document.total = totals.total
    document.remaining_amount = max(document.total - (document.total_paid or ZERO), ZERO)


def _write_lines(document: Document, normalized: list, outputs: list) -> list:
    rows = [
        DocumentLine(
            document=document,
            ht=out.ht,
            fodec_amount=out.fodec_amount,
            vat_amount=out.vat_amount,
            total=out.total_line_ttc,
            **values,
        )
        for values, out in zip(normalized, outputs)
    ]
    return DocumentLine.objects.bulk_create(rows)


def _snapshot_for(document: Document, normalized: list):
    return compute_snapshot(
        [to_line_input(v) for v in normalized],
        stamp_included=document.stamp_included,
        stamp_amount=document.stamp_amount,
        discount=_discount_from_document(document),
    )


def _set_discount(document: Document, discount) -> None:
    config = DiscountConfig.from_value(discount)
    if config is None:
        document.discount_type = ""
        document.discount_value = ZERO
    else:
        document.discount_type = config.type
        document.discount_value = _quantize(config.value, "0.01", "discount.value")


def _save(document: Document) -> None:
    try:
        document.save()
    except ValidationError as exc:
        raise InvalidInputError("; ".join(exc.messages)) from exc


def persist_new_document(*, company, document: Document, normalized: list) -> Document:
    """
    Allocate the number, save header and lines. Must run inside the caller's
    transaction so a failure rolls the number back too.
    """
    config = get_document_type_config(document.kind)
    outputs, totals = _snapshot_for(document, normalized)
    _apply_totals(document, totals)

    document.document_number = next_document_number(
        company_id=company.id,
        kind=document.kind,
        prefix=config.prefix,
        number_format=company.number_format,
        padding=company.number_padding,
        issue_date=document.issue_date,
    )

    _save(document)
    _write_lines(document, normalized, outputs)
    return document


# ============================================================
# READ
# ============================================================


def documents_for_tenant(*, tenant):
    return Document.objects.filter(company_id=tenant.company_id).select_related(
        "client", "supplier"
    )


def get_document(*, tenant, document_id, for_update: bool = False) -> Document:
    qs = Document.objects.filter(company_id=tenant.company_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=document_id)
    except (Document.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(f"Document {document_id} not found") from exc


# ============================================================
# WRITE
# ============================================================


def _resolve_party(*, tenant, config, client_id, supplier_id):
    if config.requires_client:
        if supplier_id:
            raise InvalidInputError(f"{config.label} cannot have a supplier")
        if not client_id:
            raise InvalidInputError(f"{config.label} requires a client")
        return get_client(tenant=tenant, client_id=client_id), None

    if config.requires_supplier:
        if client_id:
            raise InvalidInputError(f"{config.label} cannot have a client")
        if not supplier_id:
            raise InvalidInputError(f"{config.label} requires a supplier")
        return None, get_supplier(tenant=tenant, supplier_id=supplier_id)

    return None, None


def _normalize_lines(lines) -> list:
    if not lines:
        raise InvalidInputError("A document requires at least one line")
    return [normalize_line(raw, i) for i, raw in enumerate(lines)]


def _check_dates(config, issue_date, due_date) -> None:
    if config.requires_due_date and not due_date:
        raise InvalidInputError(f"{config.label} requires a due date")
    if due_date and issue_date and due_date < issue_date:
        raise InvalidInputError("Due date cannot precede the issue date")


def create_document(
    *,
    tenant,
    kind: str,
    lines,
    client_id=None,
    supplier_id=None,
    issue_date=None,
    due_date=None,
    currency: str | None = None,
    discount=None,
    stamp_included: bool = False,
    stamp_amount=None,
    status: str | None = None,
    template: str = "",
    notes: str = "",
    created_by=None,
) -> Document:
    config = get_document_type_config(kind)
    company = get_tenant_company(tenant)
    client, supplier = _resolve_party(
        tenant=tenant, config=config, client_id=client_id, supplier_id=supplier_id
    )

    issue_date = issue_date or timezone.localdate()
    _check_dates(config, issue_date, due_date)

    status = status or config.default_status
    if status not in config.status_options or status in PAYMENT_MANAGED_STATES:
        raise InvalidInputError(f"Status '{status}' is not allowed on creation of {config.kind}")

    normalized = _normalize_lines(lines)

    document = Document(
        company=company,
        kind=config.kind,
        status=status,
        client=client,
        supplier=supplier,
        issue_date=issue_date,
        due_date=due_date,
        currency=currency or company.default_currency,
        stamp_included=bool(stamp_included),
        stamp_amount=_quantize(
            company.stamp_amount if stamp_amount is None else stamp_amount,
            "0.01",
            "stamp_amount",
        ),
        template=template or "",
        notes=notes or "",
        created_by=created_by,
    )
    _set_discount(document, discount)

    try:
        with transaction.atomic():
            persist_new_document(company=company, document=document, normalized=normalized)
    except IntegrityError as exc:
        raise ConcurrencyConflictError(
            f"Document number collision for {config.kind}; retry"
        ) from exc

    logger.info(
        "Document created",
        extra={
            "company_id": str(tenant.company_id),
            "document_id": str(document.id),
            "kind": document.kind,
            "number": document.document_number,
            "total": str(document.total),
        },
    )
    return document


@transaction.atomic
def update_document(
    *,
    tenant,
    document_id,
    lines=None,
    client_id=_UNSET,
    supplier_id=_UNSET,
    issue_date=_UNSET,
    due_date=_UNSET,
    currency=_UNSET,
    discount=_UNSET,
    stamp_included=_UNSET,
    stamp_amount=_UNSET,
    template=_UNSET,
    notes=_UNSET,
) -> Document:
    """
    Edit a draft. Omitted arguments keep their stored value; lines, when
    given, replace the existing ones. Totals are always recomputed.
    """
    document = get_document(tenant=tenant, document_id=document_id, for_update=True)

    if not is_editable(document.status):
        raise InvalidInputError(
            f"Document {document.document_number} is '{document.status}' and cannot be edited"
        )

    config = get_document_type_config(document.kind)

    if client_id is not _UNSET or supplier_id is not _UNSET:
        client, supplier = _resolve_party(
            tenant=tenant,
            config=config,
            client_id=document.client_id if client_id is _UNSET else client_id,
            supplier_id=document.supplier_id if supplier_id is _UNSET else supplier_id,
        )
        document.client = client
        document.supplier = supplier

    if issue_date is not _UNSET:
        document.issue_date = issue_date or document.issue_date
    if due_date is not _UNSET:
        document.due_date = due_date
    _check_dates(config, document.issue_date, document.due_date)

    if currency is not _UNSET:
        document.currency = currency or document.currency
    if discount is not _UNSET:
        _set_discount(document, discount)
    if stamp_included is not _UNSET:
        document.stamp_included = bool(stamp_included)
    if stamp_amount is not _UNSET:
        document.stamp_amount = _quantize(stamp_amount, "0.01", "stamp_amount")
    if template is not _UNSET:
        document.template = template or ""
    if notes is not _UNSET:
        document.notes = notes or ""

    if lines is not None:
        normalized = _normalize_lines(lines)
        document.lines.all().delete()
        outputs, totals = _snapshot_for(document, normalized)
        _write_lines(document, normalized, outputs)
        _apply_totals(document, totals)
        _save(document)
    else:
        _save(document)
        recompute_document_totals(document)

    logger.info(
        "Document updated",
        extra={
            "company_id": str(tenant.company_id),
            "document_id": str(document.id),
            "total": str(document.total),
        },
    )
    return document


@transaction.atomic
def change_document_status(*, tenant, document_id, status: str) -> Document:
    document = get_document(tenant=tenant, document_id=document_id, for_update=True)
    previous = document.status

    document.status = validate_transition(document=document, target_status=status)
    _save(document)

    logger.info(
        "Document status changed",
        extra={
            "company_id": str(tenant.company_id),
            "document_id": str(document.id),
            "from": previous,
            "to": document.status,
        },
    )
    return document


# ============================================================
# SNAPSHOT
# ============================================================


def derive_totals(document: Document):
    """
    Recompute (outputs, totals) from the stored lines without writing.
    """
    lines = list(document.lines.order_by("position", "id"))
    return lines, compute_snapshot(
        [to_line_input(ln) for ln in lines],
        stamp_included=document.stamp_included,
        stamp_amount=document.stamp_amount,
        discount=_discount_from_document(document),
    )


def recompute_document_totals(document: Document) -> Document:
    lines, (outputs, totals) = derive_totals(document)

    changed = []
    for line, out in zip(lines, outputs):
        if (line.ht, line.fodec_amount, line.vat_amount, line.total) != (
            out.ht,
            out.fodec_amount,
            out.vat_amount,
            out.total_line_ttc,
        ):
            line.ht = out.ht
            line.fodec_amount = out.fodec_amount
            line.vat_amount = out.vat_amount
            line.total = out.total_line_ttc
            changed.append(line)

    if changed:
        DocumentLine.objects.bulk_update(changed, ["ht", "fodec_amount", "vat_amount", "total"])

    _apply_totals(document, totals)
    Document.objects.filter(pk=document.pk).update(
        subtotal=document.subtotal,
        total_fodec=document.total_fodec,
        base_tva=document.base_tva,
        tax_amount=document.tax_amount,
        discount_amount=document.discount_amount,
        stamp=document.stamp,
        total=document.total,
        remaining_amount=document.remaining_amount,
        updated_at=timezone.now(),
    )
    return document
