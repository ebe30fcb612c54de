# payments/services/payment_service.py

"""
PAYMENT RECONCILIATION SERVICE

record_payment:
- Inserts the Payment row
- Posts its journal entry (the account-balance mutation)
    vente: Dr treasury account / Cr 411 Clients
    achat: Dr 401 Fournisseurs / Cr treasury account
- Recomputes the linked invoice's total_paid / remaining_amount / status

Two paths, selected by settings.PAYMENTS_ATOMIC_RECONCILIATION:

ATOMIC (default)
    One transaction; the invoice row is locked (SELECT ... FOR UPDATE)
    before the insert, so concurrent payments serialize on it and the
    recompute always sees every committed payment.

FALLBACK (best effort)
    Insert + posting commit first, then refresh_payment_status runs on its
    own. Two concurrent payments can both read a stale total; a refresh
    failure does not fail the payment, it is logged and returned as a
    NonBlockingWarning. Do not rely on it for correctness under
    concurrency.

Status rule (cancelled invoices are never touched):
    total_paid >= total          -> paid
    0 < total_paid < total       -> overdue if past due, else partial
    total_paid == 0              -> overdue if past due, else validated
                                    (statuses not set by payments are kept)
    remaining_amount = max(total - total_paid, 0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.services.account_resolver import (
    PAYABLE,
    RECEIVABLE,
    ensure_system_account,
    get_account,
)
from accounting.services.exceptions import (
    CoreServiceError,
    InvalidInputError,
    NonBlockingWarning,
    NotFoundError,
    PaymentStatusRefreshError,
)
from accounting.services.journal_entry_service import create_entry, delete_entry, update_entry
from documents.document_types import (
    INVOICE_KINDS,
    DocumentModule,
    DocumentStatus,
    get_document_type_config,
)
from documents.models import Document
from documents.services.document_lifecycle import PAYMENT_MANAGED_STATES, TERMINAL_STATES
from payments.models import Payment

logger = logging.getLogger("payments")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

REFRESH_FAILED = "payment_status_refresh_failed"

_UNSET = object()


def _money(v) -> Decimal:
    try:
        return Decimal(str(v if v not in (None, "") else "0.00")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid amount: {v!r}") from exc


def _positive_amount(v) -> Decimal:
    amt = _money(v)
    if amt <= ZERO:
        raise InvalidInputError("Amount must be > 0")
    return amt


def _normalize_date(d) -> date_type:
    if d is None:
        return timezone.localdate()
    if isinstance(d, date_type):
        return d
    raise InvalidInputError("payment_date must be a date")


@dataclass
class PaymentResult:
    payment: Payment | None
    invoice: Document | None = None
    warnings: list[NonBlockingWarning] = field(default_factory=list)


# ============================================================
# STATUS RULE (PURE)
# ============================================================


def derive_payment_state(
    *,
    status: str,
    total: Decimal,
    total_paid: Decimal,
    due_date: date_type | None,
    today: date_type,
) -> tuple[str, Decimal]:
    """
    -> (status, remaining_amount) for an invoice given what has been paid.
    """
    remaining = max(total - total_paid, ZERO)

    if status in TERMINAL_STATES:
        return status, remaining

    past_due = bool(due_date and due_date < today)

    if total_paid > ZERO and total_paid >= total:
        return DocumentStatus.PAID, remaining
    if total_paid > ZERO:
        return (DocumentStatus.OVERDUE if past_due else DocumentStatus.PARTIAL), remaining

    if status in PAYMENT_MANAGED_STATES:
        if past_due:
            return DocumentStatus.OVERDUE, remaining
        return DocumentStatus.VALIDATED, remaining

    return status, remaining


def _sum_payments(invoice_id) -> Decimal:
    zero = Value(ZERO, output_field=DecimalField(max_digits=14, decimal_places=2))
    total = Payment.objects.filter(invoice_id=invoice_id).aggregate(
        s=Coalesce(Sum("amount"), zero)
    )["s"]
    return _money(total)


def _reconcile_invoice(invoice: Document) -> Document:
    """
    Recompute paid / remaining / status from the full payment history.
    Caller holds the row lock on the atomic path.
    """
    total_paid = _sum_payments(invoice.pk)
    new_status, remaining = derive_payment_state(
        status=invoice.status,
        total=invoice.total,
        total_paid=total_paid,
        due_date=invoice.due_date,
        today=timezone.localdate(),
    )

    previous = invoice.status
    Document.objects.filter(pk=invoice.pk).update(
        total_paid=total_paid,
        remaining_amount=remaining,
        status=new_status,
        updated_at=timezone.now(),
    )
    invoice.total_paid = total_paid
    invoice.remaining_amount = remaining
    invoice.status = new_status

    if new_status != previous:
        logger.info(
            "Invoice payment status changed",
            extra={
                "invoice_id": str(invoice.pk),
                "from": previous,
                "to": new_status,
                "total_paid": str(total_paid),
            },
        )
    return invoice


# ============================================================
# LOOKUPS
# ============================================================


def payments_for_tenant(*, tenant):
    return Payment.objects.filter(company_id=tenant.company_id).select_related(
        "account", "invoice"
    )


def get_payment(*, tenant, payment_id, for_update: bool = False) -> Payment:
    qs = Payment.objects.filter(company_id=tenant.company_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=payment_id)
    except (Payment.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(f"Payment {payment_id} not found") from exc


def _get_invoice(*, tenant, invoice_id, for_update: bool) -> Document:
    qs = Document.objects.filter(company_id=tenant.company_id)
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=invoice_id)
    except (Document.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFoundError(f"Invoice {invoice_id} not found") from exc


def _check_payable(invoice: Document) -> None:
    if not get_document_type_config(invoice.kind).can_have_payments:
        raise InvalidInputError(f"{invoice.kind} {invoice.document_number} cannot receive payments")
    if invoice.status in TERMINAL_STATES:
        raise InvalidInputError(f"Invoice {invoice.document_number} is cancelled")


def _payment_type_for(invoice: Document | None, payment_type: str | None) -> str:
    valid = {Payment.TYPE_VENTE, Payment.TYPE_ACHAT}

    if invoice is None:
        payment_type = payment_type or Payment.TYPE_VENTE
        if payment_type not in valid:
            raise InvalidInputError(f"payment_type must be one of {sorted(valid)}")
        return payment_type

    module = get_document_type_config(invoice.kind).module
    expected = Payment.TYPE_VENTE if module == DocumentModule.VENTES else Payment.TYPE_ACHAT
    if payment_type and payment_type != expected:
        raise InvalidInputError(
            f"payment_type '{payment_type}' does not match invoice module '{module}'"
        )
    return expected


# ============================================================
# JOURNAL POSTING
# ============================================================


def _journal_lines(*, tenant, payment: Payment) -> list[dict]:
    if payment.payment_type == Payment.TYPE_VENTE:
        counterpart = ensure_system_account(tenant=tenant, key=RECEIVABLE)
        debit_id, credit_id = payment.account_id, counterpart.pk
    else:
        counterpart = ensure_system_account(tenant=tenant, key=PAYABLE)
        debit_id, credit_id = counterpart.pk, payment.account_id

    return [
        {"account_id": debit_id, "debit": payment.amount, "credit": ZERO},
        {"account_id": credit_id, "debit": ZERO, "credit": payment.amount},
    ]


def _journal_header(payment: Payment) -> tuple[str, str]:
    label = "Encaissement" if payment.payment_type == Payment.TYPE_VENTE else "Décaissement"
    if payment.invoice_id:
        number = payment.invoice.document_number
        return f"PAY-{number}", f"{label} {number}"
    return f"PAY-{str(payment.pk)[:8]}", f"{label} {payment.reference or payment.payment_method}"


def _post(*, tenant, payment: Payment, created_by=None):
    reference, description = _journal_header(payment)
    return create_entry(
        tenant=tenant,
        lines=_journal_lines(tenant=tenant, payment=payment),
        entry_date=payment.payment_date,
        reference=reference,
        description=description,
        created_by=created_by,
    )


def _save(payment: Payment) -> None:
    try:
        payment.save()
    except ValidationError as exc:
        raise InvalidInputError("; ".join(exc.messages)) from exc


# ============================================================
# RECORD
# ============================================================


def _insert(
    *,
    tenant,
    invoice,
    account,
    amount,
    payment_type,
    payment_date,
    payment_method,
    reference,
    notes,
    attachment_reference,
    created_by,
) -> Payment:
    payment = Payment(
        company_id=tenant.company_id,
        invoice=invoice,
        account=account,
        payment_type=payment_type,
        amount=amount,
        payment_date=payment_date,
        payment_method=payment_method or Payment.METHOD_CASH,
        reference=(reference or "").strip(),
        notes=(notes or "").strip(),
        attachment_reference=(attachment_reference or "").strip(),
        created_by=created_by,
    )
    _save(payment)

    payment.journal_entry = _post(tenant=tenant, payment=payment, created_by=created_by)
    payment.save(update_fields=["journal_entry", "updated_at"])
    return payment


def record_payment(
    *,
    tenant,
    amount,
    account_id,
    invoice_id=None,
    payment_type: str | None = None,
    payment_date=None,
    payment_method: str = Payment.METHOD_CASH,
    reference: str = "",
    notes: str = "",
    attachment_reference: str = "",
    created_by=None,
) -> PaymentResult:
    amount = _positive_amount(amount)
    if account_id in (None, ""):
        raise InvalidInputError("account_id is required")
    payment_date = _normalize_date(payment_date)

    atomic = bool(getattr(settings, "PAYMENTS_ATOMIC_RECONCILIATION", True))
    fields = {
        "amount": amount,
        "payment_date": payment_date,
        "payment_method": payment_method,
        "reference": reference,
        "notes": notes,
        "attachment_reference": attachment_reference,
        "created_by": created_by,
    }

    with transaction.atomic():
        invoice = None
        if invoice_id not in (None, ""):
            invoice = _get_invoice(tenant=tenant, invoice_id=invoice_id, for_update=atomic)
            _check_payable(invoice)

        account = get_account(tenant=tenant, account_id=account_id)
        payment = _insert(
            tenant=tenant,
            invoice=invoice,
            account=account,
            payment_type=_payment_type_for(invoice, payment_type),
            **fields,
        )

        if atomic and invoice is not None:
            _reconcile_invoice(invoice)

    logger.info(
        "Payment recorded",
        extra={
            "company_id": str(tenant.company_id),
            "payment_id": str(payment.pk),
            "invoice_id": str(invoice.pk) if invoice else None,
            "amount": str(amount),
            "atomic": atomic,
        },
    )

    result = PaymentResult(payment=payment, invoice=invoice)
    if invoice is not None and not atomic:
        result.invoice = _refresh_non_blocking(tenant=tenant, invoice=invoice, result=result)
    return result


# ============================================================
# REFRESH (explicit, own error channel)
# ============================================================


def refresh_payment_status(*, tenant, invoice_id) -> Document:
    """
    Recompute an invoice's paid / remaining / status from its payments.

    Raises:
        NotFoundError if the invoice is not in this company.
        PaymentStatusRefreshError if the recompute itself fails.
    """
    _get_invoice(tenant=tenant, invoice_id=invoice_id, for_update=False)

    try:
        with transaction.atomic():
            invoice = _get_invoice(tenant=tenant, invoice_id=invoice_id, for_update=True)
            return _reconcile_invoice(invoice)
    except (DatabaseError, CoreServiceError) as exc:
        raise PaymentStatusRefreshError(
            f"Could not refresh payment status of invoice {invoice_id}: {exc}"
        ) from exc


def _refresh_non_blocking(*, tenant, invoice: Document, result: PaymentResult) -> Document:
    try:
        return refresh_payment_status(tenant=tenant, invoice_id=invoice.pk)
    except PaymentStatusRefreshError as exc:
        logger.warning(
            "Payment status refresh failed; invoice may be stale until next recompute",
            extra={"invoice_id": str(invoice.pk), "error": str(exc)},
        )
        result.warnings.append(
            NonBlockingWarning(
                code=REFRESH_FAILED,
                message=str(exc),
                context={"invoice_id": str(invoice.pk)},
            )
        )
        return invoice


# ============================================================
# UPDATE / DELETE
# ============================================================


@transaction.atomic
def update_payment(
    *,
    tenant,
    payment_id,
    amount=_UNSET,
    account_id=_UNSET,
    payment_date=_UNSET,
    payment_method=_UNSET,
    reference=_UNSET,
    notes=_UNSET,
    attachment_reference=_UNSET,
) -> PaymentResult:
    """
    Edit a payment in place. The invoice link and payment type are fixed;
    the journal entry is rewritten and the invoice status recomputed.
    """
    payment = get_payment(tenant=tenant, payment_id=payment_id, for_update=True)

    invoice = None
    if payment.invoice_id:
        invoice = _get_invoice(tenant=tenant, invoice_id=payment.invoice_id, for_update=True)

    if amount is not _UNSET:
        payment.amount = _positive_amount(amount)
    if account_id is not _UNSET:
        payment.account = get_account(tenant=tenant, account_id=account_id)
    if payment_date is not _UNSET:
        payment.payment_date = _normalize_date(payment_date)
    if payment_method is not _UNSET:
        payment.payment_method = payment_method or Payment.METHOD_CASH
    if reference is not _UNSET:
        payment.reference = (reference or "").strip()
    if notes is not _UNSET:
        payment.notes = (notes or "").strip()
    if attachment_reference is not _UNSET:
        payment.attachment_reference = (attachment_reference or "").strip()

    _save(payment)

    reference_text, description = _journal_header(payment)
    if payment.journal_entry_id:
        update_entry(
            tenant=tenant,
            entry_id=payment.journal_entry_id,
            lines=_journal_lines(tenant=tenant, payment=payment),
            entry_date=payment.payment_date,
            reference=reference_text,
            description=description,
        )
    else:
        payment.journal_entry = _post(tenant=tenant, payment=payment)
        payment.save(update_fields=["journal_entry", "updated_at"])

    if invoice is not None:
        _reconcile_invoice(invoice)

    logger.info(
        "Payment updated",
        extra={"company_id": str(tenant.company_id), "payment_id": str(payment.pk)},
    )
    return PaymentResult(payment=payment, invoice=invoice)


@transaction.atomic
def delete_payment(*, tenant, payment_id) -> PaymentResult:
    """
    Remove a payment and its journal entry; the invoice is recomputed so a
    'paid' invoice falls back to 'partial' or its pre-payment status.
    """
    payment = get_payment(tenant=tenant, payment_id=payment_id, for_update=True)

    invoice = None
    if payment.invoice_id:
        invoice = _get_invoice(tenant=tenant, invoice_id=payment.invoice_id, for_update=True)

    entry_id = payment.journal_entry_id
    payment.delete()
    if entry_id:
        delete_entry(tenant=tenant, entry_id=entry_id)

    if invoice is not None:
        _reconcile_invoice(invoice)

    logger.info(
        "Payment deleted",
        extra={"company_id": str(tenant.company_id), "payment_id": str(payment_id)},
    )
    return PaymentResult(payment=None, invoice=invoice)


# ============================================================
# OVERDUE SWEEP
# ============================================================


def mark_overdue_invoices(*, tenant, today=None) -> int:
    today = today or timezone.localdate()
    updated = Document.objects.filter(
        company_id=tenant.company_id,
        kind__in=list(INVOICE_KINDS),
        status__in=[DocumentStatus.VALIDATED, DocumentStatus.PARTIAL],
        due_date__lt=today,
    ).update(status=DocumentStatus.OVERDUE, updated_at=timezone.now())

    if updated:
        logger.info(
            "Invoices marked overdue",
            extra={"company_id": str(tenant.company_id), "count": updated, "today": str(today)},
        )
    return updated
