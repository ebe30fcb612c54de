# documents/services/document_lifecycle.py

"""
DOCUMENT LIFECYCLE DOMAIN RULES

The ONLY allowed manual status transitions for documents.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Status values validated against the kind registry, never by free strings
"""

from __future__ import annotations

from accounting.services.exceptions import InvalidInputError
from documents.document_types import DocumentStatus, get_document_type_config

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = frozenset({DocumentStatus.CANCELLED})

# Set by payment reconciliation only.
PAYMENT_MANAGED_STATES = frozenset({DocumentStatus.PARTIAL, DocumentStatus.PAID})

EDITABLE_STATES = frozenset({DocumentStatus.DRAFT})


# ============================================================
# DOMAIN RULES
# ============================================================


def is_editable(status: str) -> bool:
    return status in EDITABLE_STATES


def can_transition(*, kind: str, from_status: str, to_status: str) -> bool:
    options = get_document_type_config(kind).status_options

    if to_status not in options:
        return False
    if from_status in TERMINAL_STATES:
        return False
    if to_status == from_status:
        return False
    if to_status == DocumentStatus.DRAFT:
        return False
    if to_status in PAYMENT_MANAGED_STATES or from_status in PAYMENT_MANAGED_STATES:
        return False

    return True


def validate_transition(*, document, target_status: str):
    try:
        target_status = DocumentStatus(target_status)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown status: {target_status!r}") from exc

    if not can_transition(
        kind=document.kind,
        from_status=document.status,
        to_status=target_status,
    ):
        raise InvalidInputError(
            f"Document {document.document_number} cannot transition from "
            f"'{document.status}' to '{target_status}'"
        )

    if target_status == DocumentStatus.CANCELLED and document.total_paid > 0:
        raise InvalidInputError(
            f"Document {document.document_number} has payments and cannot be cancelled"
        )

    # Once paid into, status follows the payments (reconciliation, overdue sweep).
    if document.total_paid > 0:
        raise InvalidInputError(
            f"Document {document.document_number} has payments; its status is "
            f"maintained by payment reconciliation"
        )

    return target_status
