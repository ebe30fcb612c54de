# documents/document_types.py

"""
DOCUMENT KIND REGISTRY

Static, read-only configuration of every document kind: numbering prefix,
module, stock impact, party requirements, allowed statuses and the legal
conversion targets (a forward-only directed graph).

    devis -> bon_commande -> bon_livraison -> facture -> facture_avoir
    bon_commande_achat -> bon_livraison_achat -> facture_achat -> avoir_achat

The registry is closed: unknown kinds fail fast, nothing is added at runtime.
Models import from here, so this module must not import models or services.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from django.db import models

from accounting.services.exceptions import InvalidInputError


class DocumentKind(models.TextChoices):
    # Ventes
    DEVIS = "devis", "Devis"
    BON_COMMANDE = "bon_commande", "Bon de commande"
    BON_LIVRAISON = "bon_livraison", "Bon de livraison"
    FACTURE = "facture", "Facture"
    FACTURE_AVOIR = "facture_avoir", "Facture d'avoir"
    # Achats
    BON_COMMANDE_ACHAT = "bon_commande_achat", "Commande fournisseur"
    BON_LIVRAISON_ACHAT = "bon_livraison_achat", "Bon de réception"
    FACTURE_ACHAT = "facture_achat", "Facture d'achat"
    AVOIR_ACHAT = "avoir_achat", "Avoir fournisseur"


class DocumentStatus(models.TextChoices):
    DRAFT = "draft", "Brouillon"
    SENT = "sent", "Envoyé"
    ACCEPTED = "accepted", "Accepté"
    REJECTED = "rejected", "Refusé"
    EXPIRED = "expired", "Expiré"
    CONFIRMED = "confirmed", "Confirmé"
    DELIVERED = "delivered", "Livré"
    VALIDATED = "validated", "Validée"
    PARTIAL = "partial", "Paiement partiel"
    PAID = "paid", "Payée"
    OVERDUE = "overdue", "Échue"
    CANCELLED = "cancelled", "Annulée"


class DocumentModule(models.TextChoices):
    VENTES = "ventes", "Ventes"
    ACHATS = "achats", "Achats"


class StockMovement(models.TextChoices):
    ENTRY = "entry", "Entrée"
    EXIT = "exit", "Sortie"


@dataclass(frozen=True)
class DocumentTypeConfig:
    kind: str
    label: str
    prefix: str
    module: str
    affects_stock: bool
    stock_movement: str | None
    requires_client: bool
    requires_supplier: bool
    requires_due_date: bool
    can_convert_to: tuple
    default_status: str
    status_options: tuple
    can_have_payments: bool = False


K = DocumentKind
S = DocumentStatus

_QUOTE_STATUSES = (S.DRAFT, S.SENT, S.ACCEPTED, S.REJECTED, S.EXPIRED, S.CANCELLED)
_ORDER_STATUSES = (S.DRAFT, S.CONFIRMED, S.CANCELLED)
_DELIVERY_STATUSES = (S.DRAFT, S.DELIVERED, S.CANCELLED)
_INVOICE_STATUSES = (S.DRAFT, S.VALIDATED, S.PARTIAL, S.PAID, S.OVERDUE, S.CANCELLED)
_CREDIT_NOTE_STATUSES = (S.DRAFT, S.VALIDATED)


def _sales(kind, label, prefix, **kwargs) -> DocumentTypeConfig:
    return DocumentTypeConfig(
        kind=kind,
        label=label,
        prefix=prefix,
        module=DocumentModule.VENTES,
        requires_client=True,
        requires_supplier=False,
        default_status=S.DRAFT,
        **kwargs,
    )


def _purchase(kind, label, prefix, **kwargs) -> DocumentTypeConfig:
    return DocumentTypeConfig(
        kind=kind,
        label=label,
        prefix=prefix,
        module=DocumentModule.ACHATS,
        requires_client=False,
        requires_supplier=True,
        default_status=S.DRAFT,
        **kwargs,
    )


_REGISTRY = MappingProxyType(
    {
        K.DEVIS: _sales(
            K.DEVIS, "Devis", "DEV",
            affects_stock=False, stock_movement=None, requires_due_date=False,
            can_convert_to=(K.BON_COMMANDE,), status_options=_QUOTE_STATUSES,
        ),
        K.BON_COMMANDE: _sales(
            K.BON_COMMANDE, "Bon de commande", "BC",
            affects_stock=False, stock_movement=None, requires_due_date=False,
            can_convert_to=(K.BON_LIVRAISON,), status_options=_ORDER_STATUSES,
        ),
        K.BON_LIVRAISON: _sales(
            K.BON_LIVRAISON, "Bon de livraison", "BL",
            affects_stock=True, stock_movement=StockMovement.EXIT, requires_due_date=False,
            can_convert_to=(K.FACTURE,), status_options=_DELIVERY_STATUSES,
        ),
        K.FACTURE: _sales(
            K.FACTURE, "Facture", "FAC",
            affects_stock=False, stock_movement=None, requires_due_date=True,
            can_convert_to=(K.FACTURE_AVOIR,), status_options=_INVOICE_STATUSES,
            can_have_payments=True,
        ),
        K.FACTURE_AVOIR: _sales(
            K.FACTURE_AVOIR, "Facture d'avoir", "AV",
            affects_stock=True, stock_movement=StockMovement.ENTRY, requires_due_date=False,
            can_convert_to=(), status_options=_CREDIT_NOTE_STATUSES,
        ),
        K.BON_COMMANDE_ACHAT: _purchase(
            K.BON_COMMANDE_ACHAT, "Commande fournisseur", "BC-A",
            affects_stock=False, stock_movement=None, requires_due_date=False,
            can_convert_to=(K.BON_LIVRAISON_ACHAT,), status_options=_ORDER_STATUSES,
        ),
        K.BON_LIVRAISON_ACHAT: _purchase(
            K.BON_LIVRAISON_ACHAT, "Bon de réception", "BL-A",
            affects_stock=True, stock_movement=StockMovement.ENTRY, requires_due_date=False,
            can_convert_to=(K.FACTURE_ACHAT,), status_options=_DELIVERY_STATUSES,
        ),
        K.FACTURE_ACHAT: _purchase(
            K.FACTURE_ACHAT, "Facture d'achat", "FAC-A",
            affects_stock=False, stock_movement=None, requires_due_date=True,
            can_convert_to=(K.AVOIR_ACHAT,), status_options=_INVOICE_STATUSES,
            can_have_payments=True,
        ),
        K.AVOIR_ACHAT: _purchase(
            K.AVOIR_ACHAT, "Avoir fournisseur", "AV-A",
            affects_stock=True, stock_movement=StockMovement.EXIT, requires_due_date=False,
            can_convert_to=(), status_options=_CREDIT_NOTE_STATUSES,
        ),
    }
)

# Kinds retired when facture_credit / facture_payee were merged into one fiscal invoice.
LEGACY_KINDS = MappingProxyType(
    {
        "facture_credit": K.FACTURE,
        "facture_payee": K.FACTURE,
        "facture_credit_achat": K.FACTURE_ACHAT,
    }
)

CREDIT_NOTE_KINDS = frozenset({K.FACTURE_AVOIR, K.AVOIR_ACHAT})
INVOICE_KINDS = frozenset({K.FACTURE, K.FACTURE_ACHAT})


def map_legacy_kind(kind) -> str:
    raw = str(kind or "").strip()
    return LEGACY_KINDS.get(raw, raw)


def get_document_type_config(kind) -> DocumentTypeConfig:
    mapped = map_legacy_kind(kind)
    try:
        return _REGISTRY[DocumentKind(mapped)]
    except (KeyError, ValueError) as exc:
        raise InvalidInputError(f"Unknown document kind: {kind!r}") from exc


def all_document_types() -> tuple:
    return tuple(_REGISTRY.values())


def is_credit_note_kind(kind) -> bool:
    return map_legacy_kind(kind) in CREDIT_NOTE_KINDS


def can_receive_payments(kind) -> bool:
    return get_document_type_config(kind).can_have_payments


def can_convert(source_kind, target_kind) -> bool:
    config = get_document_type_config(source_kind)
    return map_legacy_kind(target_kind) in config.can_convert_to
