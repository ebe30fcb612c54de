# documents/models/document.py

"""
DOCUMENT (HEADER + TOTALS SNAPSHOT)

Quote, order, delivery note, invoice or credit note of one company.

GUARANTEES:
- document_number is unique per (company, kind)
- client XOR supplier, as required by the kind's registry entry
- status is one of the kind's status options
- Totals are a denormalized snapshot written by documents.services only and
  always re-derivable from the lines + discount + stamp settings
- cancelled is terminal; the record itself is never deleted
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from companies.models import Client, Company, Supplier
from documents.document_types import DocumentKind, DocumentStatus, get_document_type_config
from accounting.services.exceptions import InvalidInputError

User = settings.AUTH_USER_MODEL

MONEY = {"max_digits": 14, "decimal_places": 2, "default": Decimal("0.00")}


class Document(models.Model):
    DISCOUNT_PERCENT = "percent"
    DISCOUNT_FIXED = "fixed"

    DISCOUNT_TYPES = [
        (DISCOUNT_PERCENT, "Percent"),
        (DISCOUNT_FIXED, "Fixed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="documents",
    )

    kind = models.CharField(max_length=32, choices=DocumentKind.choices)
    document_number = models.CharField(max_length=64)
    status = models.CharField(
        max_length=20,
        choices=DocumentStatus.choices,
        default=DocumentStatus.DRAFT,
    )

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="documents",
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="documents",
    )

    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField(null=True, blank=True)
    currency = models.CharField(max_length=3, default="TND")

    # Discount / stamp settings (inputs of the calculator)
    discount_type = models.CharField(max_length=10, choices=DISCOUNT_TYPES, blank=True, default="")
    discount_value = models.DecimalField(**MONEY)
    stamp_included = models.BooleanField(default=False)
    stamp_amount = models.DecimalField(**MONEY)

    # Totals snapshot
    subtotal = models.DecimalField(**MONEY)
    total_fodec = models.DecimalField(**MONEY)
    base_tva = models.DecimalField(**MONEY)
    tax_amount = models.DecimalField(**MONEY)
    discount_amount = models.DecimalField(**MONEY)
    stamp = models.DecimalField(**MONEY)
    total = models.DecimalField(**MONEY)

    # Payment state (maintained by payments.services)
    total_paid = models.DecimalField(**MONEY)
    remaining_amount = models.DecimalField(**MONEY)

    # Lineage
    source_document = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_notes",
        help_text="Origin of a credit note (set only for credit-note conversions).",
    )
    reference = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Human-readable number of the document this one was converted from.",
    )

    template = models.CharField(max_length=50, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="documents_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-issue_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "kind", "status"], name="document_company_kind_idx"),
            models.Index(fields=["company", "issue_date"], name="document_company_date_idx"),
            models.Index(fields=["due_date"], name="document_due_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "kind", "document_number"],
                name="uniq_document_company_kind_number",
            ),
            models.CheckConstraint(
                condition=Q(client__isnull=True) | Q(supplier__isnull=True),
                name="chk_document_single_party",
            ),
            models.CheckConstraint(
                condition=Q(total_paid__gte=0) & Q(remaining_amount__gte=0),
                name="chk_document_payment_fields_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.document_number} ({self.kind})"

    @property
    def type_config(self):
        return get_document_type_config(self.kind)

    @property
    def discount_config(self):
        if not self.discount_type:
            return None
        return {"type": self.discount_type, "value": self.discount_value}

    def clean(self):
        try:
            config = self.type_config
        except InvalidInputError as exc:
            raise ValidationError({"kind": str(exc)}) from exc

        if self.status not in config.status_options:
            raise ValidationError(
                {"status": f"Status '{self.status}' is not allowed for {self.kind}"}
            )

        if config.requires_client and (not self.client_id or self.supplier_id):
            raise ValidationError(f"{config.label} requires a client and no supplier")
        if config.requires_supplier and (not self.supplier_id or self.client_id):
            raise ValidationError(f"{config.label} requires a supplier and no client")

        for party in (self.client, self.supplier):
            if party is not None and party.company_id != self.company_id:
                raise ValidationError("Counterparty belongs to another company")

    def save(self, *args, **kwargs):
        # The number collision is left to the database so services can map
        # the IntegrityError to a concurrency conflict.
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)
