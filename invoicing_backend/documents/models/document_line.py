# documents/models/document_line.py

"""
DOCUMENT LINE

Inputs (quantity, unit_price, rates) plus the 2dp amounts the calculator
derived from them. total == ht + fodec_amount + vat_amount always holds.

unit_price may be negative (credit notes); quantity and rates may not.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import Q

from documents.models.document import Document


class DocumentLine(models.Model):
    document = models.ForeignKey(
        Document,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    position = models.PositiveIntegerField(default=0)

    description = models.CharField(max_length=255, blank=True, default="")
    product_reference = models.CharField(max_length=64, blank=True, default="")

    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    unit_price = models.DecimalField(max_digits=14, decimal_places=3)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    fodec_applicable = models.BooleanField(default=False)
    fodec_rate = models.DecimalField(max_digits=6, decimal_places=4, default=Decimal("0.0000"))

    ht = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    fodec_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["document", "position", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name="chk_document_line_quantity_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(vat_rate__gte=0),
                name="chk_document_line_vat_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(fodec_rate__gte=0) & Q(fodec_rate__lte=1),
                name="chk_document_line_fodec_rate_range",
            ),
        ]

    def __str__(self):
        return f"{self.description or self.product_reference} x {self.quantity}"
