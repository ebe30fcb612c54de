# companies/models/third_party.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from companies.models.company import Company


class ThirdParty(models.Model):
    """
    Shared fields for document counterparties.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    tax_id = models.CharField(max_length=64, blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class Client(ThirdParty):
    """Customer of a company (sales documents)."""

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="clients",
    )

    class Meta(ThirdParty.Meta):
        indexes = [
            models.Index(fields=["company", "name"], name="client_company_name_idx"),
        ]


class Supplier(ThirdParty):
    """Supplier of a company (purchase documents)."""

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="suppliers",
    )

    class Meta(ThirdParty.Meta):
        indexes = [
            models.Index(fields=["company", "name"], name="supplier_company_name_idx"),
        ]
