# companies/models/company.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


def default_company_currency():
    return settings.INVOICING_DEFAULT_CURRENCY


class Company(models.Model):
    """
    A tenant. Every accounting record, document and payment belongs to
    exactly one company and is never visible from another one.

    Numbering settings are optional; when blank the project-wide
    INVOICING_NUMBER_FORMAT / INVOICING_NUMBER_PADDING apply.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)

    # Optional, but if provided must be unique
    code = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Unique company code (optional). If set, must be unique.",
        db_index=True,
    )

    tax_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Matricule fiscal",
    )
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=50, blank=True)

    default_currency = models.CharField(max_length=3, default=default_company_currency)

    document_number_format = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Placeholders: {prefix} {year} {month} {number}",
    )
    document_number_padding = models.PositiveSmallIntegerField(null=True, blank=True)

    default_stamp_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Fiscal stamp duty used when a document does not set one.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Companies"
        constraints = [
            models.UniqueConstraint(
                fields=["code"],
                condition=Q(code__isnull=False) & ~Q(code=""),
                name="uniq_company_code_when_present",
            ),
        ]

    def __str__(self):
        c = (self.code or "").strip()
        if c:
            return f"{self.name} ({c})"
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Company name is required"})

        fmt = (self.document_number_format or "").strip()
        if fmt and "{number}" not in fmt:
            raise ValidationError(
                {"document_number_format": "Format must contain the {number} placeholder"}
            )

        if self.default_stamp_amount is not None and self.default_stamp_amount < Decimal("0.00"):
            raise ValidationError({"default_stamp_amount": "Stamp amount cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def number_format(self) -> str:
        fmt = (self.document_number_format or "").strip()
        return fmt or settings.INVOICING_NUMBER_FORMAT

    @property
    def number_padding(self) -> int:
        if self.document_number_padding:
            return int(self.document_number_padding)
        return int(settings.INVOICING_NUMBER_PADDING)

    @property
    def stamp_amount(self) -> Decimal:
        if self.default_stamp_amount is not None:
            return self.default_stamp_amount
        return Decimal(str(settings.INVOICING_DEFAULT_STAMP_AMOUNT))


class CompanyMembership(models.Model):
    """
    Links a user to a company. The API layer builds a TenantContext from
    these rows; role gating itself lives outside this backend.
    """

    ROLE_OWNER = "owner"
    ROLE_ADMIN = "admin"
    ROLE_ACCOUNTANT = "accountant"
    ROLE_MEMBER = "member"

    ROLES = [
        (ROLE_OWNER, "Owner"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_ACCOUNTANT, "Accountant"),
        (ROLE_MEMBER, "Member"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="company_memberships",
    )
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    role = models.CharField(max_length=20, choices=ROLES, default=ROLE_MEMBER)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "company"],
                name="uniq_membership_user_company",
            ),
        ]

    def __str__(self):
        return f"{self.user} @ {self.company} ({self.role})"
