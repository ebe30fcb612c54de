# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from companies.models import Company


class Account(models.Model):
    """
    A ledger account of one company.

    Guarantees:
    - Account codes are unique per company
    - Code + name are normalized (trimmed)
    - No balance column: the balance is always derived from journal lines
      (see accounting.services.balance_service)
    """

    ACTIF = "actif"
    PASSIF = "passif"
    CHARGE = "charge"
    PRODUIT = "produit"

    ACCOUNT_TYPES = [
        (ACTIF, "Actif"),
        (PASSIF, "Passif"),
        (CHARGE, "Charge"),
        (PRODUIT, "Produit"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    is_active = models.BooleanField(default=True)

    is_system = models.BooleanField(
        default=False,
        help_text="Created automatically (adjustments, receivables, payables).",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["company", "code"], name="account_company_code_idx"),
            models.Index(fields=["company", "account_type"], name="account_company_type_idx"),
            models.Index(fields=["is_active"], name="account_is_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_company_code",
            ),
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")
        if self.account_type not in dict(self.ACCOUNT_TYPES):
            raise ValidationError({"account_type": "Invalid account type"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
