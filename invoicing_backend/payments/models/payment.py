# payments/models/payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from companies.models import Company
from documents.models import Document


class Payment(models.Model):
    """
    One received (vente) or issued (achat) payment.

    RULES:
    - amount > 0
    - invoice is optional (unlinked payments are allowed)
    - account is the treasury account the money moved through
    - journal_entry is written by payments.services only
    """

    TYPE_VENTE = "vente"
    TYPE_ACHAT = "achat"

    TYPE_CHOICES = [
        (TYPE_VENTE, "Encaissement"),
        (TYPE_ACHAT, "Décaissement"),
    ]

    METHOD_CASH = "cash"
    METHOD_TRANSFER = "transfer"
    METHOD_CHECK = "check"
    METHOD_CARD = "card"
    METHOD_DIRECT_DEBIT = "direct_debit"
    METHOD_OTHER = "other"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_TRANSFER, "Transfer"),
        (METHOD_CHECK, "Check"),
        (METHOD_CARD, "Card"),
        (METHOD_DIRECT_DEBIT, "Direct debit"),
        (METHOD_OTHER, "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    invoice = models.ForeignKey(
        Document,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    payment_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_VENTE)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    payment_date = models.DateField(default=timezone.localdate)
    payment_method = models.CharField(max_length=32, choices=METHOD_CHOICES, default=METHOD_CASH)

    reference = models.CharField(max_length=128, blank=True, default="")
    notes = models.CharField(max_length=255, blank=True, default="")
    attachment_reference = models.CharField(max_length=255, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_recorded",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-payment_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "payment_date"], name="payment_company_date_idx"),
            models.Index(fields=["invoice"], name="payment_invoice_idx"),
            models.Index(fields=["payment_method"], name="payment_method_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_payment_amount_positive",
            ),
        ]

    def __str__(self):
        return f"{self.payment_type} | {self.amount} | {self.payment_date}"

    def clean(self):
        if self.account_id and self.account.company_id != self.company_id:
            raise ValidationError({"account": "Account belongs to another company"})
        if self.invoice_id and self.invoice.company_id != self.company_id:
            raise ValidationError({"invoice": "Invoice belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
