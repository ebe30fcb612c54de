# accounting/models/expense.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from companies.models import Company


class Expense(models.Model):
    """
    Expense transaction (business event), posted through the journal engine.

    Accounting effect:
    - Dr expense_account (charge)
    - Cr payment_account (treasury)

    The optional attachment_reference is an opaque id handed out by the
    file store; its content is never interpreted here.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="expenses",
    )

    expense_date = models.DateField(default=timezone.localdate)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    expense_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="expenses_as_category",
    )

    payment_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="expenses_as_payment",
    )

    vendor = models.CharField(max_length=150, blank=True, default="")
    narration = models.CharField(max_length=255, blank=True, default="")
    attachment_reference = models.CharField(max_length=255, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["company", "expense_date"], name="expense_company_date_idx"),
            models.Index(fields=["created_at"], name="expense_created_at_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_expense_amount_positive",
            ),
        ]

    def __str__(self):
        return f"Expense #{self.id} - {self.amount} ({self.expense_date})"

    def clean(self):
        if self.expense_account_id and self.payment_account_id:
            if self.expense_account_id == self.payment_account_id:
                raise ValidationError("expense_account and payment_account must differ")

            companies = {
                self.company_id,
                self.expense_account.company_id,
                self.payment_account.company_id,
            }
            if len(companies) != 1:
                raise ValidationError("Expense accounts must belong to the expense company")


class AccountLoad(models.Model):
    """
    Funds loaded onto an account (e.g. cash deposit into the till).

    Accounting effect:
    - Dr account
    - Cr source_account (defaults to the adjustment suspense account)
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="account_loads",
    )

    load_date = models.DateField(default=timezone.localdate)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="loads",
    )

    source_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="loads_as_source",
    )

    description = models.CharField(max_length=255, blank=True, default="")
    attachment_reference = models.CharField(max_length=255, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="account_loads",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-load_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "load_date"], name="account_load_company_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_account_load_amount_positive",
            ),
        ]

    def __str__(self):
        return f"AccountLoad #{self.id} - {self.amount} → {self.account_id}"
