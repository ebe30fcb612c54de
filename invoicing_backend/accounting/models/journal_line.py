# accounting/models/journal_line.py

"""
JOURNAL LINE MODEL

One leg of a journal entry: a debit and/or credit against one account.

Guarantees:
- debit >= 0 and credit >= 0 (DB check constraints)
- At least one side is nonzero
- The entry-level rule sum(debit) == sum(credit) is enforced by
  accounting.services.journal_entry_service before commit
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class JournalLine(models.Model):
    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    credit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["entry", "position", "id"]
        indexes = [
            models.Index(fields=["account"], name="journal_line_account_idx"),
            models.Index(fields=["entry"], name="journal_line_entry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0),
                name="chk_journal_line_debit_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(credit__gte=0),
                name="chk_journal_line_credit_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.account} D{self.debit} C{self.credit}"

    def clean(self):
        debit = self.debit or Decimal("0.00")
        credit = self.credit or Decimal("0.00")

        if debit < 0 or credit < 0:
            raise ValidationError("Debit or credit cannot be negative")
        if debit == 0 and credit == 0:
            raise ValidationError("A journal line must carry a debit or a credit")

        if self.entry_id and self.account_id:
            if self.account.company_id != self.entry.company_id:
                raise ValidationError("Journal line account belongs to another company")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
