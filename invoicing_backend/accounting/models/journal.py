# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Guarantees:
- Belongs to exactly one company
- entry_date is the accounting effective date (used for balance ranges)
- Lines are only written through accounting.services.journal_entry_service,
  which enforces sum(debit) == sum(credit) before commit
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from companies.models import Company


class JournalEntry(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    entry_date = models.DateField(
        default=timezone.localdate,
        help_text="Accounting effective date",
    )

    reference = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="External reference (payment, adjustment, expense ...)",
    )

    description = models.TextField(
        blank=True,
        default="",
        help_text="Narrative description of the journal entry",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="journal_entries_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-entry_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "entry_date"], name="journal_company_date_idx"),
            models.Index(fields=["reference"], name="journal_reference_idx"),
            models.Index(fields=["created_at"], name="journal_created_at_idx"),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.id} – {self.entry_date}"

    def clean(self):
        self.reference = (self.reference or "").strip()
        self.description = (self.description or "").strip() or self.reference

        if not self.description:
            raise ValidationError("Journal entry description or reference is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
