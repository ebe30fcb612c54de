# companies/models/sequence.py

"""
DOCUMENT SEQUENCE MODEL

One counter per (company, document kind, calendar year); period_year is 0
for formats without {year}, whose counter never resets.

Only companies.services.numbering touches next_value, always under a row lock.
"""

from django.db import models
from django.db.models import Q

from companies.models.company import Company


class DocumentSequence(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="document_sequences",
    )
    kind = models.CharField(max_length=32)
    period_year = models.PositiveSmallIntegerField()
    next_value = models.PositiveIntegerField(default=1)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["company", "kind", "period_year"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "kind", "period_year"],
                name="uniq_sequence_company_kind_year",
            ),
            models.CheckConstraint(
                condition=Q(next_value__gte=1),
                name="chk_sequence_next_value_positive",
            ),
        ]

    def __str__(self):
        return f"{self.kind} {self.period_year} → {self.next_value}"
