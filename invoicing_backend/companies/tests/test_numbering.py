# companies/tests/test_numbering.py

from __future__ import annotations

from datetime import date

from django.db import transaction
from django.test import TestCase, override_settings

from accounting.services.exceptions import InvalidInputError
from companies.models import DocumentSequence
from companies.services.numbering import (
    format_document_number,
    next_document_number,
    sequence_period,
)
from companies.tests.helpers import make_company


class FormatDocumentNumberTests(TestCase):
    def test_all_placeholders(self):
        number = format_document_number(
            number_format="{prefix}/{year}/{month}/{number}",
            prefix="FAC",
            number=7,
            padding=5,
            issue_date=date(2024, 3, 9),
        )
        self.assertEqual(number, "FAC/2024/03/00007")

    def test_padding_never_truncates(self):
        number = format_document_number(
            number_format="{prefix}-{number}",
            prefix="DEV",
            number=123456,
            padding=3,
            issue_date=date(2024, 1, 1),
        )
        self.assertEqual(number, "DEV-123456")

    def test_format_requires_number_placeholder(self):
        with self.assertRaises(InvalidInputError):
            format_document_number(
                number_format="{prefix}-{year}",
                prefix="FAC",
                number=1,
                padding=4,
                issue_date=date(2024, 1, 1),
            )

    def test_padding_must_be_positive(self):
        with self.assertRaises(InvalidInputError):
            format_document_number(
                number_format="{number}",
                prefix="FAC",
                number=1,
                padding=0,
                issue_date=date(2024, 1, 1),
            )


@override_settings(INVOICING_NUMBER_FORMAT="{prefix}-{year}-{number}", INVOICING_NUMBER_PADDING=4)
class NextDocumentNumberTests(TestCase):
    def setUp(self):
        self.company = make_company()

    def _next(self, kind="facture", prefix="FAC", issue_date=date(2024, 6, 1), **kwargs):
        return next_document_number(
            company_id=self.company.id,
            kind=kind,
            prefix=prefix,
            issue_date=issue_date,
            **kwargs,
        )

    def test_monotonic_and_gapless_per_scope(self):
        self.assertEqual(self._next(), "FAC-2024-0001")
        self.assertEqual(self._next(), "FAC-2024-0002")
        self.assertEqual(self._next(), "FAC-2024-0003")

    def test_scopes_are_independent(self):
        self.assertEqual(self._next(), "FAC-2024-0001")
        self.assertEqual(self._next(kind="devis", prefix="DEV"), "DEV-2024-0001")
        self.assertEqual(self._next(issue_date=date(2025, 1, 2)), "FAC-2025-0001")

        other = make_company(name="Other")
        self.assertEqual(
            next_document_number(
                company_id=other.id,
                kind="facture",
                prefix="FAC",
                issue_date=date(2024, 6, 1),
            ),
            "FAC-2024-0001",
        )

    def test_rollback_does_not_burn_a_number(self):
        self.assertEqual(self._next(), "FAC-2024-0001")

        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                self._next()
                raise RuntimeError("caller failed after numbering")

        self.assertEqual(self._next(), "FAC-2024-0002")
        seq = DocumentSequence.objects.get(company=self.company, kind="facture", period_year=2024)
        self.assertEqual(seq.next_value, 3)

    def test_explicit_format_and_padding(self):
        self.assertEqual(
            self._next(number_format="{year}{month}-{number}", padding=2),
            "202406-01",
        )

    def test_format_without_year_keeps_counting_across_years(self):
        fmt = "{prefix}-{number}"
        self.assertEqual(self._next(number_format=fmt, issue_date=date(2025, 12, 31)), "FAC-0001")
        self.assertEqual(self._next(number_format=fmt, issue_date=date(2026, 1, 2)), "FAC-0002")

        seq = DocumentSequence.objects.get(company=self.company, kind="facture")
        self.assertEqual(seq.period_year, 0)
        self.assertEqual(seq.next_value, 3)

    def test_format_with_year_restarts_each_year(self):
        self.assertEqual(self._next(issue_date=date(2025, 12, 31)), "FAC-2025-0001")
        self.assertEqual(self._next(issue_date=date(2026, 1, 2)), "FAC-2026-0001")


class SequencePeriodTests(TestCase):
    def test_period_follows_year_placeholder(self):
        day = date(2026, 3, 1)
        self.assertEqual(sequence_period("{prefix}-{year}-{number}", day), 2026)
        self.assertEqual(sequence_period("{prefix}/{month}/{number}", day), 0)
