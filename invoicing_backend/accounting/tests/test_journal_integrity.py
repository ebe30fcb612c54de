# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.db.models import Sum
from django.test import TestCase

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.services.exceptions import (
    InvalidInputError,
    NotFoundError,
    UnbalancedEntryError,
)
from accounting.services.journal_entry_service import (
    create_entry,
    delete_entry,
    find_unbalanced_entries,
    update_entry,
)
from accounting.tests.helpers import make_account, two_legs
from companies.tests.helpers import make_company, make_tenant


class JournalEntryCreationTests(TestCase):
    """
    GUARANTEES:
    - sum(debit) == sum(credit) before commit, or nothing is written
    - at least two lines
    - accounts must belong to the tenant's company
    """

    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.cash = make_account(self.company, "531", "Caisse")
        self.bank = make_account(self.company, "532", "Banque")
        self.sales = make_account(self.company, "701", "Ventes", account_type="produit")

    def _assert_balanced(self, entry: JournalEntry):
        totals = entry.lines.aggregate(d=Sum("debit"), c=Sum("credit"))
        self.assertEqual(totals["d"], totals["c"])

    def test_balanced_entry_is_persisted(self):
        entry = create_entry(
            tenant=self.tenant,
            entry_date=date(2024, 2, 1),
            reference="VTE-1",
            description="Vente comptoir",
            lines=two_legs(self.cash, self.sales, "120.50"),
        )

        self.assertEqual(entry.company_id, self.company.id)
        self.assertEqual(entry.lines.count(), 2)
        self._assert_balanced(entry)

    def test_split_entry_with_three_lines(self):
        entry = create_entry(
            tenant=self.tenant,
            description="Encaissement mixte",
            lines=[
                {"account_id": self.cash.pk, "debit": "40.00", "credit": 0},
                {"account_id": self.bank.pk, "debit": "60.00", "credit": 0},
                {"account_id": self.sales.pk, "debit": 0, "credit": "100.00"},
            ],
        )
        self._assert_balanced(entry)
        self.assertEqual(entry.lines.count(), 3)

    def test_unbalanced_entry_rejected_and_nothing_written(self):
        with self.assertRaises(UnbalancedEntryError):
            create_entry(
                tenant=self.tenant,
                description="Déséquilibrée",
                lines=[
                    {"account_id": self.cash.pk, "debit": "100.00", "credit": 0},
                    {"account_id": self.sales.pk, "debit": 0, "credit": "99.99"},
                ],
            )

        self.assertEqual(JournalEntry.objects.count(), 0)
        self.assertEqual(JournalLine.objects.count(), 0)

    def test_unbalanced_error_is_an_input_error(self):
        self.assertTrue(issubclass(UnbalancedEntryError, InvalidInputError))

    def test_single_line_rejected(self):
        with self.assertRaises(InvalidInputError):
            create_entry(
                tenant=self.tenant,
                description="Une jambe",
                lines=[{"account_id": self.cash.pk, "debit": "0.00", "credit": "0.00"}],
            )

    def test_negative_and_empty_lines_rejected(self):
        with self.assertRaises(InvalidInputError):
            create_entry(
                tenant=self.tenant,
                description="Négatif",
                lines=[
                    {"account_id": self.cash.pk, "debit": "-10.00", "credit": 0},
                    {"account_id": self.sales.pk, "debit": 0, "credit": "-10.00"},
                ],
            )

        with self.assertRaises(InvalidInputError):
            create_entry(
                tenant=self.tenant,
                description="Vide",
                lines=[
                    {"account_id": self.cash.pk, "debit": 0, "credit": 0},
                    {"account_id": self.sales.pk, "debit": 0, "credit": 0},
                ],
            )

    def test_cross_tenant_account_rejected(self):
        other = make_company(name="Other")
        foreign = make_account(other, "531", "Caisse autre")

        with self.assertRaises(NotFoundError):
            create_entry(
                tenant=self.tenant,
                description="Cross tenant",
                lines=two_legs(foreign, self.sales, "10.00"),
            )
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_description_defaults_to_reference(self):
        entry = create_entry(
            tenant=self.tenant,
            reference="REF-42",
            lines=two_legs(self.cash, self.sales, "1.00"),
        )
        self.assertEqual(entry.description, "REF-42")

        with self.assertRaises(InvalidInputError):
            create_entry(tenant=self.tenant, lines=two_legs(self.cash, self.sales, "1.00"))


class JournalEntryUpdateDeleteTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.cash = make_account(self.company, "531")
        self.sales = make_account(self.company, "701", account_type="produit")
        self.entry = create_entry(
            tenant=self.tenant,
            description="Initiale",
            lines=two_legs(self.cash, self.sales, "50.00"),
        )

    def test_update_replaces_lines(self):
        update_entry(
            tenant=self.tenant,
            entry_id=self.entry.id,
            description="Corrigée",
            lines=two_legs(self.cash, self.sales, "75.00"),
        )

        self.entry.refresh_from_db()
        self.assertEqual(self.entry.description, "Corrigée")
        self.assertEqual(self.entry.lines.count(), 2)
        self.assertEqual(
            self.entry.lines.aggregate(d=Sum("debit"))["d"],
            Decimal("75.00"),
        )

    def test_unbalanced_update_keeps_previous_lines(self):
        with self.assertRaises(UnbalancedEntryError):
            update_entry(
                tenant=self.tenant,
                entry_id=self.entry.id,
                lines=[
                    {"account_id": self.cash.pk, "debit": "75.00", "credit": 0},
                    {"account_id": self.sales.pk, "debit": 0, "credit": "70.00"},
                ],
            )

        self.assertEqual(
            self.entry.lines.aggregate(d=Sum("debit"))["d"],
            Decimal("50.00"),
        )

    def test_update_from_other_tenant_is_not_found(self):
        other_tenant = make_tenant(make_company(name="Other"))
        with self.assertRaises(NotFoundError):
            update_entry(
                tenant=other_tenant,
                entry_id=self.entry.id,
                lines=two_legs(self.cash, self.sales, "1.00"),
            )

    def test_delete_removes_entry_and_lines(self):
        delete_entry(tenant=self.tenant, entry_id=self.entry.id)
        self.assertFalse(JournalEntry.objects.filter(id=self.entry.id).exists())
        self.assertEqual(JournalLine.objects.count(), 0)


class JournalIntegrityScanTests(TestCase):
    """
    Database-level scan: rows written behind the engine's back are detected.
    """

    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.cash = make_account(self.company, "531")
        self.sales = make_account(self.company, "701", account_type="produit")

    def test_clean_journal_has_no_findings(self):
        create_entry(tenant=self.tenant, description="OK", lines=two_legs(self.cash, self.sales, "10.00"))
        self.assertEqual(find_unbalanced_entries(company_id=self.company.id), [])

    def test_tampered_entry_is_reported(self):
        entry = create_entry(
            tenant=self.tenant,
            description="Sera altérée",
            lines=two_legs(self.cash, self.sales, "10.00"),
        )
        JournalLine.objects.filter(entry=entry, debit__gt=0).update(debit=Decimal("11.00"))

        problems = find_unbalanced_entries()
        self.assertEqual(len(problems), 1)
        self.assertEqual(problems[0]["entry_id"], entry.id)
        self.assertEqual(problems[0]["total_debit"], Decimal("11.00"))
        self.assertEqual(problems[0]["total_credit"], Decimal("10.00"))

    def test_command_strict_exits_non_zero(self):
        entry = create_entry(
            tenant=self.tenant,
            description="Sera altérée",
            lines=two_legs(self.cash, self.sales, "10.00"),
        )
        JournalLine.objects.filter(entry=entry, credit__gt=0).delete()

        out, err = StringIO(), StringIO()
        with self.assertRaises(SystemExit):
            call_command("validate_journal_integrity", "--strict", stdout=out, stderr=err)
        self.assertIn("Unbalanced journal entries: 1", err.getvalue())

    def test_command_ok(self):
        create_entry(tenant=self.tenant, description="OK", lines=two_legs(self.cash, self.sales, "10.00"))
        out = StringIO()
        call_command("validate_journal_integrity", "--company", str(self.company.id), stdout=out)
        self.assertIn("[OK]", out.getvalue())
