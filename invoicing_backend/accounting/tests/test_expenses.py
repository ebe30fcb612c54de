# accounting/tests/test_expenses.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.expense import Expense
from accounting.services.balance_service import get_account_balance
from accounting.services.exceptions import InvalidInputError, NotFoundError
from accounting.services.expense_service import record_account_load, record_expense
from accounting.tests.helpers import make_account
from companies.tests.helpers import make_company, make_tenant


class ExpenseServiceTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.cash = make_account(self.company, "531", "Caisse")
        self.rent = make_account(self.company, "613", "Loyer", account_type=Account.CHARGE)

    def _balance(self, account):
        return get_account_balance(tenant=self.tenant, account_id=account.pk)

    def test_expense_posts_balanced_entry(self):
        expense = record_expense(
            tenant=self.tenant,
            amount="800.00",
            expense_account_id=self.rent.pk,
            payment_account_id=self.cash.pk,
            vendor="Propriétaire",
            attachment_reference="files/quittance-03.pdf",
        )

        self.assertIsNotNone(expense.journal_entry_id)
        self.assertEqual(expense.attachment_reference, "files/quittance-03.pdf")
        self.assertEqual(self._balance(self.rent), Decimal("800.00"))
        self.assertEqual(self._balance(self.cash), Decimal("-800.00"))

    def test_expense_requires_charge_account(self):
        bank = make_account(self.company, "532", "Banque")
        with self.assertRaises(InvalidInputError):
            record_expense(
                tenant=self.tenant,
                amount="10.00",
                expense_account_id=bank.pk,
                payment_account_id=self.cash.pk,
            )

    def test_non_positive_amount_rejected(self):
        with self.assertRaises(InvalidInputError):
            record_expense(
                tenant=self.tenant,
                amount="0",
                expense_account_id=self.rent.pk,
                payment_account_id=self.cash.pk,
            )
        self.assertEqual(Expense.objects.count(), 0)

    def test_foreign_account_rejected(self):
        foreign = make_account(make_company(name="Other"), "531")
        with self.assertRaises(NotFoundError):
            record_expense(
                tenant=self.tenant,
                amount="10.00",
                expense_account_id=self.rent.pk,
                payment_account_id=foreign.pk,
            )


class AccountLoadTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.cash = make_account(self.company, "531", "Caisse")

    def test_load_defaults_to_adjustment_account(self):
        load = record_account_load(tenant=self.tenant, amount="150.00", account_id=self.cash.pk)

        self.assertEqual(load.source_account.name, "Ajustements")
        self.assertEqual(get_account_balance(tenant=self.tenant, account_id=self.cash.pk), Decimal("150.00"))
        self.assertEqual(
            get_account_balance(tenant=self.tenant, account_id=load.source_account_id),
            Decimal("-150.00"),
        )

    def test_load_from_explicit_source(self):
        bank = make_account(self.company, "532", "Banque")
        record_account_load(
            tenant=self.tenant,
            amount="75.00",
            account_id=self.cash.pk,
            source_account_id=bank.pk,
        )
        self.assertEqual(get_account_balance(tenant=self.tenant, account_id=bank.pk), Decimal("-75.00"))
