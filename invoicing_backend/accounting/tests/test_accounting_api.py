# accounting/tests/test_accounting_api.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.journal import JournalEntry
from accounting.tests.helpers import make_account
from companies.tests.helpers import make_company, make_user


class AccountingApiTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.user = make_user(company=self.company)
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.cash = make_account(self.company, "531", "Caisse")
        self.sales = make_account(self.company, "701", "Ventes", account_type="produit")

    def _entry_payload(self, debit="100.00", credit="100.00"):
        return {
            "reference": "API-1",
            "description": "Saisie API",
            "lines": [
                {"account_id": self.cash.pk, "debit": debit, "credit": "0"},
                {"account_id": self.sales.pk, "debit": "0", "credit": credit},
            ],
        }

    def test_anonymous_denied(self):
        res = APIClient().get("/api/accounting/accounts/")
        self.assertIn(res.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_create_entry_and_list_balances(self):
        res = self.client.post("/api/accounting/journal-entries/", self._entry_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(len(res.data["lines"]), 2)

        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        balances = {row["code"]: Decimal(str(row["balance"])) for row in res.data}
        self.assertEqual(balances["531"], Decimal("100.00"))
        self.assertEqual(balances["701"], Decimal("-100.00"))

    def test_unbalanced_entry_is_400(self):
        res = self.client.post(
            "/api/accounting/journal-entries/",
            self._entry_payload(credit="90.00"),
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(JournalEntry.objects.count(), 0)

    def test_update_and_delete_entry(self):
        res = self.client.post("/api/accounting/journal-entries/", self._entry_payload(), format="json")
        entry_id = res.data["id"]

        res = self.client.put(
            f"/api/accounting/journal-entries/{entry_id}/",
            self._entry_payload(debit="40.00", credit="40.00"),
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)

        res = self.client.get(f"/api/accounting/accounts/{self.cash.pk}/balance/")
        self.assertEqual(Decimal(res.data["balance"]), Decimal("40.00"))

        res = self.client.delete(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)

        res = self.client.delete(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_adjust_balance_endpoint(self):
        url = f"/api/accounting/accounts/{self.cash.pk}/adjust-balance/"

        res = self.client.post(url, {"desired_balance": "300.00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(Decimal(res.data["delta"]), Decimal("300.00"))

        res = self.client.post(url, {"desired_balance": "300.00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIsNone(res.data["entry"])

    def test_foreign_account_balance_is_404(self):
        foreign = make_account(make_company(name="Other"), "531")
        res = self.client.get(f"/api/accounting/accounts/{foreign.pk}/balance/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
