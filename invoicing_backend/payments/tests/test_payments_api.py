# payments/tests/test_payments_api.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from accounting.tests.helpers import make_account
from companies.tests.helpers import make_client, make_company, make_tenant, make_user
from documents.tests.helpers import make_simple_invoice
from payments.models import Payment


class PaymentsApiTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.user = make_user(company=self.company)
        self.cash = make_account(self.company, "532", "Banque")
        self.invoice = make_simple_invoice(self.tenant, make_client(self.company), "500")

        self.api = APIClient()
        self.api.force_authenticate(user=self.user)

    def _pay(self, amount):
        return self.api.post(
            "/api/payments/",
            {
                "invoice_id": str(self.invoice.pk),
                "account_id": self.cash.pk,
                "amount": amount,
                "payment_method": "transfer",
                "reference": "VIR-001",
            },
            format="json",
        )

    def test_record_and_list(self):
        res = self._pay("200.00")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["invoice"]["status"], "partial")
        self.assertEqual(Decimal(res.data["invoice"]["remaining_amount"]), Decimal("300.00"))
        self.assertEqual(res.data["warnings"], [])

        res = self.api.get("/api/payments/", {"invoice": str(self.invoice.pk)})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["invoice_number"], self.invoice.document_number)

    def test_invalid_amount_is_400(self):
        res = self._pay("0")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Payment.objects.count(), 0)

    def test_update_and_delete(self):
        payment_id = self._pay("200.00").data["payment"]["id"]

        res = self.api.put(f"/api/payments/{payment_id}/", {"amount": "500.00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["invoice"]["status"], "paid")

        res = self.api.delete(f"/api/payments/{payment_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIsNone(res.data["payment"])
        self.assertEqual(res.data["invoice"]["status"], "validated")
        self.assertFalse(Payment.objects.exists())

    def test_unknown_payment_is_404(self):
        res = self.api.delete("/api/payments/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
