# documents/tests/test_documents_api.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from companies.tests.helpers import make_client, make_company, make_user
from documents.models import Document
from documents.tests.helpers import fodec_line, plain_line


class DocumentsApiTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.user = make_user(company=self.company)
        self.client_obj = make_client(self.company)
        self.api = APIClient()
        self.api.force_authenticate(user=self.user)

    def _create_invoice(self, **overrides):
        payload = {
            "kind": "facture",
            "client_id": self.client_obj.pk,
            "due_date": str(timezone.localdate() + timedelta(days=30)),
            "stamp_included": True,
            "stamp_amount": "1.00",
            "lines": [fodec_line(), plain_line()],
        }
        payload.update(overrides)
        return self.api.post("/api/documents/", payload, format="json")

    def test_anonymous_denied(self):
        res = APIClient().get("/api/documents/")
        self.assertIn(res.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_create_and_fetch(self):
        res = self._create_invoice()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(Decimal(res.data["total"]), Decimal("410.88"))
        self.assertEqual(len(res.data["lines"]), 2)

        res = self.api.get(f"/api/documents/{res.data['id']}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["kind"], "facture")

    def test_list_filters_by_kind(self):
        self._create_invoice()
        self.api.post(
            "/api/documents/",
            {"kind": "devis", "client_id": self.client_obj.pk, "lines": [plain_line()]},
            format="json",
        )

        res = self.api.get("/api/documents/", {"kind": "devis"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["kind"], "devis")

    def test_missing_client_is_400(self):
        res = self._create_invoice(client_id=None)
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Document.objects.count(), 0)

    def test_patch_draft(self):
        doc_id = self._create_invoice().data["id"]
        res = self.api.patch(f"/api/documents/{doc_id}/", {"lines": [fodec_line()]}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(Decimal(res.data["total"]), Decimal("241.38"))

    def test_convert_and_illegal_convert(self):
        doc_id = self._create_invoice().data["id"]

        res = self.api.post(f"/api/documents/{doc_id}/convert/", {"target_kind": "devis"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        res = self.api.post(
            f"/api/documents/{doc_id}/convert/",
            {"target_kind": "facture_avoir"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(Decimal(res.data["total"]), Decimal("-409.88"))
        self.assertEqual(str(res.data["source_document"]), doc_id)

    def test_status_change(self):
        doc_id = self._create_invoice().data["id"]

        res = self.api.post(f"/api/documents/{doc_id}/status/", {"status": "validated"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], "validated")

        res = self.api.post(f"/api/documents/{doc_id}/status/", {"status": "paid"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_company_document_is_404(self):
        doc_id = self._create_invoice().data["id"]

        stranger = make_user(company=make_company("Autre SA"))
        api = APIClient()
        api.force_authenticate(user=stranger)

        res = api.get(f"/api/documents/{doc_id}/")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_document_types(self):
        res = self.api.get("/api/documents/types/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 9)
