# documents/tests/test_conversion.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from accounting.services.exceptions import (
    ConversionNotAllowedError,
    InvalidInputError,
    NotFoundError,
)
from companies.tests.helpers import make_client, make_company, make_supplier, make_tenant
from documents.document_types import DocumentKind, DocumentStatus, all_document_types
from documents.models import Document
from documents.services.conversion_service import convert_document
from documents.services.document_service import create_document
from documents.tests.helpers import fodec_line, make_invoice, plain_line


class ConversionGraphTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.quote = create_document(
            tenant=self.tenant,
            kind="devis",
            client_id=self.client_obj.pk,
            lines=[plain_line()],
        )

    def test_every_illegal_target_is_rejected(self):
        illegal = [c.kind for c in all_document_types() if c.kind != DocumentKind.BON_COMMANDE]
        for kind in illegal:
            with self.assertRaises(ConversionNotAllowedError, msg=kind):
                convert_document(tenant=self.tenant, source_document_id=self.quote.pk, target_kind=kind)

        self.assertEqual(Document.objects.count(), 1)

    def test_legal_target_produces_exactly_that_kind(self):
        order = convert_document(
            tenant=self.tenant,
            source_document_id=self.quote.pk,
            target_kind="bon_commande",
        )
        self.assertEqual(order.kind, DocumentKind.BON_COMMANDE)
        self.assertEqual(order.status, DocumentStatus.DRAFT)
        self.assertEqual(order.reference, self.quote.document_number)
        self.assertIsNone(order.source_document_id)
        self.assertEqual(order.client_id, self.client_obj.pk)
        self.assertEqual(order.lines.count(), 1)

    def test_unknown_target_kind(self):
        with self.assertRaises(InvalidInputError):
            convert_document(tenant=self.tenant, source_document_id=self.quote.pk, target_kind="ticket")

    def test_missing_or_foreign_source(self):
        other = make_tenant(make_company("Autre SA"))
        with self.assertRaises(NotFoundError):
            convert_document(tenant=other, source_document_id=self.quote.pk, target_kind="bon_commande")

    def test_full_sales_chain(self):
        order = convert_document(tenant=self.tenant, source_document_id=self.quote.pk, target_kind="bon_commande")
        delivery = convert_document(tenant=self.tenant, source_document_id=order.pk, target_kind="bon_livraison")
        invoice = convert_document(tenant=self.tenant, source_document_id=delivery.pk, target_kind="facture")

        self.assertEqual(invoice.kind, DocumentKind.FACTURE)
        self.assertEqual(invoice.total, self.quote.total)
        self.assertEqual(invoice.reference, delivery.document_number)
        self.assertEqual(Document.objects.get(pk=self.quote.pk).kind, DocumentKind.DEVIS)


class ForwardConversionTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)

    def test_totals_are_recomputed_not_copied(self):
        delivery = create_document(
            tenant=self.tenant,
            kind="bon_livraison",
            client_id=self.client_obj.pk,
            lines=[fodec_line(), plain_line()],
            discount={"type": "percent", "value": "10"},
            stamp_included=True,
            stamp_amount="1",
        )
        # Simulate a stale snapshot on the source.
        Document.objects.filter(pk=delivery.pk).update(total=Decimal("1.00"))

        invoice = convert_document(tenant=self.tenant, source_document_id=delivery.pk, target_kind="facture")

        self.assertEqual(invoice.discount_amount, Decimal("35.20"))
        self.assertEqual(invoice.stamp, Decimal("1.00"))
        self.assertEqual(invoice.total, Decimal("375.68"))

    def test_issue_date_is_today_and_due_date_copied(self):
        due = timezone.localdate() + timedelta(days=10)
        order = create_document(
            tenant=self.tenant,
            kind="bon_commande",
            client_id=self.client_obj.pk,
            issue_date=timezone.localdate() - timedelta(days=20),
            due_date=due,
            currency="EUR",
            template="classic",
            lines=[plain_line()],
        )
        delivery = convert_document(tenant=self.tenant, source_document_id=order.pk, target_kind="bon_livraison")

        self.assertEqual(delivery.issue_date, timezone.localdate())
        self.assertEqual(delivery.due_date, due)
        self.assertEqual(delivery.currency, "EUR")
        self.assertEqual(delivery.template, "classic")


class CreditNoteConversionTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.year = timezone.localdate().year

    def _assert_non_positive(self, doc):
        self.assertLessEqual(doc.total, 0)
        self.assertLessEqual(doc.subtotal, 0)
        self.assertLessEqual(doc.tax_amount, 0)
        self.assertLessEqual(doc.total_fodec, 0)
        for line in doc.lines.all():
            self.assertLessEqual(line.total, 0)
            self.assertLessEqual(line.unit_price, 0)
            self.assertLessEqual(line.vat_amount, 0)
            self.assertLessEqual(line.fodec_amount, 0)
            self.assertGreaterEqual(line.quantity, 0)

    def test_credit_note_is_negative_and_linked(self):
        invoice = make_invoice(
            self.tenant,
            self.client_obj,
            stamp_included=True,
            stamp_amount="1",
            discount={"type": "percent", "value": "10"},
        )
        credit = convert_document(tenant=self.tenant, source_document_id=invoice.pk, target_kind="facture_avoir")

        self._assert_non_positive(credit)
        self.assertEqual(credit.total, Decimal("-409.88"))
        self.assertEqual(credit.stamp, Decimal("0.00"))
        self.assertFalse(credit.stamp_included)
        self.assertEqual(credit.discount_type, "")
        self.assertEqual(credit.discount_amount, Decimal("0.00"))
        self.assertEqual(credit.source_document_id, invoice.pk)
        self.assertEqual(credit.reference, invoice.document_number)
        self.assertEqual(credit.document_number, f"AV-{self.year}-0001")
        self.assertEqual(credit.remaining_amount, Decimal("0.00"))

    def test_sign_normalized_regardless_of_source_sign(self):
        invoice = make_invoice(
            self.tenant,
            self.client_obj,
            lines=[plain_line(unit_price="-50"), fodec_line()],
        )
        credit = convert_document(tenant=self.tenant, source_document_id=invoice.pk, target_kind="facture_avoir")

        self._assert_non_positive(credit)
        self.assertEqual(credit.total, Decimal("-409.88"))

    def test_purchase_credit_note(self):
        supplier = make_supplier(self.company)
        invoice = create_document(
            tenant=self.tenant,
            kind="facture_achat",
            supplier_id=supplier.pk,
            due_date=timezone.localdate(),
            lines=[fodec_line()],
        )
        credit = convert_document(tenant=self.tenant, source_document_id=invoice.pk, target_kind="avoir_achat")

        self._assert_non_positive(credit)
        self.assertEqual(credit.supplier_id, supplier.pk)
        self.assertEqual(credit.total, Decimal("-240.38"))


class ConversionAtomicityTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.invoice = make_invoice(self.tenant, self.client_obj)
        self.year = timezone.localdate().year

    def test_failure_after_numbering_rolls_everything_back(self):
        with mock.patch(
            "documents.services.document_service._write_lines",
            side_effect=RuntimeError("line insert failed"),
        ):
            with self.assertRaises(RuntimeError):
                convert_document(
                    tenant=self.tenant,
                    source_document_id=self.invoice.pk,
                    target_kind="facture_avoir",
                )

        self.assertFalse(Document.objects.filter(kind="facture_avoir").exists())

        credit = convert_document(
            tenant=self.tenant,
            source_document_id=self.invoice.pk,
            target_kind="facture_avoir",
        )
        self.assertEqual(credit.document_number, f"AV-{self.year}-0001")
