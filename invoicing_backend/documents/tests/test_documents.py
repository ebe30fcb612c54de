# documents/tests/test_documents.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from accounting.services.exceptions import InvalidInputError, NotFoundError
from companies.tests.helpers import make_client, make_company, make_supplier, make_tenant
from documents.document_types import DocumentStatus
from documents.models import Document, DocumentLine
from documents.services.document_lifecycle import can_transition, is_editable
from documents.services.document_service import (
    change_document_status,
    create_document,
    derive_totals,
    get_document,
    recompute_document_totals,
    update_document,
)
from documents.tests.helpers import fodec_line, make_invoice, plain_line


class CreateDocumentTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.year = timezone.localdate().year

    def test_invoice_totals_and_number(self):
        doc = make_invoice(self.tenant, self.client_obj, stamp_included=True, stamp_amount="1")

        self.assertEqual(doc.document_number, f"FAC-{self.year}-0001")
        self.assertEqual(doc.status, DocumentStatus.DRAFT)
        self.assertEqual(doc.subtotal, Decimal("350.00"))
        self.assertEqual(doc.total_fodec, Decimal("2.00"))
        self.assertEqual(doc.base_tva, Decimal("352.00"))
        self.assertEqual(doc.tax_amount, Decimal("57.88"))
        self.assertEqual(doc.stamp, Decimal("1.00"))
        self.assertEqual(doc.total, Decimal("410.88"))
        self.assertEqual(doc.remaining_amount, Decimal("410.88"))
        self.assertEqual(doc.lines.count(), 2)

        second = make_invoice(self.tenant, self.client_obj)
        self.assertEqual(second.document_number, f"FAC-{self.year}-0002")

    def test_stored_lines_satisfy_round_trip(self):
        doc = make_invoice(self.tenant, self.client_obj, discount={"type": "percent", "value": "5"})

        for line in doc.lines.all():
            self.assertEqual(line.total, line.ht + line.fodec_amount + line.vat_amount)

        _lines, (_outputs, totals) = derive_totals(Document.objects.get(pk=doc.pk))
        self.assertEqual(totals.total, doc.total)
        self.assertEqual(totals.discount_amount, doc.discount_amount)

    def test_yearless_company_format_survives_new_year(self):
        self.company.document_number_format = "{prefix}-{number}"
        self.company.save()

        def quote(day):
            return create_document(
                tenant=self.tenant,
                kind="devis",
                client_id=self.client_obj.pk,
                issue_date=day,
                lines=[plain_line()],
            )

        first = quote(date(2025, 12, 31))
        second = quote(date(2026, 1, 2))
        self.assertEqual(first.document_number, "DEV-0001")
        self.assertEqual(second.document_number, "DEV-0002")

    def test_company_stamp_used_by_default(self):
        self.company.default_stamp_amount = Decimal("0.60")
        self.company.save()

        doc = make_invoice(self.tenant, self.client_obj, stamp_included=True)
        self.assertEqual(doc.stamp, Decimal("0.60"))

    def test_sales_kind_requires_client(self):
        supplier = make_supplier(self.company)
        with self.assertRaises(InvalidInputError):
            create_document(tenant=self.tenant, kind="devis", lines=[plain_line()])
        with self.assertRaises(InvalidInputError):
            create_document(
                tenant=self.tenant,
                kind="devis",
                client_id=self.client_obj.pk,
                supplier_id=supplier.pk,
                lines=[plain_line()],
            )

    def test_purchase_kind_requires_supplier(self):
        supplier = make_supplier(self.company)
        doc = create_document(
            tenant=self.tenant,
            kind="bon_commande_achat",
            supplier_id=supplier.pk,
            lines=[plain_line()],
        )
        self.assertEqual(doc.document_number, f"BC-A-{self.year}-0001")
        self.assertIsNone(doc.client_id)

        with self.assertRaises(InvalidInputError):
            create_document(
                tenant=self.tenant,
                kind="bon_commande_achat",
                client_id=self.client_obj.pk,
                lines=[plain_line()],
            )

    def test_invoice_requires_due_date(self):
        with self.assertRaises(InvalidInputError):
            create_document(
                tenant=self.tenant,
                kind="facture",
                client_id=self.client_obj.pk,
                lines=[plain_line()],
            )

    def test_legacy_kind_is_created_as_invoice(self):
        doc = make_invoice(self.tenant, self.client_obj)
        legacy = create_document(
            tenant=self.tenant,
            kind="facture_payee",
            client_id=self.client_obj.pk,
            due_date=doc.due_date,
            lines=[plain_line()],
        )
        self.assertEqual(legacy.kind, "facture")
        self.assertEqual(legacy.document_number, f"FAC-{self.year}-0002")

    def test_foreign_client_is_not_found(self):
        other_client = make_client(make_company("Autre SA"))
        with self.assertRaises(NotFoundError):
            make_invoice(self.tenant, other_client)

    def test_empty_lines_rejected_without_burning_a_number(self):
        with self.assertRaises(InvalidInputError):
            make_invoice(self.tenant, self.client_obj, lines=[])
        doc = make_invoice(self.tenant, self.client_obj)
        self.assertEqual(doc.document_number, f"FAC-{self.year}-0001")

    def test_payment_managed_status_rejected_on_creation(self):
        with self.assertRaises(InvalidInputError):
            make_invoice(self.tenant, self.client_obj, status="paid")

    def test_documents_are_tenant_scoped(self):
        doc = make_invoice(self.tenant, self.client_obj)
        other = make_tenant(make_company("Autre SA"))
        with self.assertRaises(NotFoundError):
            get_document(tenant=other, document_id=doc.pk)


class UpdateDocumentTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.doc = make_invoice(self.tenant, self.client_obj)

    def test_replacing_lines_recomputes_totals(self):
        doc = update_document(
            tenant=self.tenant,
            document_id=self.doc.pk,
            lines=[fodec_line()],
        )
        self.assertEqual(doc.lines.count(), 1)
        self.assertEqual(doc.total, Decimal("240.38"))

        stored = Document.objects.get(pk=self.doc.pk)
        self.assertEqual(stored.total, Decimal("240.38"))

    def test_header_change_recomputes_totals(self):
        doc = update_document(
            tenant=self.tenant,
            document_id=self.doc.pk,
            discount={"type": "fixed", "value": "52"},
            stamp_included=True,
            stamp_amount="1",
        )
        self.assertEqual(doc.discount_amount, Decimal("52.00"))
        self.assertEqual(Document.objects.get(pk=self.doc.pk).total, Decimal("358.88"))

    def test_only_drafts_are_editable(self):
        change_document_status(tenant=self.tenant, document_id=self.doc.pk, status="validated")
        with self.assertRaises(InvalidInputError):
            update_document(tenant=self.tenant, document_id=self.doc.pk, notes="late edit")

    def test_due_date_cannot_precede_issue_date(self):
        with self.assertRaises(InvalidInputError):
            update_document(
                tenant=self.tenant,
                document_id=self.doc.pk,
                due_date=self.doc.issue_date - timedelta(days=1),
            )


class DocumentStatusTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)
        self.doc = make_invoice(self.tenant, self.client_obj)

    def _set(self, status):
        return change_document_status(tenant=self.tenant, document_id=self.doc.pk, status=status)

    def test_status_outside_kind_options_rejected(self):
        with self.assertRaises(InvalidInputError):
            self._set("accepted")
        with self.assertRaises(InvalidInputError):
            self._set("nonsense")

    def test_payment_managed_statuses_cannot_be_set_by_hand(self):
        with self.assertRaises(InvalidInputError):
            self._set("paid")
        with self.assertRaises(InvalidInputError):
            self._set("partial")

    def test_no_return_to_draft(self):
        self._set("validated")
        with self.assertRaises(InvalidInputError):
            self._set("draft")

    def test_cancelled_is_terminal_and_record_kept(self):
        doc = self._set("cancelled")
        self.assertEqual(doc.status, DocumentStatus.CANCELLED)
        with self.assertRaises(InvalidInputError):
            self._set("validated")
        self.assertTrue(Document.objects.filter(pk=self.doc.pk).exists())

    def test_quote_lifecycle(self):
        quote = create_document(
            tenant=self.tenant,
            kind="devis",
            client_id=self.client_obj.pk,
            lines=[plain_line()],
        )
        quote = change_document_status(tenant=self.tenant, document_id=quote.pk, status="sent")
        quote = change_document_status(tenant=self.tenant, document_id=quote.pk, status="accepted")
        self.assertEqual(quote.status, DocumentStatus.ACCEPTED)


class RecomputeTotalsTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.tenant = make_tenant(self.company)
        self.client_obj = make_client(self.company)

    def test_stale_snapshot_is_rederived_from_lines(self):
        doc = make_invoice(self.tenant, self.client_obj, stamp_included=True, stamp_amount="1")
        Document.objects.filter(pk=doc.pk).update(total=Decimal("1.00"), tax_amount=Decimal("0.00"))
        DocumentLine.objects.filter(document=doc).update(total=Decimal("0.00"))

        stale = Document.objects.get(pk=doc.pk)
        recompute_document_totals(stale)

        fresh = Document.objects.get(pk=doc.pk)
        self.assertEqual(fresh.tax_amount, Decimal("57.88"))
        self.assertEqual(fresh.total, Decimal("410.88"))
        self.assertEqual(fresh.remaining_amount, Decimal("410.88"))
        for line in fresh.lines.all():
            self.assertEqual(line.total, line.ht + line.fodec_amount + line.vat_amount)


class TransitionRuleTests(SimpleTestCase):
    def test_allowed_moves(self):
        self.assertTrue(can_transition(kind="facture", from_status="draft", to_status="validated"))
        self.assertTrue(can_transition(kind="devis", from_status="sent", to_status="accepted"))
        self.assertTrue(can_transition(kind="bon_commande", from_status="draft", to_status="confirmed"))

    def test_refused_moves(self):
        self.assertFalse(can_transition(kind="facture", from_status="cancelled", to_status="validated"))
        self.assertFalse(can_transition(kind="facture", from_status="validated", to_status="draft"))
        self.assertFalse(can_transition(kind="facture", from_status="validated", to_status="paid"))
        self.assertFalse(can_transition(kind="facture", from_status="draft", to_status="draft"))
        self.assertFalse(can_transition(kind="devis", from_status="draft", to_status="paid"))
        self.assertFalse(can_transition(kind="facture", from_status="paid", to_status="validated"))
        self.assertFalse(can_transition(kind="facture", from_status="partial", to_status="overdue"))

    def test_only_drafts_are_editable(self):
        self.assertTrue(is_editable("draft"))
        self.assertFalse(is_editable("validated"))
        self.assertFalse(is_editable("cancelled"))
