import decimal
import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

KIND_CHOICES = [
    ("devis", "Devis"),
    ("bon_commande", "Bon de commande"),
    ("bon_livraison", "Bon de livraison"),
    ("facture", "Facture"),
    ("facture_avoir", "Facture d'avoir"),
    ("bon_commande_achat", "Commande fournisseur"),
    ("bon_livraison_achat", "Bon de réception"),
    ("facture_achat", "Facture d'achat"),
    ("avoir_achat", "Avoir fournisseur"),
]

STATUS_CHOICES = [
    ("draft", "Brouillon"),
    ("sent", "Envoyé"),
    ("accepted", "Accepté"),
    ("rejected", "Refusé"),
    ("expired", "Expiré"),
    ("confirmed", "Confirmé"),
    ("delivered", "Livré"),
    ("validated", "Validée"),
    ("partial", "Paiement partiel"),
    ("paid", "Payée"),
    ("overdue", "Échue"),
    ("cancelled", "Annulée"),
]


def money():
    return models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=14)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("companies", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Document",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("kind", models.CharField(choices=KIND_CHOICES, max_length=32)),
                ("document_number", models.CharField(max_length=64)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="draft", max_length=20)),
                ("issue_date", models.DateField(default=django.utils.timezone.localdate)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("currency", models.CharField(default="TND", max_length=3)),
                (
                    "discount_type",
                    models.CharField(
                        blank=True,
                        choices=[("percent", "Percent"), ("fixed", "Fixed")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("discount_value", money()),
                ("stamp_included", models.BooleanField(default=False)),
                ("stamp_amount", money()),
                ("subtotal", money()),
                ("total_fodec", money()),
                ("base_tva", money()),
                ("tax_amount", money()),
                ("discount_amount", money()),
                ("stamp", money()),
                ("total", money()),
                ("total_paid", money()),
                ("remaining_amount", money()),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Human-readable number of the document this one was converted from.",
                        max_length=64,
                    ),
                ),
                ("template", models.CharField(blank=True, default="", max_length=50)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="companies.company",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="companies.client",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="companies.supplier",
                    ),
                ),
                (
                    "source_document",
                    models.ForeignKey(
                        blank=True,
                        help_text="Origin of a credit note (set only for credit-note conversions).",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="credit_notes",
                        to="documents.document",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="documents_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-issue_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["company", "kind", "status"], name="document_company_kind_idx"),
                    models.Index(fields=["company", "issue_date"], name="document_company_date_idx"),
                    models.Index(fields=["due_date"], name="document_due_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("company", "kind", "document_number"),
                        name="uniq_document_company_kind_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("client__isnull", True), ("supplier__isnull", True), _connector="OR"),
                        name="chk_document_single_party",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_paid__gte", 0), ("remaining_amount__gte", 0)),
                        name="chk_document_payment_fields_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField(default=0)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("product_reference", models.CharField(blank=True, default="", max_length=64)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("unit_price", models.DecimalField(decimal_places=3, max_digits=14)),
                ("vat_rate", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=5)),
                ("fodec_applicable", models.BooleanField(default=False)),
                ("fodec_rate", models.DecimalField(decimal_places=4, default=decimal.Decimal("0.0000"), max_digits=6)),
                ("ht", money()),
                ("fodec_amount", money()),
                ("vat_amount", money()),
                ("total", money()),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="documents.document",
                    ),
                ),
            ],
            options={
                "ordering": ["document", "position", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="chk_document_line_quantity_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("vat_rate__gte", 0)),
                        name="chk_document_line_vat_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("fodec_rate__gte", 0), ("fodec_rate__lte", 1)),
                        name="chk_document_line_fodec_rate_range",
                    ),
                ],
            },
        ),
    ]
