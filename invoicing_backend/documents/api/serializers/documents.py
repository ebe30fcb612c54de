# documents/api/serializers/documents.py

from rest_framework import serializers

from documents.document_types import DocumentKind, DocumentStatus
from documents.models import Document, DocumentLine
from documents.services.tax import DISCOUNT_TYPES

# ============================================================
# OUTPUT
# ============================================================


class DocumentLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentLine
        fields = (
            "id",
            "position",
            "description",
            "product_reference",
            "quantity",
            "unit_price",
            "vat_rate",
            "fodec_applicable",
            "fodec_rate",
            "ht",
            "fodec_amount",
            "vat_amount",
            "total",
        )
        read_only_fields = fields


class DocumentListSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)

    class Meta:
        model = Document
        fields = (
            "id",
            "kind",
            "document_number",
            "status",
            "client",
            "client_name",
            "supplier",
            "supplier_name",
            "issue_date",
            "due_date",
            "currency",
            "total",
            "total_paid",
            "remaining_amount",
            "reference",
        )
        read_only_fields = fields


class DocumentSerializer(serializers.ModelSerializer):
    lines = DocumentLineSerializer(many=True, read_only=True)

    class Meta:
        model = Document
        fields = (
            "id",
            "kind",
            "document_number",
            "status",
            "client",
            "supplier",
            "issue_date",
            "due_date",
            "currency",
            "discount_type",
            "discount_value",
            "stamp_included",
            "stamp_amount",
            "subtotal",
            "total_fodec",
            "base_tva",
            "tax_amount",
            "discount_amount",
            "stamp",
            "total",
            "total_paid",
            "remaining_amount",
            "source_document",
            "reference",
            "template",
            "notes",
            "created_at",
            "updated_at",
            "lines",
        )
        read_only_fields = fields


# ============================================================
# INPUT (Swagger-visible; business rules live in the services)
# ============================================================


class DocumentLineInputSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, default="")
    product_reference = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=3)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, default=0)
    fodec_applicable = serializers.BooleanField(required=False, default=False)
    fodec_rate = serializers.DecimalField(max_digits=6, decimal_places=4, required=False, default=0)


class DiscountInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=DISCOUNT_TYPES)
    value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class DocumentCreateSerializer(serializers.Serializer):
    # Legacy kinds are accepted and mapped by the registry.
    kind = serializers.CharField(max_length=32)
    client_id = serializers.IntegerField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    issue_date = serializers.DateField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    discount = DiscountInputSerializer(required=False, allow_null=True)
    stamp_included = serializers.BooleanField(required=False, default=False)
    stamp_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    status = serializers.ChoiceField(choices=DocumentStatus.choices, required=False)
    template = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    lines = DocumentLineInputSerializer(many=True)


class DocumentUpdateSerializer(serializers.Serializer):
    """
    PATCH body: every field optional; lines replace the stored lines.
    """

    client_id = serializers.IntegerField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    issue_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    discount = DiscountInputSerializer(required=False, allow_null=True)
    stamp_included = serializers.BooleanField(required=False)
    stamp_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    template = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    lines = DocumentLineInputSerializer(many=True, required=False)


class DocumentConvertSerializer(serializers.Serializer):
    target_kind = serializers.ChoiceField(choices=DocumentKind.choices)


class DocumentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DocumentStatus.choices)
