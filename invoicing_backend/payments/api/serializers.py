# payments/api/serializers.py

from rest_framework import serializers

from payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    invoice_number = serializers.CharField(
        source="invoice.document_number", read_only=True, default=None
    )

    class Meta:
        model = Payment
        fields = (
            "id",
            "invoice",
            "invoice_number",
            "account",
            "account_code",
            "payment_type",
            "amount",
            "payment_date",
            "payment_method",
            "reference",
            "notes",
            "attachment_reference",
            "journal_entry",
            "created_at",
        )
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    invoice_id = serializers.UUIDField(required=False, allow_null=True)
    account_id = serializers.IntegerField()
    payment_type = serializers.ChoiceField(choices=Payment.TYPE_CHOICES, required=False)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default=Payment.METHOD_CASH)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    attachment_reference = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentUpdateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField(required=False)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    payment_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    reference = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    attachment_reference = serializers.CharField(required=False, allow_blank=True)
