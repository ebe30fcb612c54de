# accounting/api/serializers/expenses.py

from rest_framework import serializers

from accounting.models.expense import AccountLoad, Expense


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - clean, stable contract.
    """

    expense_account_code = serializers.CharField(
        source="expense_account.code", read_only=True
    )
    payment_account_code = serializers.CharField(
        source="payment_account.code", read_only=True
    )

    class Meta:
        model = Expense
        fields = [
            "id",
            "expense_date",
            "amount",
            "vendor",
            "narration",
            "attachment_reference",
            "journal_entry",
            "created_at",
            "expense_account",
            "expense_account_code",
            "payment_account",
            "payment_account_code",
        ]
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    expense_date = serializers.DateField(required=False)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    expense_account_id = serializers.IntegerField()
    payment_account_id = serializers.IntegerField()

    vendor = serializers.CharField(required=False, allow_blank=True, default="")
    narration = serializers.CharField(required=False, allow_blank=True, default="")
    attachment_reference = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value


class AccountLoadSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccountLoad
        fields = [
            "id",
            "load_date",
            "amount",
            "account",
            "source_account",
            "description",
            "attachment_reference",
            "journal_entry",
            "created_at",
        ]
        read_only_fields = fields


class AccountLoadCreateSerializer(serializers.Serializer):
    load_date = serializers.DateField(required=False)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    account_id = serializers.IntegerField()
    source_account_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    attachment_reference = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value
