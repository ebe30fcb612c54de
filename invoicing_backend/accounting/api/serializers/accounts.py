# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for listing accounts of the current company.
    """

    class Meta:
        model = Account
        fields = ("id", "code", "name", "account_type", "is_active", "is_system")
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    account_type = serializers.ChoiceField(choices=Account.ACCOUNT_TYPES)


class AccountBalanceSerializer(serializers.Serializer):
    """
    Derived balance row (debit - credit). Never stored.
    """

    account_id = serializers.IntegerField()
    code = serializers.CharField()
    name = serializers.CharField()
    account_type = serializers.CharField()
    is_active = serializers.BooleanField()
    debit_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    credit_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2)


class BalanceRangeQuerySerializer(serializers.Serializer):
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and start > end:
            raise serializers.ValidationError("start must be on or before end")
        return attrs


class AdjustBalanceSerializer(serializers.Serializer):
    desired_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    counterpart_account_id = serializers.IntegerField(required=False, allow_null=True)
    entry_date = serializers.DateField(required=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")
