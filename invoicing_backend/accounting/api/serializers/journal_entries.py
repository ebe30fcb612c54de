# accounting/api/serializers/journal_entries.py

from rest_framework import serializers

from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine


class JournalLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = ("id", "account", "account_code", "account_name", "debit", "credit", "position")
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)

    class Meta:
        model = JournalEntry
        fields = ("id", "entry_date", "reference", "description", "created_at", "updated_at", "lines")
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)


class JournalEntryWriteSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible). Balance rules are enforced by the
    journal engine, not here.
    """

    entry_date = serializers.DateField(required=False)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    lines = JournalLineInputSerializer(many=True)
