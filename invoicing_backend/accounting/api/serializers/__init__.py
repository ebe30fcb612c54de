# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import (
    AccountBalanceSerializer,
    AccountCreateSerializer,
    AccountListSerializer,
    AdjustBalanceSerializer,
    BalanceRangeQuerySerializer,
)
from accounting.api.serializers.expenses import (
    AccountLoadCreateSerializer,
    AccountLoadSerializer,
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.api.serializers.journal_entries import (
    JournalEntrySerializer,
    JournalEntryWriteSerializer,
)

__all__ = [
    "AccountListSerializer",
    "AccountCreateSerializer",
    "AccountBalanceSerializer",
    "BalanceRangeQuerySerializer",
    "AdjustBalanceSerializer",
    "JournalEntrySerializer",
    "JournalEntryWriteSerializer",
    "ExpenseSerializer",
    "ExpenseCreateSerializer",
    "AccountLoadSerializer",
    "AccountLoadCreateSerializer",
]
