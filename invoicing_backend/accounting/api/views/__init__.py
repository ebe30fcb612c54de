# accounting/api/views/__init__.py

"""
accounting.api.views package

Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import (
    AccountAdjustBalanceView,
    AccountBalanceView,
    AccountListCreateView,
)
from accounting.api.views.expenses import AccountLoadListCreateView, ExpenseListCreateView
from accounting.api.views.journal_entries import (
    JournalEntryDetailView,
    JournalEntryListCreateView,
)

__all__ = [
    "AccountListCreateView",
    "AccountBalanceView",
    "AccountAdjustBalanceView",
    "JournalEntryListCreateView",
    "JournalEntryDetailView",
    "ExpenseListCreateView",
    "AccountLoadListCreateView",
]
