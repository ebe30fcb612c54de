# accounting/api/urls.py

from django.urls import path

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

urlpatterns = [
    # Accounts + derived balances
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path("accounts/<int:pk>/balance/", AccountBalanceView.as_view(), name="account-balance"),
    path(
        "accounts/<int:pk>/adjust-balance/",
        AccountAdjustBalanceView.as_view(),
        name="account-adjust-balance",
    ),
    # Journal
    path("journal-entries/", JournalEntryListCreateView.as_view(), name="journal-entries"),
    path("journal-entries/<int:pk>/", JournalEntryDetailView.as_view(), name="journal-entry-detail"),
    # Posting actions
    path("expenses/", ExpenseListCreateView.as_view(), name="expenses"),
    path("account-loads/", AccountLoadListCreateView.as_view(), name="account-loads"),
]
