# accounting/admin.py

from django.contrib import admin

from accounting.models import Account, AccountLoad, Expense, JournalEntry, JournalLine

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "company",
        "is_system",
        "is_active",
    )
    list_filter = ("account_type", "is_active", "is_system", "company")
    search_fields = ("code", "name")
    ordering = ("company", "code")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("company", "code", "name", "account_type"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active", "is_system"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# JOURNAL (READ-ONLY: writes go through journal_entry_service)
# ============================================================


class JournalLineInline(admin.TabularInline):
    model = JournalLine
    extra = 0
    can_delete = False
    readonly_fields = ("account", "debit", "credit", "position")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "entry_date",
        "reference",
        "description",
        "company",
        "created_at",
    )
    list_filter = ("company", "entry_date")
    search_fields = ("reference", "description")
    readonly_fields = (
        "company",
        "entry_date",
        "reference",
        "description",
        "created_by",
        "created_at",
        "updated_at",
    )
    inlines = [JournalLineInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# EXPENSES / ACCOUNT LOADS
# ============================================================


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("id", "expense_date", "amount", "expense_account", "payment_account", "company")
    list_filter = ("company", "expense_date")
    search_fields = ("vendor", "narration")
    readonly_fields = ("journal_entry", "created_at")


@admin.register(AccountLoad)
class AccountLoadAdmin(admin.ModelAdmin):
    list_display = ("id", "load_date", "amount", "account", "source_account", "company")
    list_filter = ("company", "load_date")
    readonly_fields = ("journal_entry", "created_at")
