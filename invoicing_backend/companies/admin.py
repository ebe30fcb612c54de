# companies/admin.py

from django.contrib import admin

from companies.models import Client, Company, CompanyMembership, DocumentSequence, Supplier

# ============================================================
# COMPANY
# ============================================================


class CompanyMembershipInline(admin.TabularInline):
    model = CompanyMembership
    extra = 0
    autocomplete_fields = ("user",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "tax_id", "default_currency", "is_active", "created_at")
    list_filter = ("is_active", "default_currency")
    search_fields = ("name", "code", "tax_id")
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [CompanyMembershipInline]

    fieldsets = (
        ("Identity", {"fields": ("id", "name", "code", "tax_id", "address", "phone")}),
        (
            "Invoicing",
            {
                "fields": (
                    "default_currency",
                    "document_number_format",
                    "document_number_padding",
                    "default_stamp_amount",
                )
            },
        ),
        ("Status", {"fields": ("is_active", "created_at", "updated_at")}),
    )


# ============================================================
# COUNTERPARTIES
# ============================================================


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "email", "phone", "is_active")
    list_filter = ("is_active", "company")
    search_fields = ("name", "email", "tax_id")


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "company", "email", "phone", "is_active")
    list_filter = ("is_active", "company")
    search_fields = ("name", "email", "tax_id")


# ============================================================
# NUMBERING (READ-ONLY)
# ============================================================


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("company", "kind", "period_year", "next_value", "updated_at")
    list_filter = ("kind", "period_year")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
