# documents/admin.py

from django.contrib import admin

from documents.models import Document, DocumentLine


class DocumentLineInline(admin.TabularInline):
    model = DocumentLine
    extra = 0
    can_delete = False
    readonly_fields = (
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

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    """
    Read-only: numbers, totals and statuses are owned by documents.services.
    """

    list_display = (
        "document_number",
        "kind",
        "status",
        "company",
        "client",
        "supplier",
        "issue_date",
        "total",
        "remaining_amount",
    )
    list_filter = ("kind", "status", "company")
    search_fields = ("document_number", "reference", "client__name", "supplier__name")
    date_hierarchy = "issue_date"
    inlines = [DocumentLineInline]

    fieldsets = (
        ("Identity", {"fields": ("company", "kind", "document_number", "status")}),
        ("Parties & Dates", {"fields": ("client", "supplier", "issue_date", "due_date", "currency")}),
        (
            "Totals",
            {
                "fields": (
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
                )
            },
        ),
        ("Lineage", {"fields": ("source_document", "reference", "template", "notes")}),
        ("System Fields", {"fields": ("created_by", "created_at", "updated_at")}),
    )

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in Document._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
