# payments/admin.py

from django.contrib import admin

from payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Read-only: payments are recorded through payments.services so the
    journal entry and invoice status stay in step.
    """

    list_display = (
        "payment_date",
        "payment_type",
        "amount",
        "payment_method",
        "invoice",
        "account",
        "company",
    )
    list_filter = ("payment_type", "payment_method", "company")
    search_fields = ("reference", "notes", "invoice__document_number")
    date_hierarchy = "payment_date"

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in Payment._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
