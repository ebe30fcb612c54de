# payments/api/filters.py

import django_filters

from payments.models import Payment


class PaymentFilter(django_filters.FilterSet):
    paid_from = django_filters.DateFilter(field_name="payment_date", lookup_expr="gte")
    paid_to = django_filters.DateFilter(field_name="payment_date", lookup_expr="lte")
    unlinked = django_filters.BooleanFilter(field_name="invoice", lookup_expr="isnull")

    class Meta:
        model = Payment
        fields = ["invoice", "account", "payment_type", "payment_method"]
