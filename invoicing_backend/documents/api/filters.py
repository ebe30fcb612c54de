# documents/api/filters.py

import django_filters

from documents.document_types import DocumentKind, DocumentStatus
from documents.models import Document


class DocumentFilter(django_filters.FilterSet):
    kind = django_filters.MultipleChoiceFilter(choices=DocumentKind.choices)
    status = django_filters.MultipleChoiceFilter(choices=DocumentStatus.choices)
    issued_from = django_filters.DateFilter(field_name="issue_date", lookup_expr="gte")
    issued_to = django_filters.DateFilter(field_name="issue_date", lookup_expr="lte")
    number = django_filters.CharFilter(field_name="document_number", lookup_expr="icontains")

    class Meta:
        model = Document
        fields = ["kind", "status", "client", "supplier", "currency"]
