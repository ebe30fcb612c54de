# accounting/api/views/journal_entries.py

"""
JOURNAL ENTRIES API

GET    /api/accounting/journal-entries/        list (current company)
POST   /api/accounting/journal-entries/        create (balanced, >= 2 lines)
GET    /api/accounting/journal-entries/<id>/
PUT    /api/accounting/journal-entries/<id>/   replace header + lines
DELETE /api/accounting/journal-entries/<id>/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers.journal_entries import (
    JournalEntrySerializer,
    JournalEntryWriteSerializer,
)
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import CoreServiceError
from accounting.services.journal_entry_service import (
    create_entry,
    delete_entry,
    get_entry,
    update_entry,
)
from companies.api.errors import service_error_response
from companies.api.tenant import tenant_from_request


def _service_lines(validated) -> list[dict]:
    return [dict(line) for line in validated["lines"]]


class JournalEntryListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntryWriteSerializer

    @extend_schema(tags=["accounting"], responses=JournalEntrySerializer(many=True))
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        qs = (
            JournalEntry.objects.filter(company_id=tenant.company_id)
            .prefetch_related("lines__account")
            .order_by("-entry_date", "-created_at")
        )
        return Response(JournalEntrySerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=JournalEntryWriteSerializer,
        responses={201: JournalEntrySerializer, 400: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = create_entry(
                tenant=tenant,
                lines=_service_lines(data),
                entry_date=data.get("entry_date"),
                reference=data.get("reference", ""),
                description=data.get("description", ""),
                created_by=request.user,
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class JournalEntryDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntryWriteSerializer

    @extend_schema(tags=["accounting"], responses={200: JournalEntrySerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        try:
            entry = get_entry(tenant=tenant, entry_id=pk)
        except CoreServiceError as exc:
            return service_error_response(exc)
        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=JournalEntryWriteSerializer,
        responses={200: JournalEntrySerializer, 400: dict, 404: dict},
    )
    def put(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = update_entry(
                tenant=tenant,
                entry_id=pk,
                lines=_service_lines(data),
                entry_date=data.get("entry_date"),
                reference=data.get("reference"),
                description=data.get("description"),
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], responses={204: None, 400: dict, 404: dict})
    def delete(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        try:
            delete_entry(tenant=tenant, entry_id=pk)
        except CoreServiceError as exc:
            return service_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
