# documents/api/views/documents.py

"""
DOCUMENTS API

GET   /api/documents/                 list (filters: kind, status, client, supplier, dates)
POST  /api/documents/                 direct entry
GET   /api/documents/types/           kind registry
GET   /api/documents/<id>/
PATCH /api/documents/<id>/            edit a draft (totals recomputed)
POST  /api/documents/<id>/convert/    spawn a document of another kind
POST  /api/documents/<id>/status/     manual status change
"""

from dataclasses import asdict

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.services.exceptions import CoreServiceError
from companies.api.errors import service_error_response
from companies.api.tenant import tenant_from_request
from documents.api.filters import DocumentFilter
from documents.api.serializers import (
    DocumentConvertSerializer,
    DocumentCreateSerializer,
    DocumentListSerializer,
    DocumentSerializer,
    DocumentStatusSerializer,
    DocumentUpdateSerializer,
)
from documents.document_types import all_document_types
from documents.models import Document
from documents.services.conversion_service import convert_document
from documents.services.document_service import (
    change_document_status,
    create_document,
    documents_for_tenant,
    get_document,
    update_document,
)


def _lines(data) -> list[dict]:
    return [dict(line) for line in data]


def _detail(document) -> dict:
    document = Document.objects.prefetch_related("lines").get(pk=document.pk)
    return DocumentSerializer(document).data


class DocumentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentCreateSerializer
    filterset_class = DocumentFilter
    # Schema generation only; requests go through documents_for_tenant.
    queryset = Document.objects.none()

    @extend_schema(tags=["documents"], responses=DocumentListSerializer(many=True))
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        qs = self.filter_queryset(documents_for_tenant(tenant=tenant))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(DocumentListSerializer(page, many=True).data)
        return Response(DocumentListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["documents"],
        request=DocumentCreateSerializer,
        responses={201: DocumentSerializer, 400: dict, 404: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            document = create_document(
                tenant=tenant,
                kind=data["kind"],
                lines=_lines(data["lines"]),
                client_id=data.get("client_id"),
                supplier_id=data.get("supplier_id"),
                issue_date=data.get("issue_date"),
                due_date=data.get("due_date"),
                currency=data.get("currency") or None,
                discount=data.get("discount"),
                stamp_included=data.get("stamp_included", False),
                stamp_amount=data.get("stamp_amount"),
                status=data.get("status"),
                template=data.get("template", ""),
                notes=data.get("notes", ""),
                created_by=request.user,
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_detail(document), status=status.HTTP_201_CREATED)


class DocumentTypeListView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["documents"], responses=dict)
    def get(self, request, *args, **kwargs):
        return Response([asdict(c) for c in all_document_types()], status=status.HTTP_200_OK)


class DocumentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentUpdateSerializer

    @extend_schema(tags=["documents"], responses={200: DocumentSerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        try:
            document = get_document(tenant=tenant, document_id=pk)
        except CoreServiceError as exc:
            return service_error_response(exc)
        return Response(_detail(document), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["documents"],
        request=DocumentUpdateSerializer,
        responses={200: DocumentSerializer, 400: dict, 404: dict},
    )
    def patch(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        if "lines" in data:
            data["lines"] = _lines(data["lines"])

        try:
            document = update_document(tenant=tenant, document_id=pk, **data)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_detail(document), status=status.HTTP_200_OK)


class DocumentConvertView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentConvertSerializer

    @extend_schema(
        tags=["documents"],
        request=DocumentConvertSerializer,
        responses={201: DocumentSerializer, 400: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            document = convert_document(
                tenant=tenant,
                source_document_id=pk,
                target_kind=s.validated_data["target_kind"],
                created_by=request.user,
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_detail(document), status=status.HTTP_201_CREATED)


class DocumentStatusView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentStatusSerializer

    @extend_schema(
        tags=["documents"],
        request=DocumentStatusSerializer,
        responses={200: DocumentSerializer, 400: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            document = change_document_status(
                tenant=tenant,
                document_id=pk,
                status=s.validated_data["status"],
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_detail(document), status=status.HTTP_200_OK)
