# payments/api/views.py

"""
PAYMENTS API

GET    /api/payments/        list (filters: invoice, account, type, method, dates)
POST   /api/payments/        record (+ invoice reconciliation)
PUT    /api/payments/<id>/   edit amount / account / date / method / texts
DELETE /api/payments/<id>/   remove (+ invoice reconciliation)

Write responses carry the refreshed invoice state and any NonBlockingWarning.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.services.exceptions import CoreServiceError
from companies.api.errors import service_error_response, warnings_payload
from companies.api.tenant import tenant_from_request
from payments.api.filters import PaymentFilter
from payments.api.serializers import (
    PaymentCreateSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
)
from payments.models import Payment
from payments.services.payment_service import (
    delete_payment,
    payments_for_tenant,
    record_payment,
    update_payment,
)


def _invoice_state(invoice) -> dict | None:
    if invoice is None:
        return None
    return {
        "id": str(invoice.pk),
        "document_number": invoice.document_number,
        "status": invoice.status,
        "total": str(invoice.total),
        "total_paid": str(invoice.total_paid),
        "remaining_amount": str(invoice.remaining_amount),
    }


def _result_payload(result) -> dict:
    return {
        "payment": PaymentSerializer(result.payment).data if result.payment else None,
        "invoice": _invoice_state(result.invoice),
        "warnings": warnings_payload(result.warnings),
    }


class PaymentListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentCreateSerializer
    filterset_class = PaymentFilter
    # Schema generation only; requests go through payments_for_tenant.
    queryset = Payment.objects.none()

    @extend_schema(tags=["payments"], responses=PaymentSerializer(many=True))
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        qs = self.filter_queryset(payments_for_tenant(tenant=tenant))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PaymentSerializer(page, many=True).data)
        return Response(PaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["payments"],
        request=PaymentCreateSerializer,
        responses={201: dict, 400: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = record_payment(
                tenant=tenant,
                invoice_id=data.get("invoice_id"),
                account_id=data["account_id"],
                payment_type=data.get("payment_type"),
                amount=data["amount"],
                payment_date=data.get("payment_date"),
                payment_method=data["payment_method"],
                reference=data.get("reference", ""),
                notes=data.get("notes", ""),
                attachment_reference=data.get("attachment_reference", ""),
                created_by=request.user,
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_result_payload(result), status=status.HTTP_201_CREATED)


class PaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PaymentUpdateSerializer

    @extend_schema(
        tags=["payments"],
        request=PaymentUpdateSerializer,
        responses={200: dict, 400: dict, 404: dict},
    )
    def put(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = update_payment(tenant=tenant, payment_id=pk, **s.validated_data)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_result_payload(result), status=status.HTTP_200_OK)

    @extend_schema(tags=["payments"], responses={200: dict, 404: dict})
    def delete(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        try:
            result = delete_payment(tenant=tenant, payment_id=pk)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(_result_payload(result), status=status.HTTP_200_OK)
