# PATH: accounting/api/views/expenses.py

"""
EXPENSES & ACCOUNT LOADS API

GET/POST /api/accounting/expenses/
GET/POST /api/accounting/account-loads/

Creating either record posts its journal entry in the same transaction.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers.expenses import (
    AccountLoadCreateSerializer,
    AccountLoadSerializer,
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.models.expense import AccountLoad, Expense
from accounting.services.exceptions import CoreServiceError
from accounting.services.expense_service import record_account_load, record_expense
from companies.api.errors import service_error_response
from companies.api.tenant import tenant_from_request


class ExpenseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseCreateSerializer

    @extend_schema(tags=["accounting"], responses=ExpenseSerializer(many=True))
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        qs = Expense.objects.filter(company_id=tenant.company_id).select_related(
            "expense_account",
            "payment_account",
        )
        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            expense = record_expense(tenant=tenant, created_by=request.user, **s.validated_data)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class AccountLoadListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountLoadCreateSerializer

    @extend_schema(tags=["accounting"], responses=AccountLoadSerializer(many=True))
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        qs = AccountLoad.objects.filter(company_id=tenant.company_id)
        return Response(AccountLoadSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=AccountLoadCreateSerializer,
        responses={201: AccountLoadSerializer, 400: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            load = record_account_load(tenant=tenant, created_by=request.user, **s.validated_data)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(AccountLoadSerializer(load).data, status=status.HTTP_201_CREATED)
