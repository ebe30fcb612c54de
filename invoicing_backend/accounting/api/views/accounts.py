# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

ACCOUNTS API

GET  /api/accounting/accounts/                      accounts + derived balances
POST /api/accounting/accounts/                      create an account
GET  /api/accounting/accounts/<id>/balance/         balance over ?start=&end=
POST /api/accounting/accounts/<id>/adjust-balance/  balance adjustment protocol

Balances are computed on every read (sum(debit) - sum(credit)); nothing is cached.
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.serializers.accounts import (
    AccountBalanceSerializer,
    AccountCreateSerializer,
    AccountListSerializer,
    AdjustBalanceSerializer,
    BalanceRangeQuerySerializer,
)
from accounting.api.serializers.journal_entries import JournalEntrySerializer
from accounting.services.account_resolver import create_account
from accounting.services.adjustment_service import adjust_account_balance
from accounting.services.balance_service import get_account_balance, get_account_balances
from accounting.services.exceptions import CoreServiceError
from companies.api.errors import service_error_response
from companies.api.tenant import tenant_from_request

RANGE_PARAMETERS = [
    OpenApiParameter(name="start", type=str, required=False, description="YYYY-MM-DD (inclusive)"),
    OpenApiParameter(name="end", type=str, required=False, description="YYYY-MM-DD (inclusive)"),
]


def _range(request) -> dict:
    q = BalanceRangeQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return {"start": q.validated_data.get("start"), "end": q.validated_data.get("end")}


class AccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=RANGE_PARAMETERS,
        responses=AccountBalanceSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        rows = get_account_balances(tenant=tenant, **_range(request))
        return Response(AccountBalanceSerializer(rows, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=AccountCreateSerializer,
        responses={201: AccountListSerializer, 400: dict},
    )
    def post(self, request, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            account = create_account(tenant=tenant, **s.validated_data)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(AccountListSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], parameters=RANGE_PARAMETERS, responses=dict)
    def get(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        date_range = _range(request)

        try:
            balance = get_account_balance(tenant=tenant, account_id=pk, **date_range)
        except CoreServiceError as exc:
            return service_error_response(exc)

        return Response(
            {
                "account_id": pk,
                "start": date_range["start"],
                "end": date_range["end"],
                "balance": str(balance),
            },
            status=status.HTTP_200_OK,
        )


class AccountAdjustBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AdjustBalanceSerializer

    @extend_schema(
        tags=["accounting"],
        request=AdjustBalanceSerializer,
        responses={200: dict, 201: dict, 400: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        tenant = tenant_from_request(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            result = adjust_account_balance(
                tenant=tenant,
                account_id=pk,
                desired_balance=data["desired_balance"],
                counterpart_account_id=data.get("counterpart_account_id"),
                entry_date=data.get("entry_date"),
                description=data.get("description", ""),
                created_by=request.user,
            )
        except CoreServiceError as exc:
            return service_error_response(exc)

        payload = {
            "account_id": result.account_id,
            "previous_balance": str(result.previous_balance),
            "desired_balance": str(result.desired_balance),
            "delta": str(result.delta),
            "entry": JournalEntrySerializer(result.entry).data if result.entry else None,
        }
        http_status = status.HTTP_200_OK if result.is_noop else status.HTTP_201_CREATED
        return Response(payload, status=http_status)
