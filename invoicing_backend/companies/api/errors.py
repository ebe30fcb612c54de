# companies/api/errors.py

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    ConcurrencyConflictError,
    ConversionNotAllowedError,
    CoreServiceError,
    InvalidInputError,
    NotFoundError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConversionNotAllowedError, status.HTTP_409_CONFLICT),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
)


def service_error_response(exc: CoreServiceError) -> Response:
    for error_type, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return Response({"detail": str(exc)}, status=http_status)
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def warnings_payload(warnings) -> list[dict]:
    return [{"code": w.code, "message": w.message, "context": w.context} for w in warnings or []]
