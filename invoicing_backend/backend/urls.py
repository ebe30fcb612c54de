# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/

Modules:
- /api/documents/   quotes, orders, delivery notes, invoices, credit notes
- /api/accounting/  accounts, balances, journal entries, expenses
- /api/payments/    payments + invoice reconciliation

Operational maturity:
- /api/health/ endpoint (AllowAny) that checks DB connectivity.

Security hardening:
- Django admin path configurable via settings (ADMIN_PATH).
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connections
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "message": {"type": "string"},
                "auth": {"type": "object"},
                "docs": {"type": "object"},
                "modules": {"type": "object"},
            },
        }
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "Invoicing Backend API is running",
            "auth": {
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {
                "swagger": "/api/docs/",
                "schema": "/api/schema/",
            },
            "modules": {
                "documents": "/api/documents/",
                "document_types": "/api/documents/types/",
                "accounting": "/api/accounting/",
                "payments": "/api/payments/",
            },
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
            },
        },
        503: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "error": {"type": "string"},
            },
        },
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    Minimal operational endpoint:
    - Confirms app is responding
    - Confirms DB connection + simple query works
    """
    try:
        conn = connections["default"]
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except DatabaseError as e:
        return Response(
            {"status": "degraded", "db": "down", "error": str(e)}, status=503
        )
    return Response({"status": "ok", "db": "ok"})


# ------------------ ADMIN PATH (HARDENED) ------------------
# Keep trailing slash. In production set ADMIN_PATH to something non-obvious.
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    # Health check / root
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    # App modules
    path("documents/", include("documents.api.urls")),
    path("accounting/", include("accounting.api.urls")),
    path("payments/", include("payments.api.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    # Root convenience: visiting / takes you to Swagger docs
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
