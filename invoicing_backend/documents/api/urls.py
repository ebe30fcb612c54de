# documents/api/urls.py

from django.urls import path

from documents.api.views import (
    DocumentConvertView,
    DocumentDetailView,
    DocumentListCreateView,
    DocumentStatusView,
    DocumentTypeListView,
)

urlpatterns = [
    path("", DocumentListCreateView.as_view(), name="documents"),
    path("types/", DocumentTypeListView.as_view(), name="document-types"),
    path("<uuid:pk>/", DocumentDetailView.as_view(), name="document-detail"),
    path("<uuid:pk>/convert/", DocumentConvertView.as_view(), name="document-convert"),
    path("<uuid:pk>/status/", DocumentStatusView.as_view(), name="document-status"),
]
