from .documents import (
    DocumentConvertView,
    DocumentDetailView,
    DocumentListCreateView,
    DocumentStatusView,
    DocumentTypeListView,
)

__all__ = [
    "DocumentConvertView",
    "DocumentDetailView",
    "DocumentListCreateView",
    "DocumentStatusView",
    "DocumentTypeListView",
]
