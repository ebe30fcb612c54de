from .documents import (
    DocumentConvertSerializer,
    DocumentCreateSerializer,
    DocumentLineInputSerializer,
    DocumentLineSerializer,
    DocumentListSerializer,
    DocumentSerializer,
    DocumentStatusSerializer,
    DocumentUpdateSerializer,
)

__all__ = [
    "DocumentConvertSerializer",
    "DocumentCreateSerializer",
    "DocumentLineInputSerializer",
    "DocumentLineSerializer",
    "DocumentListSerializer",
    "DocumentSerializer",
    "DocumentStatusSerializer",
    "DocumentUpdateSerializer",
]
