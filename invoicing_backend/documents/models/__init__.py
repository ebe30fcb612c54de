# documents/models/__init__.py

from documents.models.document import Document
from documents.models.document_line import DocumentLine

__all__ = [
    "Document",
    "DocumentLine",
]
