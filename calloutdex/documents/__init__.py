from calloutdex.documents.base import DocumentStore
from calloutdex.documents.local import LocalDocumentStore

__all__ = ["DocumentStore", "LocalDocumentStore"]
