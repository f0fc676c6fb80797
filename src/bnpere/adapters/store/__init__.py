"""Document store adapters."""

from __future__ import annotations

from bnpere.adapters.store.protocol import Document, DocumentStore, DocumentStoreError
from bnpere.adapters.store.sql import SqlDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "DocumentStoreError",
    "SqlDocumentStore",
]
