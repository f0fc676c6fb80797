from __future__ import annotations

import asyncio
from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager, nullcontext
import copy
from datetime import datetime
import threading
from typing import Any
import uuid

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bnpere.adapters.store.models import Base, DocumentRow
from bnpere.adapters.store.protocol import Document, DocumentStoreError

_MISSING = object()


def get_path(document: Document, path: str) -> Any:
    """Resolve a dotted path such as ``relationships.account.data._id``.

    Returns ``_MISSING`` when any segment is absent.
    """
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


class SqlDocumentStore:
    """Document store keeping JSON documents in a single SQL table."""

    def __init__(self, url: str) -> None:
        """Initialize database connection.

        Args:
            url: Database URL (e.g., "sqlite:///bnpere.db")
        """
        self._url = url
        # Sessions on a shared connection must not overlap
        self._lock: AbstractContextManager[Any] = nullcontext()
        if url.startswith("sqlite") and ":memory:" in url:
            # One shared connection, otherwise every session sees an empty DB
            self._engine = create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            self._lock = threading.Lock()
        elif url.startswith("sqlite"):
            self._engine = create_engine(
                url, echo=False, connect_args={"check_same_thread": False}
            )
        else:
            self._engine = create_engine(url, echo=False)
        self._session_factory = sessionmaker(bind=self._engine, class_=Session)

    def initialize(self) -> None:
        """Create the documents table if needed."""
        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager for database sessions."""
        with self._lock:
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    async def query(
        self,
        doctype: str,
        index_fields: Sequence[str],
        selector: dict[str, Any],
        *,
        limit: int | None = None,
    ) -> list[Document]:
        return await asyncio.to_thread(
            self.query_sync, doctype, index_fields, selector, limit=limit
        )

    async def update_or_create(
        self,
        documents: Sequence[Document],
        doctype: str,
        id_fields: Sequence[str],
    ) -> list[Document]:
        return await asyncio.to_thread(
            self.update_or_create_sync, documents, doctype, id_fields
        )

    def query_sync(
        self,
        doctype: str,
        index_fields: Sequence[str],
        selector: dict[str, Any],
        *,
        limit: int | None = None,
    ) -> list[Document]:
        unindexed = [key for key in selector if key not in index_fields]
        if unindexed:
            raise DocumentStoreError(
                f"Selector fields not covered by index on {doctype}: {unindexed}"
            )

        matches: list[Document] = []
        with self.session() as session:
            rows = session.scalars(
                select(DocumentRow)
                .where(DocumentRow.doctype == doctype)
                .order_by(DocumentRow.seq)
            )
            for row in rows:
                if all(get_path(row.body, k) == v for k, v in selector.items()):
                    matches.append(copy.deepcopy(row.body))
                    if limit is not None and len(matches) >= limit:
                        break
        return matches

    def update_or_create_sync(
        self,
        documents: Sequence[Document],
        doctype: str,
        id_fields: Sequence[str],
    ) -> list[Document]:
        if not id_fields:
            raise DocumentStoreError("update_or_create requires at least one id field")

        saved: list[Document] = []
        with self.session() as session:
            rows = session.scalars(
                select(DocumentRow).where(DocumentRow.doctype == doctype)
            ).all()
            by_key: dict[tuple[Any, ...], DocumentRow] = {}
            for row in rows:
                key = _key_of(row.body, id_fields)
                if key is not None:
                    by_key.setdefault(key, row)

            for document in documents:
                key = _key_of(document, id_fields)
                existing = by_key.get(key) if key is not None else None

                if existing is not None:
                    body = {**existing.body, **copy.deepcopy(document)}
                    body["_id"] = existing.doc_id
                    # Assign a new dict so the JSON column is flagged dirty
                    existing.body = body
                    existing.updated_at = datetime.now()
                    row = existing
                else:
                    doc_id = document.get("_id") or uuid.uuid4().hex
                    body = {**copy.deepcopy(document), "_id": doc_id}
                    row = DocumentRow(doc_id=doc_id, doctype=doctype, body=body)
                    session.add(row)

                new_key = _key_of(body, id_fields)
                if new_key is not None:
                    by_key[new_key] = row
                saved.append(copy.deepcopy(body))

        return saved


def _key_of(document: Document, id_fields: Sequence[str]) -> tuple[Any, ...] | None:
    values = tuple(get_path(document, field) for field in id_fields)
    if any(value is _MISSING or value is None for value in values):
        return None
    return tuple(_hashable(value) for value in values)


def _hashable(value: Any) -> Any:
    if isinstance(value, dict | list):
        return repr(value)
    return value
