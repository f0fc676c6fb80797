from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

Document = dict[str, Any]


class DocumentStoreError(Exception):
    """Base error for document store failures."""


class DocumentStore(Protocol):
    """Minimal document store used by the sync job.

    Documents are JSON objects identified by a string ``_id``.
    """

    async def query(
        self,
        doctype: str,
        index_fields: Sequence[str],
        selector: dict[str, Any],
        *,
        limit: int | None = None,
    ) -> list[Document]:
        """
        Return documents of ``doctype`` matching every selector entry.

        Selector keys are dotted paths into the document
        (e.g. ``relationships.account.data._id``) and must be indexed.
        Results are returned in insertion order, at most ``limit`` of them.
        """
        ...

    async def update_or_create(
        self,
        documents: Sequence[Document],
        doctype: str,
        id_fields: Sequence[str],
    ) -> list[Document]:
        """
        Upsert documents, matching stored ones on all ``id_fields``.

        Returns the stored documents, each carrying its ``_id``.
        """
        ...
